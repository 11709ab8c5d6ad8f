"""
HTTP client for a remote reclaimnet gateway.

- Sends commit / reveal requests as JSON
- Decodes gateway error bodies back into ReclaimError subclasses, so a
  remote DuplicateCommitment raises the same exception as a local one
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

from reclaimnet.protocol.errors import ReclaimError, error_from_code
from reclaimnet.protocol.models import ClaimInfo, Proof, SignedClaim, WitnessEpoch
from reclaimnet.utils.encoding import from_hex, to_hex


class ReclaimHTTPClient:
    def __init__(self, base_url: str, timeout: float = 10.0, session: Optional[Any] = None):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()

    # ------------------------------------------------------------------
    # Main API
    # ------------------------------------------------------------------
    def commit(self, commitment_hash: bytes, identifier_hash: bytes, committer: str) -> str:
        data = self._post(
            "/commit",
            {
                "commitmentHash": to_hex(commitment_hash),
                "identifierHash": to_hex(identifier_hash),
                "committer": committer,
            },
        )
        return data["commitmentId"]

    def reveal(
        self,
        commitment_id: str,
        claim_info: ClaimInfo,
        signed_claim: SignedClaim,
        nonce: bytes,
        caller: str,
    ) -> List[bytes]:
        claim = signed_claim.claim
        data = self._post(
            "/reveal",
            {
                "commitmentId": commitment_id,
                "caller": caller,
                "provider": claim_info.provider,
                "parameters": claim_info.parameters,
                "context": claim_info.context,
                "identifier": claim.identifier,
                "owner": claim.owner,
                "epoch": claim.epoch,
                "timestampS": claim.timestamp_s,
                "signatures": [to_hex(s) for s in signed_claim.signatures],
                "nonce": to_hex(nonce),
            },
        )
        return [from_hex(w) for w in data["witnesses"]]

    def get_proof(self, proof_id: str) -> Optional[Proof]:
        response = self._session.get(f"{self._base_url}/proofs/{proof_id}", timeout=self._timeout)
        if response.status_code == 404:
            return None
        return Proof.from_dict(self._decode(response))

    def current_epoch(self) -> WitnessEpoch:
        response = self._session.get(f"{self._base_url}/epochs/current", timeout=self._timeout)
        return WitnessEpoch.from_dict(self._decode(response))

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------
    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        response = self._session.post(
            f"{self._base_url}{path}",
            json=payload,
            headers={"Content-Type": "application/json"},
            timeout=self._timeout,
        )
        return self._decode(response)

    def _decode(self, response) -> Any:
        if response.status_code < 400:
            return response.json()

        try:
            body = response.json()
        except ValueError:
            raise ReclaimError(f"gateway returned HTTP {response.status_code}")

        err = body.get("error") if isinstance(body, dict) else None
        if err:
            raise error_from_code(err.get("code", ""), err.get("message", ""))
        detail = body.get("detail") if isinstance(body, dict) else None
        raise ReclaimError(f"gateway returned HTTP {response.status_code}: {detail}")
