"""
Claim, commitment, epoch and proof records.

All records are value types: frozen dataclasses with camelCase JSON
projections. Byte fields are rendered as 0x-prefixed hex.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from reclaimnet.utils.encoding import from_hex, to_hex


# -------------------------
# CLAIMS
# -------------------------

@dataclass(frozen=True)
class ClaimInfo:
    """Which off-chain source and extraction rule produced the claim."""
    provider: str
    parameters: str
    context: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "parameters": self.parameters,
            "context": self.context,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClaimInfo":
        return cls(
            provider=data["provider"],
            parameters=data["parameters"],
            context=data["context"],
        )


@dataclass(frozen=True)
class ClaimData:
    """
    The attested fact.

    Attributes:
        identifier: 0x-prefixed content identifier
        owner: attesting owner address, as text
        epoch: protocol epoch, as text
        timestamp_s: claim time in seconds, as text
    """
    identifier: str
    owner: str
    epoch: str
    timestamp_s: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "identifier": self.identifier,
            "owner": self.owner,
            "epoch": self.epoch,
            "timestampS": self.timestamp_s,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClaimData":
        return cls(
            identifier=data["identifier"],
            owner=data["owner"],
            epoch=str(data["epoch"]),
            timestamp_s=str(data["timestampS"]),
        )


@dataclass(frozen=True)
class SignedClaim:
    claim: ClaimData
    signatures: Tuple[bytes, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "signatures", tuple(bytes(s) for s in self.signatures))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "claim": self.claim.to_dict(),
            "signatures": [to_hex(s) for s in self.signatures],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SignedClaim":
        return cls(
            claim=ClaimData.from_dict(data["claim"]),
            signatures=tuple(from_hex(s) for s in data.get("signatures", [])),
        )


# -------------------------
# WITNESS EPOCHS
# -------------------------

@dataclass(frozen=True)
class WitnessEpoch:
    """
    A validity window with its own witness pool and threshold.

    The window is half-open: [start_ms, end_ms). It is informational; the
    engine verifies against the latest epoch and only logs when a reveal
    falls outside it.
    """
    number: int
    start_ms: int
    end_ms: int
    witnesses: Tuple[bytes, ...]
    threshold: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "witnesses", tuple(bytes(w) for w in self.witnesses))

    def contains(self, now_ms: int) -> bool:
        return self.start_ms <= now_ms < self.end_ms

    def to_dict(self) -> Dict[str, Any]:
        return {
            "number": self.number,
            "startMs": self.start_ms,
            "endMs": self.end_ms,
            "witnesses": [to_hex(w) for w in self.witnesses],
            "threshold": self.threshold,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WitnessEpoch":
        return cls(
            number=data["number"],
            start_ms=data["startMs"],
            end_ms=data["endMs"],
            witnesses=tuple(from_hex(w) for w in data["witnesses"]),
            threshold=data["threshold"],
        )


# -------------------------
# COMMITMENTS & PROOFS
# -------------------------

@dataclass(frozen=True)
class ProofCommitment:
    """
    A pending commitment. Created at commit time and consumed exactly once,
    either by a reveal attempt or by expiry cleanup.
    """
    id: str
    commitment_hash: bytes
    committer: str
    commit_timestamp_ms: int
    identifier_hash: bytes

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "commitmentHash": to_hex(self.commitment_hash),
            "committer": self.committer,
            "commitTimestampMs": self.commit_timestamp_ms,
            "identifierHash": to_hex(self.identifier_hash),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProofCommitment":
        return cls(
            id=data["id"],
            commitment_hash=from_hex(data["commitmentHash"]),
            committer=data["committer"],
            commit_timestamp_ms=data["commitTimestampMs"],
            identifier_hash=from_hex(data["identifierHash"]),
        )


@dataclass(frozen=True)
class Proof:
    """Terminal record of a successful reveal, owned by the committer."""
    id: str
    claimed_at_ms: int
    claim_info: ClaimInfo
    signed_claim: SignedClaim
    owner: str
    commitment_id: str = ""
    witnesses: Tuple[bytes, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "claimedAtMs": self.claimed_at_ms,
            "claimInfo": self.claim_info.to_dict(),
            "signedClaim": self.signed_claim.to_dict(),
            "owner": self.owner,
            "commitmentId": self.commitment_id,
            "witnesses": [to_hex(w) for w in self.witnesses],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Proof":
        return cls(
            id=data["id"],
            claimed_at_ms=data["claimedAtMs"],
            claim_info=ClaimInfo.from_dict(data["claimInfo"]),
            signed_claim=SignedClaim.from_dict(data["signedClaim"]),
            owner=data["owner"],
            commitment_id=data.get("commitmentId", ""),
            witnesses=tuple(from_hex(w) for w in data.get("witnesses", [])),
        )
