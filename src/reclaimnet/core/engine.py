"""
Commit-Reveal Attestation Engine

Verifies off-chain claims against a quorum of witness signatures, with the
verification step protected from front-running by commit-reveal:

    commit(H(claim_info || signed_claim || nonce), H(identifier))
        ... time passes ...
    reveal(commitment_id, claim_info, signed_claim, nonce)

State per identifier:

    NoCommitment -> Committed -> Revealed | Expired

A reveal consumes its commitment on the first attempt. If verification
then fails, nothing else is persisted and the caller must commit again;
the forfeited id reports NoCommitment.

Epoch windows are informational: quorum is always checked against the
latest epoch, and a reveal outside its [start_ms, end_ms) window is only
logged.

CRITICAL INVARIANTS:
1. At most one live commitment per identifier hash
2. A stored commitment hash is never mutated
3. A Proof exists only for a reveal whose quorum verified
4. The engine never reads a clock; `now` (ms) is always supplied
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from reclaimnet.crypto.hashing import commitment_hash, identifier_hash, witness_seed
from reclaimnet.crypto.signing import claim_message, recover
from reclaimnet.protocol.enums import CommitmentStatus
from reclaimnet.protocol.errors import (
    DuplicateSigner,
    InvalidCommitment,
    InvalidNonce,
    ReclaimError,
    RevealTooEarly,
    RevealTooLate,
    WitnessCountMismatch,
    WitnessSetMismatch,
)
from reclaimnet.protocol.models import (
    ClaimInfo,
    Proof,
    ProofCommitment,
    SignedClaim,
    WitnessEpoch,
)
from reclaimnet.utils.encoding import to_hex
from reclaimnet.witness.epochs import WitnessEpochRegistry
from reclaimnet.witness.selection import select

from .ledger import CommitmentLedger
from .settings import EngineSettings
from .store import PROOF_BY_COMMITMENT, PROOFS, InMemoryStore, RecordStore

logger = logging.getLogger(__name__)


def verify_quorum(signed_claim: SignedClaim, epoch: WitnessEpoch) -> List[bytes]:
    """
    Check that the claim is signed by exactly the witnesses selected for it.

    Returns:
        Recovered signer addresses, in signature order

    Raises:
        InsufficientWitnessPool, InvalidSignature, DuplicateSigner,
        WitnessCountMismatch, WitnessSetMismatch
    """
    claim = signed_claim.claim
    expected = select(epoch.witnesses, witness_seed(claim.identifier), epoch.threshold)

    message = claim_message(claim)
    signed: List[bytes] = []
    for signature in signed_claim.signatures:
        address = recover(signature, message)
        if address in signed:
            raise DuplicateSigner(f"witness {to_hex(address)} signed more than once")
        signed.append(address)

    if len(signed) != len(expected):
        raise WitnessCountMismatch(
            f"expected {len(expected)} witness signatures, got {len(signed)}"
        )

    remaining = list(expected)
    for address in signed:
        if address not in remaining:
            raise WitnessSetMismatch(f"{to_hex(address)} is not a selected witness")
        remaining.remove(address)
    if remaining:
        raise WitnessSetMismatch("signers do not match the selected witnesses")

    return signed


class AttestationEngine:
    def __init__(
        self,
        store: Optional[RecordStore] = None,
        settings: Optional[EngineSettings] = None,
        epochs: Optional[WitnessEpochRegistry] = None,
    ) -> None:
        self._store = store if store is not None else InMemoryStore()
        self._settings = settings or EngineSettings()
        self._ledger = CommitmentLedger(self._store)
        self._epochs = epochs or WitnessEpochRegistry(
            self._store, self._settings.epoch_duration_ms
        )

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    @property
    def ledger(self) -> CommitmentLedger:
        return self._ledger

    @property
    def epochs(self) -> WitnessEpochRegistry:
        return self._epochs

    # ------------------------------------------------------------------
    # Commit / reveal / expire
    # ------------------------------------------------------------------

    def commit(self, commitment_hash: bytes, identifier_hash: bytes, committer: str, now: int) -> str:
        return self._ledger.commit(commitment_hash, identifier_hash, committer, now)

    def reveal(
        self,
        commitment_id: str,
        claim_info: ClaimInfo,
        signed_claim: SignedClaim,
        nonce: bytes,
        caller: str,
        now: int,
    ) -> List[bytes]:
        """
        Reveal a committed claim and issue a Proof if its quorum verifies.

        Returns:
            Addresses of the witnesses whose signatures were accepted

        Raises:
            CommitmentNotFound, UnauthorizedRevealer: commitment left untouched
            RevealTooEarly, RevealTooLate, InvalidNonce, InvalidCommitment,
            InvalidSignature, DuplicateSigner, WitnessCountMismatch,
            WitnessSetMismatch, InsufficientWitnessPool, NoActiveEpoch:
                commitment forfeited
        """
        commitment = self._ledger.take_for_reveal(commitment_id, caller, now)

        try:
            with self._store.transaction():
                self._check_timing(commitment, now)
                self._check_binding(commitment, claim_info, signed_claim, nonce)
                epoch = self._epochs.current_epoch()
                if not epoch.contains(now):
                    logger.warning(
                        "Reveal of commitment %s at %d is outside epoch %d window [%d, %d)",
                        commitment_id,
                        now,
                        epoch.number,
                        epoch.start_ms,
                        epoch.end_ms,
                    )
                witnesses = verify_quorum(signed_claim, epoch)

                proof = Proof(
                    id=self._store.new_id(),
                    claimed_at_ms=now,
                    claim_info=claim_info,
                    signed_claim=signed_claim,
                    owner=commitment.committer,
                    commitment_id=commitment.id,
                    witnesses=tuple(witnesses),
                )
                self._store.put(PROOFS, proof.id, proof)
                self._store.put(PROOF_BY_COMMITMENT, commitment.id, proof.id)
        except ReclaimError as e:
            logger.warning("Reveal of commitment %s rejected: %s (%s)", commitment_id, e, e.code.value)
            raise

        logger.info(
            "Proof %s issued to %s for %s (%d witnesses)",
            proof.id,
            proof.owner,
            signed_claim.claim.identifier,
            len(witnesses),
        )
        return witnesses

    def expire_many(self, commitment_ids: Iterable[str], now: int) -> List[str]:
        """Expire stale commitments using the configured maximum age."""
        return self._ledger.expire_many(commitment_ids, now, self._settings.commitment_max_age_ms)

    def expire_stale(self, now: int) -> List[str]:
        """Expire every commitment that is currently past its maximum age."""
        max_age = self._settings.commitment_max_age_ms
        return self._ledger.expire_many(self._ledger.expired_ids(now, max_age), now, max_age)

    # ------------------------------------------------------------------
    # Verification steps
    # ------------------------------------------------------------------

    def _check_timing(self, commitment: ProofCommitment, now: int) -> None:
        elapsed = now - commitment.commit_timestamp_ms
        min_delay = self._settings.min_reveal_delay_ms
        if elapsed < min_delay:
            raise RevealTooEarly(f"reveal after {elapsed} ms, minimum delay is {min_delay} ms")
        deadline = self._settings.reveal_deadline_ms
        if elapsed > deadline:
            raise RevealTooLate(f"reveal after {elapsed} ms, deadline is {deadline} ms")

    def _check_binding(
        self,
        commitment: ProofCommitment,
        claim_info: ClaimInfo,
        signed_claim: SignedClaim,
        nonce: bytes,
    ) -> None:
        if commitment_hash(claim_info, signed_claim, nonce) != commitment.commitment_hash:
            raise InvalidNonce("revealed data does not match the commitment hash")
        if identifier_hash(signed_claim.claim.identifier) != commitment.identifier_hash:
            raise InvalidCommitment("claim identifier does not match the committed identifier")

    def verify_signed_claim(self, signed_claim: SignedClaim) -> List[bytes]:
        """Quorum check against the current epoch, without commit-reveal."""
        return verify_quorum(signed_claim, self._epochs.current_epoch())

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_proof(self, proof_id: str) -> Optional[Proof]:
        return self._store.get(PROOFS, proof_id)

    def proofs_for_owner(self, owner: str) -> List[Proof]:
        proofs = (self._store.get(PROOFS, key) for key in self._store.keys(PROOFS))
        return sorted(
            (p for p in proofs if p is not None and p.owner == owner),
            key=lambda p: p.claimed_at_ms,
        )

    def commitment_status(self, commitment_id: str) -> CommitmentStatus:
        if self._ledger.get(commitment_id) is not None:
            return CommitmentStatus.COMMITTED
        if self._store.exists(PROOF_BY_COMMITMENT, commitment_id):
            return CommitmentStatus.REVEALED
        if self._ledger.was_expired(commitment_id):
            return CommitmentStatus.EXPIRED
        return CommitmentStatus.NO_COMMITMENT

    def proof_for_commitment(self, commitment_id: str) -> Optional[Proof]:
        proof_id = self._store.get(PROOF_BY_COMMITMENT, commitment_id)
        if proof_id is None:
            return None
        return self._store.get(PROOFS, proof_id)
