"""
Commitment ledger.

Owns the two registry maps, plus a record of expired ids:

    commitments               commitment id   -> ProofCommitment
    identifier_to_commitment  identifier hash -> commitment id
    expired_commitments       commitment id   -> expiry time (ms)

and is the only code that mutates them. At most one live commitment exists
per identifier hash; a commitment leaves the registry exactly once, through
take_for_reveal() or expire_many().
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from reclaimnet.crypto.hashing import require_hash
from reclaimnet.protocol.errors import (
    CommitmentNotFound,
    DuplicateCommitment,
    NotExpired,
    UnauthorizedRevealer,
)
from reclaimnet.protocol.models import ProofCommitment
from reclaimnet.utils.encoding import to_hex

from .store import COMMITMENTS, EXPIRED_COMMITMENTS, IDENTIFIER_INDEX, RecordStore

logger = logging.getLogger(__name__)


class CommitmentLedger:
    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def commit(
        self,
        commitment_hash: bytes,
        identifier_hash: bytes,
        committer: str,
        now: int,
    ) -> str:
        """
        Store a new pending commitment and return its id.

        Raises:
            DuplicateCommitment: identifier_hash already has a live commitment
        """
        commitment_hash = require_hash(commitment_hash, "commitment_hash")
        identifier_hash = require_hash(identifier_hash, "identifier_hash")

        with self._store.transaction():
            if self._store.exists(IDENTIFIER_INDEX, identifier_hash):
                raise DuplicateCommitment(
                    f"identifier {to_hex(identifier_hash)} already has a pending commitment"
                )

            commitment = ProofCommitment(
                id=self._store.new_id(),
                commitment_hash=commitment_hash,
                committer=committer,
                commit_timestamp_ms=now,
                identifier_hash=identifier_hash,
            )
            self._store.put(COMMITMENTS, commitment.id, commitment)
            self._store.put(IDENTIFIER_INDEX, identifier_hash, commitment.id)

        logger.info("Commitment %s stored for %s", commitment.id, committer)
        return commitment.id

    def take_for_reveal(self, commitment_id: str, caller: str, now: int) -> ProofCommitment:
        """
        Remove and return a commitment for its single reveal attempt.

        The commitment is consumed here whether or not the reveal later
        verifies.

        Raises:
            CommitmentNotFound: unknown or already consumed id
            UnauthorizedRevealer: caller is not the committer
        """
        with self._store.transaction():
            commitment: Optional[ProofCommitment] = self._store.get(COMMITMENTS, commitment_id)
            if commitment is None:
                raise CommitmentNotFound(f"commitment {commitment_id} not found")
            if caller != commitment.committer:
                raise UnauthorizedRevealer(
                    f"commitment {commitment_id} can only be revealed by its committer"
                )
            self._remove(commitment)

        logger.debug(
            "Commitment %s taken for reveal after %d ms",
            commitment_id,
            now - commitment.commit_timestamp_ms,
        )
        return commitment

    def expire_many(self, commitment_ids: Iterable[str], now: int, max_age: int) -> List[str]:
        """
        Remove commitments older than max_age milliseconds.

        Each id is handled on its own: ids processed before a failing one
        stay expired.

        Raises:
            CommitmentNotFound: an id is unknown
            NotExpired: an id is still within max_age
        """
        expired: List[str] = []
        for commitment_id in commitment_ids:
            with self._store.transaction():
                commitment: Optional[ProofCommitment] = self._store.get(COMMITMENTS, commitment_id)
                if commitment is None:
                    raise CommitmentNotFound(f"commitment {commitment_id} not found")
                age = now - commitment.commit_timestamp_ms
                if age <= max_age:
                    raise NotExpired(
                        f"commitment {commitment_id} is {age} ms old, limit is {max_age} ms"
                    )
                self._remove(commitment)
                self._store.put(EXPIRED_COMMITMENTS, commitment_id, now)
            expired.append(commitment_id)
            logger.info("Commitment %s expired (age %d ms)", commitment_id, age)
        return expired

    def _remove(self, commitment: ProofCommitment) -> None:
        self._store.delete(COMMITMENTS, commitment.id)
        self._store.delete(IDENTIFIER_INDEX, commitment.identifier_hash)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, commitment_id: str) -> Optional[ProofCommitment]:
        return self._store.get(COMMITMENTS, commitment_id)

    def find_by_identifier(self, identifier_hash: bytes) -> Optional[ProofCommitment]:
        commitment_id = self._store.get(IDENTIFIER_INDEX, bytes(identifier_hash))
        if commitment_id is None:
            return None
        return self._store.get(COMMITMENTS, commitment_id)

    def pending_ids(self) -> List[str]:
        return self._store.keys(COMMITMENTS)

    def expired_ids(self, now: int, max_age: int) -> List[str]:
        """Ids that expire_many() would accept right now."""
        result = []
        for commitment_id in self._store.keys(COMMITMENTS):
            commitment = self._store.get(COMMITMENTS, commitment_id)
            if commitment is not None and now - commitment.commit_timestamp_ms > max_age:
                result.append(commitment_id)
        return result

    def was_expired(self, commitment_id: str) -> bool:
        return self._store.exists(EXPIRED_COMMITMENTS, commitment_id)

    def __len__(self) -> int:
        return len(self._store.keys(COMMITMENTS))
