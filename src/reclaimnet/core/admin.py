"""
Admin authorization gate.

Configuration changes and commitment cleanup are privileged. Callers prove
privilege by presenting the AdminCapability object minted together with
the gate; the capability cannot be forged, only passed along. The engine
itself never checks authorization.
"""

from __future__ import annotations

import hmac
import logging
import secrets
from typing import Iterable, List, Sequence, Tuple

from reclaimnet.protocol.errors import AdminAuthorizationError
from reclaimnet.protocol.models import WitnessEpoch

from .engine import AttestationEngine

logger = logging.getLogger(__name__)


class AdminCapability:
    """Unforgeable token granting admin rights over one AdminGate."""

    __slots__ = ("_secret",)

    def __init__(self, secret: bytes) -> None:
        self._secret = secret

    def matches(self, secret: bytes) -> bool:
        return hmac.compare_digest(self._secret, secret)

    def __repr__(self) -> str:
        return "AdminCapability(<redacted>)"


class AdminGate:
    """
    Authorization layer in front of configuration-mutating operations.

    Usage:
        gate, cap = AdminGate.create(engine)
        gate.add_new_epoch(cap, witnesses, threshold=2, now=now_ms())
    """

    def __init__(self, engine: AttestationEngine, secret: bytes) -> None:
        self._engine = engine
        self._secret = secret

    @classmethod
    def create(cls, engine: AttestationEngine) -> Tuple["AdminGate", AdminCapability]:
        secret = secrets.token_bytes(32)
        return cls(engine, secret), AdminCapability(secret)

    @property
    def engine(self) -> AttestationEngine:
        return self._engine

    def _authorize(self, capability: AdminCapability, action: str) -> None:
        if not isinstance(capability, AdminCapability) or not capability.matches(self._secret):
            logger.warning("Unauthorized admin action rejected: %s", action)
            raise AdminAuthorizationError(f"not authorized to {action}")

    def add_new_epoch(
        self,
        capability: AdminCapability,
        witnesses: Sequence[bytes],
        threshold: int,
        now: int,
    ) -> WitnessEpoch:
        self._authorize(capability, "add_new_epoch")
        return self._engine.epochs.add_new_epoch(witnesses, threshold, now)

    def update_witnesses(
        self,
        capability: AdminCapability,
        witnesses: Sequence[bytes],
        now: int,
    ) -> WitnessEpoch:
        self._authorize(capability, "update_witnesses")
        return self._engine.epochs.update_witnesses(witnesses, now)

    def update_witnesses_num_threshold(
        self,
        capability: AdminCapability,
        threshold: int,
        now: int,
    ) -> WitnessEpoch:
        self._authorize(capability, "update_witnesses_num_threshold")
        return self._engine.epochs.update_witnesses_num_threshold(threshold, now)

    def expire_commitments(
        self,
        capability: AdminCapability,
        commitment_ids: Iterable[str],
        now: int,
    ) -> List[str]:
        self._authorize(capability, "expire_commitments")
        return self._engine.expire_many(commitment_ids, now)
