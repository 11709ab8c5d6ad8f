"""
Witness epoch registry.

Epochs are append-only with strictly increasing numbers; the newest one is
current and supplies the witness pool and threshold for every reveal.
Changing only the witness set or only the threshold starts a new epoch
that carries the other value over, so past epochs are never rewritten.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from reclaimnet.core.store import EPOCHS, RecordStore
from reclaimnet.protocol.errors import InsufficientWitnessPool, NoActiveEpoch
from reclaimnet.protocol.models import WitnessEpoch
from reclaimnet.utils.encoding import to_hex

logger = logging.getLogger(__name__)

MAX_EPOCH_NUMBER = 255
MAX_THRESHOLD = 255
ADDRESS_LENGTH = 20


def _validate_witnesses(witnesses: Sequence[bytes]) -> tuple:
    addresses = tuple(bytes(w) for w in witnesses)
    for address in addresses:
        if len(address) != ADDRESS_LENGTH:
            raise ValueError(
                f"witness address must be {ADDRESS_LENGTH} bytes, got {len(address)}"
            )
    if len(set(addresses)) != len(addresses):
        raise ValueError("witness set contains duplicates")
    return addresses


class WitnessEpochRegistry:
    def __init__(self, store: RecordStore, epoch_duration_ms: int) -> None:
        self._store = store
        self._epoch_duration_ms = epoch_duration_ms

    def add_new_epoch(self, witnesses: Sequence[bytes], threshold: int, now: int) -> WitnessEpoch:
        """
        Append a new epoch starting at `now` and make it current.

        Raises:
            InsufficientWitnessPool: threshold exceeds the witness count
            ValueError: malformed witnesses, threshold < 1, or epoch numbers exhausted
        """
        addresses = _validate_witnesses(witnesses)
        if threshold < 1 or threshold > MAX_THRESHOLD:
            raise ValueError(f"threshold must be between 1 and {MAX_THRESHOLD}")
        if threshold > len(addresses):
            raise InsufficientWitnessPool(
                f"threshold {threshold} exceeds witness count {len(addresses)}"
            )

        with self._store.transaction():
            current = self._latest()
            number = current.number + 1 if current else 1
            if number > MAX_EPOCH_NUMBER:
                raise ValueError("epoch numbers exhausted")

            epoch = WitnessEpoch(
                number=number,
                start_ms=now,
                end_ms=now + self._epoch_duration_ms,
                witnesses=addresses,
                threshold=threshold,
            )
            self._store.put(EPOCHS, number, epoch)

        logger.info(
            "Epoch %d started with %d witnesses (threshold %d): %s",
            epoch.number,
            len(addresses),
            threshold,
            ", ".join(to_hex(a) for a in addresses),
        )
        return epoch

    def update_witnesses(self, witnesses: Sequence[bytes], now: int) -> WitnessEpoch:
        """Start a new epoch with a new witness set and the current threshold."""
        return self.add_new_epoch(witnesses, self.current_epoch().threshold, now)

    def update_witnesses_num_threshold(self, threshold: int, now: int) -> WitnessEpoch:
        """Start a new epoch with the current witness set and a new threshold."""
        return self.add_new_epoch(self.current_epoch().witnesses, threshold, now)

    def _latest(self) -> Optional[WitnessEpoch]:
        numbers = self._store.keys(EPOCHS)
        if not numbers:
            return None
        return self._store.get(EPOCHS, max(numbers))

    def current_epoch(self) -> WitnessEpoch:
        epoch = self._latest()
        if epoch is None:
            raise NoActiveEpoch("no witness epoch has been configured")
        return epoch

    def fetch_epoch(self, number: int) -> Optional[WitnessEpoch]:
        return self._store.get(EPOCHS, number)

    def epochs(self) -> List[WitnessEpoch]:
        return [self._store.get(EPOCHS, n) for n in sorted(self._store.keys(EPOCHS))]
