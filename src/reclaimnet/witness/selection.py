"""
Deterministic Witness Selection

Chooses which k witnesses of an epoch must sign a given claim. The choice
is a pure function of (pool, seed_hash, k), so any verifier can reproduce
it from public data alone. No PRNG is involved:

    offset = 0
    repeat k times:
        value  = 4 bytes of seed_hash at offset (wrapping), big-endian
        index  = value mod len(pool)
        pick pool[index], then swap-remove it from the pool
        offset += 4

The algorithm is part of the verification contract. Changing it changes
which signatures are accepted for every claim.
"""

from __future__ import annotations

import logging
from typing import List, Sequence, TypeVar

from reclaimnet.protocol.errors import InsufficientWitnessPool

logger = logging.getLogger(__name__)

T = TypeVar("T")

WINDOW_BYTES = 4


def _read_window(seed_hash: bytes, offset: int) -> int:
    n = len(seed_hash)
    start = offset % n
    window = bytes(seed_hash[(start + j) % n] for j in range(WINDOW_BYTES))
    return int.from_bytes(window, "big")


def select(pool: Sequence[T], seed_hash: bytes, k: int) -> List[T]:
    """
    Sample k distinct members of `pool`, in selection order.

    Raises:
        InsufficientWitnessPool: if k exceeds the pool size
        ValueError: if k is negative or the seed is empty
    """
    if k < 0:
        raise ValueError("k must be non-negative")
    if k > len(pool):
        raise InsufficientWitnessPool(
            f"cannot select {k} witnesses from a pool of {len(pool)}"
        )
    if k and not seed_hash:
        raise ValueError("seed_hash must not be empty")

    remaining = list(pool)
    selected: List[T] = []
    byte_offset = 0

    for _ in range(k):
        index = _read_window(seed_hash, byte_offset) % len(remaining)
        selected.append(remaining[index])
        remaining[index] = remaining[-1]
        remaining.pop()
        byte_offset += WINDOW_BYTES

    logger.debug("Selected %d of %d witnesses", k, len(pool))
    return selected
