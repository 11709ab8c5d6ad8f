"""
Witness pools and selection.

Key concepts:
- Epochs carry the witness pool and signature threshold
- The newest epoch is current
- The witnesses required for a claim are sampled deterministically
  from the current pool, seeded by the claim identifier
"""

from .epochs import WitnessEpochRegistry
from .selection import select

__all__ = ["WitnessEpochRegistry", "select"]
