"""
Hashing and signature primitives.

All hashing is Keccak-256; all witness signatures are secp256k1 in the
Ethereum personal-sign format.
"""

from .hashing import (
    CODEC_VERSION,
    commitment_hash,
    identifier_hash,
    keccak256,
    serialize_claim_data,
    serialize_claim_info,
    serialize_signed_claim,
    witness_seed,
)
from .signing import (
    WitnessSigner,
    address_from_public_key,
    claim_message,
    personal_message,
    recover,
)

__all__ = [
    "CODEC_VERSION",
    "commitment_hash",
    "identifier_hash",
    "keccak256",
    "serialize_claim_data",
    "serialize_claim_info",
    "serialize_signed_claim",
    "witness_seed",
    "WitnessSigner",
    "address_from_public_key",
    "claim_message",
    "personal_message",
    "recover",
]
