"""
Canonical Claim Encoding and Keccak-256 Hashing

Every hash in reclaimnet goes through keccak256() below. Claim structures
are serialized with a self-delimiting binary encoding so that two
structurally different inputs never produce the same bytes:

    structure := tag(1) field*
    text      := len(4, big-endian) utf8-bytes
    sigs      := count(4, big-endian) (len(4) bytes)*

Tags are versioned through CODEC_VERSION. Changing any part of the layout
requires a version bump, since stored commitment hashes depend on it.
"""

from __future__ import annotations

import struct
from typing import Iterable

from Crypto.Hash import keccak as _keccak

from reclaimnet.protocol.models import ClaimData, ClaimInfo, SignedClaim

CODEC_VERSION = 1

TAG_CLAIM_INFO = 0x01
TAG_CLAIM_DATA = 0x02
TAG_SIGNED_CLAIM = 0x03

HASH_LENGTH = 32


def keccak256(*parts: bytes) -> bytes:
    """Keccak-256 (Ethereum flavour, not NIST SHA3) over the concatenated parts."""
    h = _keccak.new(digest_bits=256)
    for part in parts:
        h.update(part)
    return h.digest()


# ===========================================================================
# Canonical encoding
# ===========================================================================


def _encode_bytes(data: bytes) -> bytes:
    return struct.pack(">I", len(data)) + data


def _encode_text(value: str) -> bytes:
    return _encode_bytes(value.encode("utf-8"))


def _encode_list(items: Iterable[bytes]) -> bytes:
    items = list(items)
    return struct.pack(">I", len(items)) + b"".join(_encode_bytes(i) for i in items)


def serialize_claim_info(info: ClaimInfo) -> bytes:
    return (
        bytes([TAG_CLAIM_INFO])
        + _encode_text(info.provider)
        + _encode_text(info.parameters)
        + _encode_text(info.context)
    )


def serialize_claim_data(claim: ClaimData) -> bytes:
    return (
        bytes([TAG_CLAIM_DATA])
        + _encode_text(claim.identifier)
        + _encode_text(claim.owner)
        + _encode_text(claim.epoch)
        + _encode_text(claim.timestamp_s)
    )


def serialize_signed_claim(signed: SignedClaim) -> bytes:
    return (
        bytes([TAG_SIGNED_CLAIM])
        + serialize_claim_data(signed.claim)
        + _encode_list(signed.signatures)
    )


# ===========================================================================
# Derived hashes
# ===========================================================================


def commitment_hash(info: ClaimInfo, signed: SignedClaim, nonce: bytes) -> bytes:
    """
    Hash binding a reveal to its earlier commitment.

    The nonce is appended last, so it needs no length prefix.
    """
    return keccak256(serialize_claim_info(info), serialize_signed_claim(signed), bytes(nonce))


def identifier_hash(identifier: str) -> bytes:
    """
    Hash of the identifier text with its first two characters removed.

    The prefix is dropped by position, whatever it contains, so "ab1234"
    hashes the same body as "0x1234".
    """
    if len(identifier) < 2:
        raise ValueError(f"identifier {identifier!r} is shorter than its 2-character prefix")
    return keccak256(identifier[2:].encode("utf-8"))


def witness_seed(identifier: str) -> bytes:
    """Seed for witness selection: hash of the full identifier text."""
    return keccak256(identifier.encode("utf-8"))


def require_hash(value: bytes, name: str) -> bytes:
    value = bytes(value)
    if len(value) != HASH_LENGTH:
        raise ValueError(f"{name} must be {HASH_LENGTH} bytes, got {len(value)}")
    return value
