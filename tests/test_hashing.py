"""
Tests for canonical claim encoding and Keccak-256 hashing.
"""

import pytest

from reclaimnet.crypto.hashing import (
    TAG_CLAIM_INFO,
    commitment_hash,
    identifier_hash,
    keccak256,
    require_hash,
    serialize_claim_info,
    serialize_signed_claim,
    witness_seed,
)
from reclaimnet.protocol.models import ClaimData, ClaimInfo, SignedClaim


class TestKeccak:
    def test_empty_input_vector(self):
        assert keccak256(b"").hex() == (
            "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
        )

    def test_abc_vector(self):
        assert keccak256(b"abc").hex() == (
            "4e03657aea45a94fc7d47ba826c8d667c0d1e6e33a64a036ec44f58fa12d6c45"
        )

    def test_parts_are_concatenated(self):
        assert keccak256(b"ab", b"c") == keccak256(b"abc")


class TestCanonicalEncoding:
    def test_claim_info_layout(self):
        encoded = serialize_claim_info(ClaimInfo("ab", "c", ""))
        assert encoded == (
            bytes([TAG_CLAIM_INFO])
            + b"\x00\x00\x00\x02ab"
            + b"\x00\x00\x00\x01c"
            + b"\x00\x00\x00\x00"
        )

    def test_field_boundaries_are_unambiguous(self):
        left = serialize_claim_info(ClaimInfo("ab", "c", ""))
        right = serialize_claim_info(ClaimInfo("a", "bc", ""))
        assert left != right

    def test_signature_boundaries_are_unambiguous(self, claim_data):
        one = SignedClaim(claim=claim_data, signatures=(b"\x01\x02",))
        two = SignedClaim(claim=claim_data, signatures=(b"\x01", b"\x02"))
        assert serialize_signed_claim(one) != serialize_signed_claim(two)

    def test_utf8_text(self):
        encoded = serialize_claim_info(ClaimInfo("é", "", ""))
        assert b"\x00\x00\x00\x02\xc3\xa9" in encoded


class TestDerivedHashes:
    def test_commitment_hash_is_deterministic(self, claim_info, claim_data):
        signed = SignedClaim(claim=claim_data, signatures=(b"\x00" * 65,))
        assert commitment_hash(claim_info, signed, b"n") == commitment_hash(claim_info, signed, b"n")

    def test_commitment_hash_depends_on_nonce(self, claim_info, claim_data):
        signed = SignedClaim(claim=claim_data)
        assert commitment_hash(claim_info, signed, b"a") != commitment_hash(claim_info, signed, b"b")

    def test_commitment_hash_depends_on_every_field(self, claim_info, claim_data):
        signed = SignedClaim(claim=claim_data)
        base = commitment_hash(claim_info, signed, b"n")

        variants = [
            (ClaimInfo("other", claim_info.parameters, claim_info.context), signed),
            (ClaimInfo(claim_info.provider, "{}", claim_info.context), signed),
            (ClaimInfo(claim_info.provider, claim_info.parameters, "{}"), signed),
            (claim_info, SignedClaim(claim=ClaimData("0x00", claim_data.owner, "1", "1700000000"))),
            (claim_info, SignedClaim(claim=ClaimData(claim_data.identifier, "0x00", "1", "1700000000"))),
            (claim_info, SignedClaim(claim=ClaimData(claim_data.identifier, claim_data.owner, "2", "1700000000"))),
            (claim_info, SignedClaim(claim=ClaimData(claim_data.identifier, claim_data.owner, "1", "1700000001"))),
        ]
        for info, signed_variant in variants:
            assert commitment_hash(info, signed_variant, b"n") != base

    def test_identifier_hash_strips_prefix(self):
        assert identifier_hash("0xabc123") == keccak256(b"abc123")

    def test_identifier_hash_drops_any_two_character_prefix(self):
        assert identifier_hash("ab1234") == keccak256(b"1234")
        assert identifier_hash("ab1234") == identifier_hash("0x1234")
        assert identifier_hash("0x") == keccak256(b"")

    def test_identifier_hash_too_short(self):
        with pytest.raises(ValueError):
            identifier_hash("a")

    def test_witness_seed_uses_full_identifier(self):
        assert witness_seed("0xabc123") == keccak256(b"0xabc123")

    def test_require_hash_length(self):
        assert require_hash(b"\x00" * 32, "h") == b"\x00" * 32
        with pytest.raises(ValueError, match="32 bytes"):
            require_hash(b"\x00" * 31, "h")
