"""
Witness Signatures (secp256k1, Ethereum personal-sign)

Witnesses sign claims the way an Ethereum wallet signs a personal message:

    keccak256("\\x19Ethereum Signed Message:\\n" + len(body) + body)

and verifiers recover the signer's 20-byte address from the 65-byte
r || s || v signature. There is no public-key registry: a witness IS its
address, so verification is offline-capable and needs only public data.

Key handling:
- WitnessSigner wraps a coincurve private key
- PEM import/export goes through `cryptography` (SEC1/PKCS8, curve secp256k1)
- generate() is for tests and tooling; production keys come from a KMS/HSM
"""

from __future__ import annotations

from typing import Optional

from coincurve import PrivateKey, PublicKey
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from reclaimnet.crypto.hashing import keccak256
from reclaimnet.protocol.errors import InvalidSignature
from reclaimnet.protocol.models import ClaimData
from reclaimnet.utils.encoding import to_hex

SIGNATURE_LENGTH = 65
ADDRESS_LENGTH = 20
PERSONAL_SIGN_PREFIX = b"\x19Ethereum Signed Message:\n"


def personal_message(body: str) -> bytes:
    """Wrap a message body in the Ethereum personal-sign envelope."""
    body_bytes = body.encode("utf-8")
    return PERSONAL_SIGN_PREFIX + str(len(body_bytes)).encode("ascii") + body_bytes


def claim_message(claim: ClaimData) -> bytes:
    """The exact bytes each witness signs for a claim."""
    body = "\n".join([claim.identifier, claim.owner, claim.timestamp_s, claim.epoch])
    return personal_message(body)


def address_from_public_key(public_key: PublicKey) -> bytes:
    """Last 20 bytes of keccak256 over the uncompressed point (without 0x04)."""
    return keccak256(public_key.format(compressed=False)[1:])[-ADDRESS_LENGTH:]


def recover(signature: bytes, message: bytes) -> bytes:
    """
    Recover the signer address of `message` from a 65-byte signature.

    Args:
        signature: r (32) || s (32) || v (1), v in {0, 1, 27, 28}
        message: the full message bytes; hashed with keccak256 here

    Returns:
        20-byte signer address

    Raises:
        InvalidSignature: wrong length, bad recovery id, or unrecoverable point
    """
    signature = bytes(signature)
    if len(signature) != SIGNATURE_LENGTH:
        raise InvalidSignature(
            f"signature must be {SIGNATURE_LENGTH} bytes, got {len(signature)}"
        )

    v = signature[64]
    if v >= 27:
        v -= 27
    if v not in (0, 1):
        raise InvalidSignature(f"invalid recovery id {signature[64]}")

    try:
        public_key = PublicKey.from_signature_and_message(
            signature[:64] + bytes([v]),
            keccak256(message),
            hasher=None,
        )
    except ValueError as e:
        raise InvalidSignature(f"signature recovery failed: {e}") from e

    return address_from_public_key(public_key)


class WitnessSigner:
    """
    secp256k1 signer held by a witness.

    Usage:
        signer = WitnessSigner.generate()
        signature = signer.sign_claim(claim)
        assert recover(signature, claim_message(claim)) == signer.address
    """

    def __init__(self, private_key: PrivateKey):
        self._private_key = private_key
        self._address = address_from_public_key(private_key.public_key)

    @property
    def address(self) -> bytes:
        return self._address

    @property
    def address_hex(self) -> str:
        return to_hex(self._address)

    @property
    def private_key_bytes(self) -> bytes:
        return self._private_key.secret

    def sign_message(self, message: bytes) -> bytes:
        """Sign keccak256(message). Returns r || s || v with v in {27, 28}."""
        raw = self._private_key.sign_recoverable(keccak256(message), hasher=None)
        return raw[:64] + bytes([raw[64] + 27])

    def sign_claim(self, claim: ClaimData) -> bytes:
        return self.sign_message(claim_message(claim))

    @classmethod
    def generate(cls) -> "WitnessSigner":
        """
        Generate a fresh key.

        WARNING: use only for testing and local tooling.
        """
        return cls(PrivateKey())

    @classmethod
    def from_private_bytes(cls, key_bytes: bytes) -> "WitnessSigner":
        """Create a signer from a raw 32-byte secret."""
        return cls(PrivateKey(bytes(key_bytes)))

    @classmethod
    def from_pem_file(cls, path: str, password: Optional[bytes] = None) -> "WitnessSigner":
        """Load a signer from a PEM-encoded secp256k1 private key."""
        with open(path, "rb") as f:
            private_key = serialization.load_pem_private_key(f.read(), password=password)
        if not isinstance(private_key, ec.EllipticCurvePrivateKey):
            raise TypeError(f"Expected EC private key, got {type(private_key)}")
        if not isinstance(private_key.curve, ec.SECP256K1):
            raise TypeError(f"Expected secp256k1 key, got curve {private_key.curve.name}")
        secret = private_key.private_numbers().private_value
        return cls(PrivateKey.from_int(secret))

    def _as_cryptography_key(self) -> ec.EllipticCurvePrivateKey:
        return ec.derive_private_key(self._private_key.to_int(), ec.SECP256K1())

    def export_private_pem(self, password: Optional[bytes] = None) -> bytes:
        if password:
            encryption = serialization.BestAvailableEncryption(password)
        else:
            encryption = serialization.NoEncryption()
        return self._as_cryptography_key().private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=encryption,
        )

    def export_public_pem(self) -> bytes:
        """Export the public key as PEM for distribution."""
        return self._as_cryptography_key().public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
