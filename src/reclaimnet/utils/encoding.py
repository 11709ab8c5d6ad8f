"""
Hex helpers shared by the JSON projections, the HTTP gateway and the CLI.
"""

from __future__ import annotations


def to_hex(data: bytes) -> str:
    """Render bytes as 0x-prefixed lowercase hex."""
    return "0x" + bytes(data).hex()


def from_hex(value: str) -> bytes:
    """Parse hex with or without a 0x prefix. Raises ValueError on bad input."""
    if not isinstance(value, str):
        raise ValueError(f"expected hex string, got {type(value).__name__}")
    text = value[2:] if value[:2] in ("0x", "0X") else value
    return bytes.fromhex(text)
