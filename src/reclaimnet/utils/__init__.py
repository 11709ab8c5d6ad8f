from .encoding import from_hex, to_hex
from .timestamps import now_ms

__all__ = ["from_hex", "to_hex", "now_ms"]
