from .http import ReclaimHTTPClient

__all__ = ["ReclaimHTTPClient"]
