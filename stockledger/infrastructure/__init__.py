"""Infrastructure layer - snapshot persistence adapters."""

from stockledger.infrastructure import storage

__all__ = ["storage"]
