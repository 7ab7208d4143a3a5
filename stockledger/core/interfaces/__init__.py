"""Core interfaces (ports) for dependency injection."""

from stockledger.core.interfaces.similarity import ISimilarityScorer
from stockledger.core.interfaces.snapshot_store import ISnapshotStore

__all__ = [
    # Storage interfaces
    "ISnapshotStore",
    # Matching interfaces
    "ISimilarityScorer",
]
