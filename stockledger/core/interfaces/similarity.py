"""Abstract interface for description similarity scoring."""

from abc import ABC, abstractmethod


class ISimilarityScorer(ABC):
    """Scores how alike two free-text product descriptions are."""

    @abstractmethod
    def score(self, a: str, b: str) -> float:
        """Return a similarity score in [0, 1]."""
        pass
