"""Abstract interface for ledger snapshot persistence."""

from abc import ABC, abstractmethod

from stockledger.core.entities.snapshot import LedgerSnapshot


class ISnapshotStore(ABC):
    """Interface for loading and saving the whole ledger state."""

    @abstractmethod
    async def load(self) -> LedgerSnapshot:
        """
        Load the latest snapshot.

        Implementations must return an empty, valid snapshot when nothing
        has been saved yet or the stored data cannot be read.
        """
        pass

    @abstractmethod
    async def save(self, snapshot: LedgerSnapshot) -> None:
        """Replace the stored snapshot with the given one."""
        pass

    async def close(self) -> None:
        """Release any held resources."""
        return None
