"""Abstract base class for listing sources."""

from abc import ABC, abstractmethod

from hubjobs.core.schemas import ListingSummary, Region


class ListingSource(ABC):
    """Base class that every listing client must implement."""

    @property
    @abstractmethod
    def platform_id(self) -> str:
        """Unique identifier for this platform (e.g. 'thehub')."""

    @abstractmethod
    async def fetch_all_for_region(self, region: Region, limit: int = 0) -> list[ListingSummary]:
        """Return every listing summary for one region (0 = no limit)."""
