"""Base GDS client interface."""

from abc import ABC, abstractmethod

from ..models import FlightQuery


class BaseGDSClient(ABC):
    """Abstract base class for GDS availability/pricing clients."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short provider name, used in logs."""
        ...

    @abstractmethod
    async def search(self, query: FlightQuery) -> dict:
        """
        Run a priced availability search.

        Args:
            query: Origin/destination/date(s), passengers and optional cabin.

        Returns:
            The raw priced-itinerary result tree.

        Raises:
            GDSError: on transport, authentication or HTTP failures.
        """
        ...
