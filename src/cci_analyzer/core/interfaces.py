"""Core interfaces for adapters."""

from abc import ABC, abstractmethod

from cci_analyzer.core.entities import CCIPage, FetchResult


class DiffSource(ABC):
    """Interface for fetching the text added by a diff."""

    @abstractmethod
    async def fetch_added_text(self, identifier: str) -> FetchResult:
        """Fetch added text for a diff reference.

        Failures are reported through ``FetchResult.ok`` and never raised.
        """
        pass


class ReportGenerator(ABC):
    """Interface for rendering analysis results."""

    @abstractmethod
    def generate(self, page: CCIPage) -> str:
        """Render an analyzed page."""
        pass
