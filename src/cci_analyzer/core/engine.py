"""Diff culling engine."""

import asyncio
import sys
from typing import Optional

from cci_analyzer.core.culling import make_word_count_cull
from cci_analyzer.core.entities import (
    AnalysisState,
    CCIPage,
    CullingPredicate,
    DiffRecord,
    FetchResult,
    FilterFunction,
    PageEntry,
)
from cci_analyzer.core.interfaces import DiffSource
from cci_analyzer.core.listing_parser import load_string, parse_revid, parse_size
from cci_analyzer.core.text_filters import identity

DEFAULT_WORD_THRESHOLD = 9


class DiffCullingEngine:
    """Classify the diffs of a CCI listing as major or minor.

    The filtering function rewrites the added text of each diff, the culling
    function decides whether the filtered text is minor. Both can be swapped
    between runs of ``analyze_diffs`` without reloading the diffs.

    Diffs that could not be fetched stay major unless ``cull_failed_fetches``
    is set, in which case the culling function judges them on empty text.
    """

    def __init__(
        self,
        filtering_function: FilterFunction = identity,
        culling_function: Optional[CullingPredicate] = None,
        max_concurrency: int = 8,
        cull_failed_fetches: bool = False,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1, got {max_concurrency}")
        self.max_concurrency = max_concurrency
        self.cull_failed_fetches = cull_failed_fetches
        self.set_filtering_function(filtering_function)
        self.set_culling_function(
            culling_function or make_word_count_cull(DEFAULT_WORD_THRESHOLD)
        )

    def set_filtering_function(self, func: FilterFunction) -> None:
        if not callable(func):
            raise TypeError(f"Filtering function must be callable, got {func!r}")
        self.filtering_function = func

    def set_culling_function(self, func: CullingPredicate) -> None:
        if not callable(func):
            raise TypeError(f"Culling function must be callable, got {func!r}")
        self.culling_function = func

    def load_string(self, text: str) -> CCIPage:
        """Parse a CCI listing."""
        return load_string(text)

    async def load_diffs(self, page: CCIPage, source: DiffSource) -> None:
        """Fetch and filter the added text of every diff on the page.

        Fetches run concurrently; results are stored by diff identifier so
        completion order does not matter.
        """
        if page is None:
            raise TypeError("Page cannot be None")
        if source is None:
            raise TypeError("Diff source cannot be None")

        identifiers = list(dict.fromkeys(page.diff_identifiers()))
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def fetch(identifier: str) -> FetchResult:
            async with semaphore:
                try:
                    return await source.fetch_added_text(identifier)
                except Exception as e:
                    print(f"  ⚠️  Fetch failed for {identifier}: {e}", file=sys.stderr)
                    return FetchResult.failed()

        results = await asyncio.gather(*(fetch(identifier) for identifier in identifiers))

        page.records = {}
        for identifier, result in zip(identifiers, results):
            record = DiffRecord(
                identifier=identifier,
                revid=parse_revid(identifier),
                size=parse_size(identifier),
                added_text=result.added_text if result.ok else "",
                fetch_ok=result.ok,
            )
            record.filtered_text = self._filter(record)
            page.records[identifier] = record

        page.minor_edits = []
        page.minor_flags = []
        page.state = AnalysisState.LOADED

    def analyze_diffs(self, page: CCIPage) -> list[str]:
        """Classify every loaded diff and return the minor ones in listing order.

        Each call replaces the result of the previous one.
        """
        if page is None:
            raise TypeError("Page cannot be None")
        if page.state == AnalysisState.PARSED:
            raise RuntimeError("Diffs must be loaded before they can be analyzed")

        for record in page.records.values():
            record.filtered_text = self._filter(record)

        minor_edits: list[str] = []
        minor_flags: list[bool] = []
        for entry in page.page_entries:
            for identifier in entry.diff_identifiers:
                record = page.records[identifier]
                record.is_minor = self._is_minor(entry, record)
                minor_flags.append(record.is_minor)
                if record.is_minor:
                    minor_edits.append(identifier)

        page.minor_edits = minor_edits
        page.minor_flags = minor_flags
        page.state = AnalysisState.ANALYZED
        return list(minor_edits)

    def get_minor_edits(self, page: CCIPage) -> list[str]:
        return list(page.minor_edits)

    def _filter(self, record: DiffRecord) -> str:
        try:
            return self.filtering_function(record.added_text)
        except Exception as e:
            print(f"  ⚠️  Filtering failed for {record.identifier}: {e}", file=sys.stderr)
            return record.added_text

    def _is_minor(self, entry: PageEntry, record: DiffRecord) -> bool:
        if not record.fetch_ok and not self.cull_failed_fetches:
            return False
        try:
            return bool(self.culling_function(entry, record.filtered_text))
        except Exception as e:
            print(f"  ⚠️  Culling failed for {record.identifier}: {e}", file=sys.stderr)
            return False
