"""Shared test helpers."""

import pytest

from cci_analyzer.core import DiffSource, FetchResult


class StubDiffSource(DiffSource):
    """Diff source serving canned added text."""

    def __init__(self, texts: dict[str, str], failures: tuple[str, ...] = ()) -> None:
        self.texts = texts
        self.failures = set(failures)
        self.calls: list[str] = []

    async def fetch_added_text(self, identifier: str) -> FetchResult:
        self.calls.append(identifier)
        if identifier in self.failures:
            return FetchResult.failed()
        return FetchResult(added_text=self.texts.get(identifier, ""), ok=True)


@pytest.fixture
def stub_source():
    """Factory for stub diff sources."""
    return StubDiffSource
