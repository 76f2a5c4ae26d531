"""Core domain entities."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional


class AnalysisState(str, Enum):
    """Lifecycle of a CCI page inside the engine."""

    PARSED = "parsed"
    LOADED = "loaded"
    ANALYZED = "analyzed"


@dataclass
class PageEntry:
    """One surveyed article in a CCI listing."""

    title: str
    is_new_page: bool
    diff_identifiers: list[str]

    def __post_init__(self) -> None:
        if not self.title:
            raise ValueError("Title cannot be empty")
        if not self.diff_identifiers:
            raise ValueError("Page entry needs at least one diff")


@dataclass
class DiffRecord:
    """Working data for a single diff during one analysis pass."""

    identifier: str
    revid: Optional[int] = None
    size: Optional[int] = None
    added_text: str = ""
    fetch_ok: bool = True
    filtered_text: str = ""
    is_minor: bool = False


@dataclass
class FetchResult:
    """Outcome of fetching the text added by a diff."""

    added_text: str
    ok: bool

    @classmethod
    def failed(cls) -> "FetchResult":
        return cls(added_text="", ok=False)


@dataclass
class CCIPage:
    """A contributor copyright investigation listing being analyzed."""

    source_text: str
    page_entries: list[PageEntry]
    records: dict[str, DiffRecord] = field(default_factory=dict)
    minor_edits: list[str] = field(default_factory=list)
    # one flag per entry of diff_identifiers()
    minor_flags: list[bool] = field(default_factory=list)
    state: AnalysisState = AnalysisState.PARSED

    def diff_identifiers(self) -> list[str]:
        """All diff references in order of appearance."""
        return [ref for entry in self.page_entries for ref in entry.diff_identifiers]

    @property
    def diff_count(self) -> int:
        return sum(len(entry.diff_identifiers) for entry in self.page_entries)

    def failed_fetches(self) -> list[str]:
        return [
            ref for ref in self.diff_identifiers()
            if ref in self.records and not self.records[ref].fetch_ok
        ]


FilterFunction = Callable[[str], str]
TextPredicate = Callable[[str], bool]
CullingPredicate = Callable[[PageEntry, str], bool]
