"""Report adapters."""

from cci_analyzer.adapters.report.markdown_summary import MarkdownSummaryGenerator
from cci_analyzer.adapters.report.wikitext_listing import (
    CullingStats,
    WikitextListingGenerator,
    remove_minor_edits,
)

__all__ = [
    "CullingStats",
    "MarkdownSummaryGenerator",
    "WikitextListingGenerator",
    "remove_minor_edits",
]
