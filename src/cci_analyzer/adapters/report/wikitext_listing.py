"""Culled CCI listing in wikitext."""

import re
from dataclasses import dataclass
from typing import Iterable

from cci_analyzer.core import CCIPage, ReportGenerator

# An article line whose diffs have all been removed.
EMPTY_ARTICLE = re.compile(r".*edits?\):\s*")


@dataclass
class CullingStats:
    """Counts for a culled listing."""

    diff_count: int
    diffs_removed: int
    articles_removed: int


def remove_minor_edits(text: str, occurrences: Iterable[tuple[str, bool]]) -> str:
    """Remove the minor diff references from the listing.

    ``occurrences`` pairs every diff reference with its classification, in
    listing order, so a diff listed under two articles is only removed
    where it was judged minor.
    """
    pieces = []
    cursor = 0
    for identifier, is_minor in occurrences:
        index = text.find(identifier, cursor)
        if index < 0:
            continue
        end = index + len(identifier)
        pieces.append(text[cursor:index] if is_minor else text[cursor:end])
        cursor = end
    pieces.append(text[cursor:])
    return "".join(pieces)


class WikitextListingGenerator(ReportGenerator):
    """Render the listing with minor diffs removed."""

    def __init__(self, drop_empty_articles: bool = True) -> None:
        self.drop_empty_articles = drop_empty_articles

    def generate(self, page: CCIPage) -> str:
        listing, _ = self.generate_with_stats(page)
        return listing

    def generate_with_stats(self, page: CCIPage) -> tuple[str, CullingStats]:
        culled = remove_minor_edits(
            page.source_text, zip(page.diff_identifiers(), page.minor_flags)
        )

        articles_removed = 0
        if self.drop_empty_articles:
            kept = []
            for line in culled.split("\n"):
                if EMPTY_ARTICLE.fullmatch(line):
                    articles_removed += 1
                    continue
                kept.append(line)
            culled = "\n".join(kept)

        stats = CullingStats(
            diff_count=page.diff_count,
            diffs_removed=len(page.minor_edits),
            articles_removed=articles_removed,
        )
        return culled, stats
