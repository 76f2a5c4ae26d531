"""Parser for wikitext CCI listings.

A listing is a bullet list where each entry names an article and the diffs
the investigated user made to it::

    *'''N''' [[:Some article]] (2 edits): [[Special:Diff/123|(+456)]][[Special:Diff/124|(+7)]]

Entries may be on separate lines or run together on one line. Older CCI
pages use the ``{{dif|123|(+456)}}`` template instead of the Special:Diff
link; both forms are recognised.
"""

import re
from typing import Optional

from cci_analyzer.core.entities import CCIPage, PageEntry

ENTRY_START = re.compile(r"\*+[ \t]*(?P<new>'''N'''[ \t]*)?\[\[:(?P<title>[^\]\n]+?)\]\]")

DIFF_REFERENCE = re.compile(
    r"\[\[Special:Diff/\d+(?:\|[^\]\n]*)?\]\]"
    r"|\{\{dif\|\d+(?:\|[^}\n]*)?\}\}",
    re.IGNORECASE,
)

_REVID = re.compile(r"(?:Special:Diff/|\{\{dif\|)(\d+)", re.IGNORECASE)
_SIZE = re.compile(r"\(\s*([+\-−]?[\d,]+)\s*\)")


def parse_listing(text: str) -> list[PageEntry]:
    """Parse a CCI listing into page entries in order of appearance.

    Text that does not open an entry is ignored and entries without any
    diff reference are skipped.
    """
    if text is None:
        raise TypeError("Listing text cannot be None")

    entries: list[PageEntry] = []
    starts = list(ENTRY_START.finditer(text))

    for i, match in enumerate(starts):
        # An entry runs to the next entry or the end of its line.
        end = starts[i + 1].start() if i + 1 < len(starts) else len(text)
        newline = text.find("\n", match.end(), end)
        if newline >= 0:
            end = newline
        body = text[match.end():end]

        diffs = [m.group(0) for m in DIFF_REFERENCE.finditer(body)]
        title = match.group("title").strip()
        if not diffs or not title:
            continue

        entries.append(PageEntry(
            title=title,
            is_new_page=match.group("new") is not None,
            diff_identifiers=diffs,
        ))

    return entries


def load_string(text: str) -> CCIPage:
    """Build a CCI page from listing text."""
    return CCIPage(source_text=text, page_entries=parse_listing(text))


def parse_revid(identifier: str) -> Optional[int]:
    """Revision id referenced by a diff reference, if any."""
    match = _REVID.search(identifier)
    return int(match.group(1)) if match else None


def parse_size(identifier: str) -> Optional[int]:
    """Signed byte delta from a diff label such as ``(+458)``."""
    match = _SIZE.search(identifier)
    if not match:
        return None
    value = match.group(1).replace(",", "").replace("−", "-")
    try:
        return int(value)
    except ValueError:
        return None
