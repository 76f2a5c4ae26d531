"""Extraction of added text from MediaWiki diff HTML."""

from bs4 import BeautifulSoup

# Inline change markers. Older MediaWiki versions used <span>, current ones <ins>.
DELTA_MARKERS = (
    ('<ins class="diffchange diffchange-inline">', "</ins>"),
    ('<span class="diffchange diffchange-inline">', "</span>"),
)


def merge_adjacent_deltas(diff_html: str) -> str:
    """Join inline changes separated by a single space into one change.

    Without this a single reworded phrase shows up as several short deltas.
    """
    for begin, end in DELTA_MARKERS:
        diff_html = diff_html.replace(f"{end} {begin}", " ")
    return diff_html


def extract_added_text(diff_html: str, merge_deltas: bool = True) -> str:
    """Text added by a diff, one fragment per line.

    For a changed line only the inline insertions are kept; a wholly new
    line is kept in full. Entities are decoded by the parser.
    """
    if not diff_html:
        return ""
    if merge_deltas:
        diff_html = merge_adjacent_deltas(diff_html)

    soup = BeautifulSoup(diff_html, "html.parser")
    fragments: list[str] = []

    for cell in soup.select("td.diff-addedline"):
        deltas = cell.select("ins.diffchange, span.diffchange")
        if deltas:
            fragments.extend(delta.get_text() for delta in deltas)
        else:
            fragments.append(cell.get_text())

    return "\n".join(fragment for fragment in fragments if fragment)
