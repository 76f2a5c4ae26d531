"""Text filters applied to added text before culling.

Each filter is a pure ``str -> str`` function. Markup that is not closed
(``<ref>`` without ``</ref>``, ``[http://...`` without ``]``, ``<!--`` without
``-->``) is left in place rather than deleting everything after it.
"""

import re
from functools import reduce

from cci_analyzer.core.entities import FilterFunction

URL_START = re.compile(
    r"(?:(?:https?|ftps?|irc|ircs|news|gopher|telnet|nntp|svn|git|mms|sftp|ssh)://|//|mailto:)",
    re.IGNORECASE,
)


def identity(text: str) -> str:
    """Return text unchanged."""
    return text


def compose(*filters: FilterFunction) -> FilterFunction:
    """Chain filters, applied left to right."""
    for func in filters:
        if not callable(func):
            raise TypeError(f"Filter must be callable, got {func!r}")

    if not filters:
        return identity
    if len(filters) == 1:
        return filters[0]

    def composed(text: str) -> str:
        return reduce(lambda acc, func: func(acc), filters, text)

    composed.__name__ = "+".join(getattr(f, "__name__", "filter") for f in filters)
    return composed


def _is_ref_open(lowered: str, i: int) -> bool:
    if not lowered.startswith("<ref", i):
        return False
    following = lowered[i + 4:i + 5]
    return following in (">", "/") or following.isspace()


def remove_references(text: str) -> str:
    """Strip ``<ref>...</ref>`` citations and ``<ref name="x" />`` reuses."""
    lowered = text.lower()
    out: list[str] = []
    i = 0
    copied = 0

    while True:
        i = lowered.find("<ref", i)
        if i < 0:
            break
        if not _is_ref_open(lowered, i):
            i += 4
            continue

        tag_end = lowered.find(">", i)
        if tag_end < 0:
            break

        if lowered[tag_end - 1] == "/":
            # reused named reference
            out.append(text[copied:i])
            copied = i = tag_end + 1
            continue

        close = lowered.find("</ref", tag_end)
        close_end = lowered.find(">", close) if close >= 0 else -1
        if close_end < 0:
            # unbalanced, keep the opening tag as is
            i = tag_end + 1
            continue

        out.append(text[copied:i])
        copied = i = close_end + 1

    out.append(text[copied:])
    return "".join(out)


def remove_external_links(text: str) -> str:
    """Strip single-bracket external links such as ``[http://example.com label]``.

    Removal is literal: surrounding whitespace is kept as is.
    """
    out: list[str] = []
    i = 0
    copied = 0
    length = len(text)

    while i < length:
        i = text.find("[", i)
        if i < 0:
            break
        if text.startswith("[[", i):
            i += 2
            continue
        if not URL_START.match(text, i + 1):
            i += 1
            continue

        close = text.find("]", i)
        newline = text.find("\n", i)
        if close < 0 or (0 <= newline < close):
            i += 1
            continue

        out.append(text[copied:i])
        copied = i = close + 1

    out.append(text[copied:])
    return "".join(out)


def remove_comments(text: str) -> str:
    """Strip ``<!-- ... -->`` comments."""
    out: list[str] = []
    copied = 0

    while True:
        start = text.find("<!--", copied)
        if start < 0:
            break
        end = text.find("-->", start + 4)
        if end < 0:
            break
        out.append(text[copied:start])
        copied = end + 3

    out.append(text[copied:])
    return "".join(out)


FILTERS: dict[str, FilterFunction] = {
    "references": remove_references,
    "external_links": remove_external_links,
    "comments": remove_comments,
}
