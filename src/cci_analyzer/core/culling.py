"""Culling predicates.

A predicate returns True when a diff is minor, i.e. it can be removed from
the CCI listing without manual review. Text predicates look at the filtered
added text only; culling predicates used by the engine also receive the
page entry so that title based exemptions can be expressed.
"""

import re
from functools import partial

from cci_analyzer.core.entities import CullingPredicate, PageEntry, TextPredicate

WORD = re.compile(r"[^\W_]")
SEGMENT_DELIMITERS = re.compile(r"[<>{}|=\[\]\n]")
FILE_OPEN = re.compile(r"\[\[\s*(?:file|image)\s*:", re.IGNORECASE)
CATEGORY_PREFIXES = ("category:", "cat:")

_LINK = r"(?:\[\[[^\[\]\n]+\]\]|\[[^\[\]\n]+\])"
LIST_ITEM = re.compile(rf"[*#]+[ \t]*(?:'{{2,5}})?[ \t]*{_LINK}[ \t]*(?:'{{2,5}})?")

# Boilerplate of deletion tagging templates ({{subst:afd}}, {{subst:prod}},
# {{subst:prod blp}}).
DELETION_TAGS = (
    "please do not remove or change this afd message",
    "end of afd message, feel free to edit beyond this point",
    "{{afdm|",
    "{{article for deletion/dated|",
    "{{proposed deletion/dated|",
    "{{prod blp/dated|",
)


def parse_wikilink(wikitext: str) -> tuple[str, str]:
    """Split ``[[target|label]]`` into target and label.

    The label defaults to the target. A leading colon is stripped.
    """
    inner = wikitext.strip()
    if inner.startswith("[["):
        inner = inner[2:]
    if inner.endswith("]]"):
        inner = inner[:-2]
    inner = inner.strip()
    if inner.startswith(":"):
        inner = inner[1:]

    target, pipe, label = inner.partition("|")
    target = target.strip()
    return target, (label.strip() if pipe else target)


def replace_wikilinks(text: str) -> str:
    """Replace wikilinks by their labels and drop category links.

    Innermost links are resolved first so links inside file captions are
    handled. A ``]]`` with no opener before it, as left by a delta that
    starts inside a link, is skipped.
    """
    pos = 0
    while True:
        close = text.find("]]", pos)
        if close < 0:
            break
        start = text.rfind("[[", 0, close)
        if start < 0:
            pos = close + 2
            continue

        raw = text[start:close + 2]
        target, label = parse_wikilink(raw)
        if len(target) > 255:
            break

        escaped = raw[2:].lstrip().startswith(":")
        if not escaped and target.lower().startswith(CATEGORY_PREFIXES):
            label = ""
        text = text[:start] + label + text[close + 2:]

    return text


def longest_word_run(text: str) -> int:
    """Longest run of plain words between markup delimiters."""
    longest = 0
    for segment in SEGMENT_DELIMITERS.split(replace_wikilinks(text)):
        run = sum(1 for token in segment.split() if WORD.search(token))
        longest = max(longest, run)
    return longest


def word_count_cull(text: str, threshold: int) -> bool:
    """Minor iff no run of plain words reaches ``threshold``.

    Text left empty by filtering, such as a diff that only added a
    citation, has a longest run of zero and is minor for any positive
    threshold.
    """
    if threshold < 0:
        raise ValueError(f"Word count threshold must be non-negative, got {threshold}")
    return longest_word_run(text) < threshold


def whitelist_cull(text: str) -> bool:
    """Minor if the addition carries no content of its own.

    That is empty text, text without letters or digits, deletion tagging
    boilerplate, or an infobox made only of template parameter lines.
    """
    stripped = text.strip()
    if not stripped or not WORD.search(stripped):
        return True

    lowered = stripped.lower()
    if any(tag in lowered for tag in DELETION_TAGS):
        return True

    if "{{infobox" in lowered:
        lines = [line.strip() for line in lowered.splitlines() if line.strip()]
        return all(
            line.startswith(("{{infobox", "|", "}}")) or not WORD.search(line)
            for line in lines
        )
    return False


def list_item_cull(text: str) -> bool:
    """Minor if the addition is a single list item holding just one link."""
    return LIST_ITEM.fullmatch(text.strip()) is not None


def _matching_close(text: str, start: int) -> int:
    """Index just past the ``]]`` closing the ``[[`` at ``start``, or -1."""
    depth = 0
    i = start
    while i < len(text) - 1:
        pair = text[i:i + 2]
        if pair == "[[":
            depth += 1
            i += 2
        elif pair == "]]":
            depth -= 1
            i += 2
            if depth == 0:
                return i
        else:
            i += 1
    return -1


def file_addition_cull(text: str) -> bool:
    """Minor if the addition only embeds files or images, captions included."""
    stripped = text.strip()
    pos = 0
    found = False

    while pos < len(stripped):
        if stripped[pos].isspace():
            pos += 1
            continue
        if not FILE_OPEN.match(stripped, pos):
            return False
        end = _matching_close(stripped, pos)
        if end < 0:
            return False
        pos = end
        found = True

    return found


TABLE_LINE_PREFIXES = ("{|", "|}", "|-", "|+", "|", "!")


def table_cull(text: str) -> bool:
    """Minor if the addition is wiki table markup with nothing outside it."""
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if not lines:
        return False
    if not all(line.startswith(TABLE_LINE_PREFIXES) for line in lines):
        return False
    return any(
        line.startswith(("{|", "|}", "|-")) or "||" in line or "!!" in line
        for line in lines
    )


def is_disambiguation_title(title: str) -> bool:
    return title.strip().lower().endswith("(disambiguation)")


def is_list_title(title: str) -> bool:
    return title.strip().lower().startswith(("list of ", "lists of "))


def remove_disambiguation_pages(title: str) -> bool:
    """False when the title is a disambiguation page, which is exempt from culling."""
    return not is_disambiguation_title(title)


def remove_list_pages(title: str) -> bool:
    """False when the title is a list page, which is exempt from culling."""
    return not is_list_title(title)


def text_predicate(func: TextPredicate) -> CullingPredicate:
    """Lift a text predicate into a culling predicate that ignores the entry."""
    if not callable(func):
        raise TypeError(f"Predicate must be callable, got {func!r}")

    def predicate(entry: PageEntry, text: str) -> bool:
        return func(text)

    predicate.__name__ = getattr(func, "__name__", "text_predicate")
    return predicate


def make_word_count_cull(threshold: int) -> CullingPredicate:
    """Word count predicate with the threshold validated up front."""
    if isinstance(threshold, bool) or not isinstance(threshold, int):
        raise TypeError(f"Word count threshold must be an integer, got {threshold!r}")
    if threshold < 0:
        raise ValueError(f"Word count threshold must be non-negative, got {threshold}")
    func = partial(word_count_cull, threshold=threshold)
    func.__name__ = f"word_count_cull({threshold})"
    return text_predicate(func)


def all_of(*predicates: CullingPredicate) -> CullingPredicate:
    """Minor only if every predicate says minor."""
    _check_callables(predicates)

    def predicate(entry: PageEntry, text: str) -> bool:
        return all(p(entry, text) for p in predicates)

    return predicate


def any_of(*predicates: CullingPredicate) -> CullingPredicate:
    """Minor if any predicate says minor."""
    _check_callables(predicates)

    def predicate(entry: PageEntry, text: str) -> bool:
        return any(p(entry, text) for p in predicates)

    return predicate


def negate(predicate: CullingPredicate) -> CullingPredicate:
    _check_callables((predicate,))

    def negated(entry: PageEntry, text: str) -> bool:
        return not predicate(entry, text)

    return negated


def exempt_titles(predicate: CullingPredicate, *gates) -> CullingPredicate:
    """Apply ``predicate`` only to entries whose title passes every gate.

    Gates are title functions such as ``remove_disambiguation_pages`` that
    return False for titles that must always be reviewed.
    """
    _check_callables((predicate, *gates))

    def gated(entry: PageEntry, text: str) -> bool:
        if not all(gate(entry.title) for gate in gates):
            return False
        return predicate(entry, text)

    return gated


def _check_callables(funcs) -> None:
    if not funcs:
        raise ValueError("At least one predicate is required")
    for func in funcs:
        if not callable(func):
            raise TypeError(f"Predicate must be callable, got {func!r}")


TEXT_PREDICATES: dict[str, TextPredicate] = {
    "whitelist": whitelist_cull,
    "list_item": list_item_cull,
    "file_addition": file_addition_cull,
    "table": table_cull,
}

TITLE_GATES = {
    "disambiguation": remove_disambiguation_pages,
    "list": remove_list_pages,
}
