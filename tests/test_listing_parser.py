"""Tests for the CCI listing parser."""

import pytest

from cci_analyzer.core import AnalysisState, load_string, parse_listing
from cci_analyzer.core.listing_parser import parse_revid, parse_size

LISTING = (
    "*[[:Smiley (1956 film)]] (3 edits): [[Special:Diff/509191673|(+7148)]][[Special:Diff/476809081|(+460)]]"
    "[[Special:Diff/446793589|(+205)]]"
    "*[[:Australian cricket team in the West Indies in 1983–84]] (2 edits): [[Special:Diff/601446274|(+7142)]]"
    "[[Special:Diff/696963536|(+6475)]]"
    "*[[:Ann Thongprasom]] (1 edit): [[Special:Diff/130352114|(+460)]]"
    "*[[:Shoma Anand]] (1 edit): [[Special:Diff/130322991|(+460)]]"
)


def test_parse_concatenated_entries():
    """Test entries run together on one line."""
    entries = parse_listing(LISTING)

    assert [e.title for e in entries] == [
        "Smiley (1956 film)",
        "Australian cricket team in the West Indies in 1983–84",
        "Ann Thongprasom",
        "Shoma Anand",
    ]
    assert [len(e.diff_identifiers) for e in entries] == [3, 2, 1, 1]
    assert entries[0].diff_identifiers == [
        "[[Special:Diff/509191673|(+7148)]]",
        "[[Special:Diff/476809081|(+460)]]",
        "[[Special:Diff/446793589|(+205)]]",
    ]


def test_parse_new_page_marker():
    """Test the bold N marks page creations."""
    text = (
        "*'''N''' [[:Foo (disambiguation)]] (1 edit): [[Special:Diff/5|(+100)]]\n"
        "*[[:Bar]] (1 edit): [[Special:Diff/6|(+10)]]\n"
    )
    entries = parse_listing(text)

    assert entries[0].title == "Foo (disambiguation)"
    assert entries[0].is_new_page
    assert not entries[1].is_new_page


def test_parse_skips_malformed_lines():
    """Test lines without a title link or diffs are skipped."""
    text = (
        "Intro text with a [[Special:Diff/1|(+1)]] reference\n"
        "*[[:Empty]] (0 edits): \n"
        "*[[No colon]] (1 edit): [[Special:Diff/7|(+1)]]\n"
        "*[[:Good]] (1 edit): [[Special:Diff/8|(+2)]]\n"
    )
    entries = parse_listing(text)

    assert len(entries) == 1
    assert entries[0].title == "Good"
    assert entries[0].diff_identifiers == ["[[Special:Diff/8|(+2)]]"]


def test_parse_keeps_duplicate_titles():
    """Test the same title twice gives two entries in order."""
    text = (
        "*[[:Foo]] (1 edit): [[Special:Diff/1|(+1)]]\n"
        "*[[:Foo]] (1 edit): [[Special:Diff/2|(+2)]]\n"
    )
    entries = parse_listing(text)

    assert [e.diff_identifiers[0] for e in entries] == [
        "[[Special:Diff/1|(+1)]]",
        "[[Special:Diff/2|(+2)]]",
    ]


def test_parse_preserves_reference_text():
    """Test diff references are captured verbatim."""
    text = "*[[:Foo]] (2 edits): [[Special:Diff/12| (+1,234) ]] {{dif|99|(+5)}}"
    entries = parse_listing(text)

    assert entries[0].diff_identifiers == ["[[Special:Diff/12| (+1,234) ]]", "{{dif|99|(+5)}}"]
    for ref in entries[0].diff_identifiers:
        assert ref in text


def test_parse_empty_and_none():
    """Test degenerate inputs."""
    assert parse_listing("") == []
    assert parse_listing("no listing here") == []

    with pytest.raises(TypeError):
        parse_listing(None)


def test_load_string():
    """Test building a page from a listing."""
    page = load_string(LISTING)

    assert page.source_text == LISTING
    assert page.state == AnalysisState.PARSED
    assert page.diff_count == 7
    assert page.diff_identifiers()[0] == "[[Special:Diff/509191673|(+7148)]]"
    assert page.minor_edits == []


def test_parse_revid_and_size():
    """Test revision id and size extraction."""
    assert parse_revid("[[Special:Diff/509191673|(+7148)]]") == 509191673
    assert parse_revid("{{dif|99|(+5)}}") == 99
    assert parse_revid("[[Foo]]") is None

    assert parse_size("[[Special:Diff/509191673|(+7148)]]") == 7148
    assert parse_size("[[Special:Diff/1|(+1,234)]]") == 1234
    assert parse_size("[[Special:Diff/1|(−12)]]") == -12
    assert parse_size("[[Special:Diff/1]]") is None
