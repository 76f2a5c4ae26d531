"""Tests for the command line interface."""

from pathlib import Path

import pytest
import typer
from typer.testing import CliRunner

from cci_analyzer import cli
from cci_analyzer.adapters.wiki import WikiError
from cci_analyzer.core import FetchResult

LISTING = (
    "*[[:Foo]] (2 edits): [[Special:Diff/1|(+700)]][[Special:Diff/2|(+30)]]\n"
    "*[[:Bar]] (1 edit): [[Special:Diff/3|(+12)]]\n"
)

TEXTS = {
    "[[Special:Diff/1|(+700)]]": "tiny",
    "[[Special:Diff/2|(+30)]]": "This sentence has far more than nine words in one unbroken run.",
    "[[Special:Diff/3|(+12)]]": "small fix",
}

runner = CliRunner()


class FakeWiki:
    """Stands in for the MediaWiki client."""

    pages: dict[str, str] = {}

    def __init__(self, **kwargs) -> None:
        self.kwargs = kwargs

    async def __aenter__(self) -> "FakeWiki":
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None

    async def fetch_added_text(self, identifier: str) -> FetchResult:
        return FetchResult(added_text=TEXTS[identifier], ok=True)

    async def fetch_page_text(self, title: str) -> str:
        if title not in self.pages:
            raise WikiError(f"Page {title} does not exist")
        return self.pages[title]


@pytest.fixture
def app(monkeypatch) -> typer.Typer:
    monkeypatch.setattr(cli, "MediaWikiClient", FakeWiki)
    typer_app = typer.Typer()
    typer_app.command()(cli.main)
    return typer_app


def test_cull_listing_file(app, tmp_path: Path) -> None:
    """Test culling a listing read from a file."""
    listing_path = tmp_path / "listing.txt"
    listing_path.write_text(LISTING, encoding="utf-8")
    output_path = tmp_path / "culled.txt"
    summary_path = tmp_path / "summary.md"

    result = runner.invoke(app, [
        "--file", str(listing_path),
        "--no-cache",
        "--config", str(tmp_path / "missing.yaml"),
        "--output", str(output_path),
        "--summary", str(summary_path),
    ])

    assert result.exit_code == 0
    assert "[[Special:Diff/1|(+700)]]\n----------------------" in result.stdout
    assert output_path.read_text(encoding="utf-8") == (
        "*[[:Foo]] (2 edits): [[Special:Diff/2|(+30)]]\n"
    )
    assert "| Foo |  | 2 | 1 |" in summary_path.read_text(encoding="utf-8")


def test_cull_wiki_page(app, tmp_path: Path, monkeypatch) -> None:
    """Test reading the listing from the wiki."""
    monkeypatch.setattr(FakeWiki, "pages", {"Wikipedia:Contributor copyright investigations/Example": LISTING})

    result = runner.invoke(app, [
        "Wikipedia:Contributor copyright investigations/Example",
        "--no-cache",
        "--config", str(tmp_path / "missing.yaml"),
        "--threshold", "30",
    ])

    assert result.exit_code == 0
    assert "*[[:Foo]] (2 edits): \n" not in result.stdout
    assert "*[[:Bar]]" not in result.stdout


def test_missing_wiki_page(app, tmp_path: Path) -> None:
    result = runner.invoke(app, ["Nope", "--no-cache", "--config", str(tmp_path / "missing.yaml")])

    assert result.exit_code == 1


def test_page_and_file_are_exclusive(app, tmp_path: Path) -> None:
    """Test exactly one listing source must be given."""
    listing_path = tmp_path / "listing.txt"
    listing_path.write_text(LISTING, encoding="utf-8")

    both = runner.invoke(app, ["Foo", "--file", str(listing_path)])
    neither = runner.invoke(app, [])

    assert both.exit_code == 2
    assert neither.exit_code == 2


def test_bad_culling_predicate(app, tmp_path: Path) -> None:
    listing_path = tmp_path / "listing.txt"
    listing_path.write_text(LISTING, encoding="utf-8")

    result = runner.invoke(app, [
        "--file", str(listing_path),
        "--cull", "vibes",
        "--no-cache",
        "--config", str(tmp_path / "missing.yaml"),
    ])

    assert result.exit_code == 2
