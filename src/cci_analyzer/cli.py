"""CLI entry point for the CCI analyzer."""

import asyncio
import sys
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import typer

from cci_analyzer.adapters.wiki import MediaWikiClient, WikiError
from cci_analyzer.config import Settings, get_settings
from cci_analyzer.core import CachedDiffSource, DiffCache, DiffSource
from cci_analyzer.use_cases import CCIAnalysisService, ReportService, build_engine


def main(
    page: Optional[str] = typer.Argument(None, help="CCI page to read from the wiki"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Read the listing from a file instead"),
    threshold: Optional[int] = typer.Option(None, "--threshold", "-t", help="Word count below which a diff is minor"),
    cull: Optional[list[str]] = typer.Option(None, "--cull", help="Culling predicate (repeatable)"),
    filters: Optional[list[str]] = typer.Option(None, "--filter", help="Text filter (repeatable)"),
    mode: Optional[str] = typer.Option(None, "--mode", help="Combine predicates with 'any' or 'all'"),
    exempt: Optional[list[str]] = typer.Option(None, "--exempt", help="Title exemption: disambiguation, list"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the culled listing here"),
    summary: Optional[Path] = typer.Option(None, "--summary", help="Write a markdown summary here"),
    config: Path = typer.Option(Path("config.yaml"), "--config", help="YAML configuration file"),
    no_cache: bool = typer.Option(False, "--no-cache", help="Do not read or write the diff cache"),
) -> None:
    """Identify trivial diffs in a contributor copyright investigation."""
    if (page is None) == (file is None):
        typer.echo("Give either a CCI page title or --file, not both.", err=True)
        raise typer.Exit(code=2)

    try:
        settings = get_settings(config)
    except ValueError as e:
        typer.echo(f"❌ Invalid configuration: {e}", err=True)
        raise typer.Exit(code=2)

    if threshold is not None:
        settings.analysis.word_count_threshold = threshold
    if cull:
        settings.analysis.culling = list(cull)
    if filters:
        settings.analysis.filters = list(filters)
    if mode:
        settings.analysis.culling_mode = mode
    if exempt:
        settings.analysis.exempt_titles = list(exempt)
    if no_cache:
        settings.cache.enabled = False

    asyncio.run(async_run(settings, page, file, output, summary))


def app() -> None:
    """CLI entry point."""
    typer.run(main)


async def async_run(
    settings: Settings,
    page_title: Optional[str],
    file: Optional[Path],
    output: Optional[Path],
    summary: Optional[Path],
) -> None:
    """Async implementation of the analysis."""
    try:
        engine = build_engine(settings)
    except (TypeError, ValueError) as e:
        typer.echo(f"❌ Invalid configuration: {e}", err=True)
        raise typer.Exit(code=2)

    print("\n" + "=" * 70, file=sys.stderr)
    print("🔎 CCI ANALYZER", file=sys.stderr)
    print("=" * 70, file=sys.stderr)
    print(f"  • Wiki: {settings.api_url}", file=sys.stderr)
    print(f"  • Filters: {', '.join(settings.analysis.filters) or 'none'}", file=sys.stderr)
    print(
        f"  • Culling: {', '.join(settings.analysis.culling)} "
        f"({settings.analysis.culling_mode}, threshold {settings.word_count_threshold})",
        file=sys.stderr,
    )
    if settings.analysis.exempt_titles:
        print(f"  • Exempt titles: {', '.join(settings.analysis.exempt_titles)}", file=sys.stderr)

    async with MediaWikiClient(
        api_url=settings.wiki.api_url,
        user_agent=settings.wiki.user_agent,
        timeout=settings.wiki.timeout,
        merge_deltas=settings.wiki.merge_adjacent_deltas,
    ) as wiki:
        if file is not None:
            listing = file.read_text(encoding="utf-8")
        else:
            try:
                listing = await wiki.fetch_page_text(page_title)
            except WikiError as e:
                typer.echo(f"❌ {e}", err=True)
                raise typer.Exit(code=1)

        source: DiffSource = wiki
        if settings.cache.enabled:
            cache = DiffCache(settings.cache_dir, wiki=urlparse(settings.api_url).netloc or "default")
            pruned = cache.prune_old(settings.cache.max_age_days)
            if pruned:
                print(f"  └─ Pruned {pruned} stale cached diffs", file=sys.stderr)
            source = CachedDiffSource(wiki, cache)

        service = CCIAnalysisService(engine, source)
        page = await service.analyze(listing)

    reports = ReportService(spot_check_size=settings.analysis.report_size_threshold)
    culled, stats = reports.culled_listing(page)

    # Large minor diffs first, so they can be spot checked
    for ref in reports.spot_checks(page):
        print(ref)
    print("----------------------")
    print(culled)

    if output is not None:
        reports.save_report(culled, output)
    if summary is not None:
        reports.save_report(reports.summary(page), summary)

    print("\n" + "=" * 70, file=sys.stderr)
    print(
        f"✅ Diffs removed: {stats.diffs_removed} of {stats.diff_count}, "
        f"articles removed: {stats.articles_removed}",
        file=sys.stderr,
    )
    print("=" * 70, file=sys.stderr)


if __name__ == "__main__":
    app()
