"""Business logic use cases."""

import sys
from pathlib import Path
from typing import Optional

from cci_analyzer.adapters.report import (
    CullingStats,
    MarkdownSummaryGenerator,
    WikitextListingGenerator,
)
from cci_analyzer.config import AnalysisConfig, Settings
from cci_analyzer.core import CCIPage, DiffCullingEngine, DiffSource
from cci_analyzer.core.culling import (
    TEXT_PREDICATES,
    TITLE_GATES,
    all_of,
    any_of,
    exempt_titles,
    make_word_count_cull,
    text_predicate,
)
from cci_analyzer.core.entities import CullingPredicate, FilterFunction
from cci_analyzer.core.text_filters import FILTERS, compose


def _progress(message: str = "") -> None:
    # stdout is reserved for the culled listing
    print(message, file=sys.stderr)


def build_filtering_function(analysis: AnalysisConfig) -> FilterFunction:
    """Compose the configured filters in the configured order."""
    unknown = [name for name in analysis.filters if name not in FILTERS]
    if unknown:
        raise ValueError(f"Unknown filters: {', '.join(unknown)}. Known: {', '.join(FILTERS)}")
    return compose(*(FILTERS[name] for name in analysis.filters))


def build_culling_function(analysis: AnalysisConfig) -> CullingPredicate:
    """Combine the configured predicates and title exemptions."""
    if not analysis.culling:
        raise ValueError("At least one culling predicate must be configured")
    if analysis.culling_mode not in ("any", "all"):
        raise ValueError(f"culling_mode must be 'any' or 'all', got {analysis.culling_mode!r}")

    predicates: list[CullingPredicate] = []
    for name in analysis.culling:
        if name == "word_count":
            predicates.append(make_word_count_cull(analysis.word_count_threshold))
        elif name in TEXT_PREDICATES:
            predicates.append(text_predicate(TEXT_PREDICATES[name]))
        else:
            known = ", ".join(["word_count", *TEXT_PREDICATES])
            raise ValueError(f"Unknown culling predicate: {name}. Known: {known}")

    unknown_gates = [name for name in analysis.exempt_titles if name not in TITLE_GATES]
    if unknown_gates:
        raise ValueError(f"Unknown title exemptions: {', '.join(unknown_gates)}")

    if len(predicates) == 1:
        predicate = predicates[0]
    else:
        predicate = any_of(*predicates) if analysis.culling_mode == "any" else all_of(*predicates)

    if analysis.exempt_titles:
        predicate = exempt_titles(predicate, *(TITLE_GATES[name] for name in analysis.exempt_titles))
    return predicate


def build_engine(settings: Settings) -> DiffCullingEngine:
    """Engine configured from settings."""
    return DiffCullingEngine(
        filtering_function=build_filtering_function(settings.analysis),
        culling_function=build_culling_function(settings.analysis),
        max_concurrency=settings.wiki.max_concurrency,
        cull_failed_fetches=settings.analysis.cull_failed_fetches,
    )


class CCIAnalysisService:
    """Service for loading a CCI listing and classifying its diffs."""

    def __init__(self, engine: DiffCullingEngine, source: DiffSource) -> None:
        self.engine = engine
        self.source = source

    async def analyze(self, listing_text: str) -> CCIPage:
        """Parse the listing, fetch every diff and classify it."""
        _progress("\n" + "=" * 70)
        _progress("📥 STEP 1: PARSING LISTING")
        _progress("=" * 70)

        page = self.engine.load_string(listing_text)
        _progress(f"✓ Articles: {len(page.page_entries)}")
        _progress(f"✓ Diffs: {page.diff_count}")

        if not page.page_entries:
            _progress("❌ No diffs found in the listing")

        _progress("\n" + "=" * 70)
        _progress("🌐 STEP 2: FETCHING DIFFS")
        _progress("=" * 70)

        await self.engine.load_diffs(page, self.source)

        failed = page.failed_fetches()
        _progress(f"✓ Fetched: {len(page.records) - len(set(failed))} of {len(page.records)}")
        if failed:
            _progress(f"⚠️  Could not fetch {len(failed)} diffs, they stay in the listing")

        hits = getattr(self.source, "hits", 0)
        if hits:
            _progress(f"  └─ From cache: {hits}")

        self.reanalyze(page)
        return page

    def reanalyze(self, page: CCIPage, culling_function: Optional[CullingPredicate] = None) -> list[str]:
        """Classify loaded diffs again, optionally with another predicate."""
        if culling_function is not None:
            self.engine.set_culling_function(culling_function)

        _progress("\n" + "=" * 70)
        _progress("🔍 STEP 3: CULLING")
        _progress("=" * 70)

        minor_edits = self.engine.analyze_diffs(page)
        _progress(f"✓ Minor diffs: {len(minor_edits)} of {page.diff_count}")
        return minor_edits


class ReportService:
    """Service for rendering and saving analysis results."""

    def __init__(
        self,
        listing_generator: Optional[WikitextListingGenerator] = None,
        summary_generator: Optional[MarkdownSummaryGenerator] = None,
        spot_check_size: int = 500,
    ) -> None:
        self.listing_generator = listing_generator or WikitextListingGenerator()
        self.summary_generator = summary_generator or MarkdownSummaryGenerator(spot_check_size=spot_check_size)
        self.spot_check_size = spot_check_size

    def culled_listing(self, page: CCIPage) -> tuple[str, CullingStats]:
        return self.listing_generator.generate_with_stats(page)

    def spot_checks(self, page: CCIPage) -> list[str]:
        """Minor diffs large enough that a human should glance at them."""
        return [
            ref for ref in page.minor_edits
            if (page.records[ref].size or 0) >= self.spot_check_size
        ]

    def summary(self, page: CCIPage) -> str:
        return self.summary_generator.generate(page)

    def save_report(self, report: str, output_path: Path) -> None:
        """Save report to file."""
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(report, encoding="utf-8")
        _progress(f"Report saved to {output_path}")
