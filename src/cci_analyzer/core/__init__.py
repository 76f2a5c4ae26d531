"""Core domain layer."""

from cci_analyzer.core.diff_cache import CachedDiffSource, DiffCache
from cci_analyzer.core.engine import DiffCullingEngine
from cci_analyzer.core.entities import (
    AnalysisState,
    CCIPage,
    DiffRecord,
    FetchResult,
    PageEntry,
)
from cci_analyzer.core.interfaces import DiffSource, ReportGenerator
from cci_analyzer.core.listing_parser import load_string, parse_listing

__all__ = [
    "AnalysisState",
    "CCIPage",
    "PageEntry",
    "DiffRecord",
    "FetchResult",
    "DiffSource",
    "ReportGenerator",
    "DiffCullingEngine",
    "DiffCache",
    "CachedDiffSource",
    "load_string",
    "parse_listing",
]
