"""Configuration management."""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from cci_analyzer.adapters.wiki.mediawiki_client import DEFAULT_API_URL, DEFAULT_USER_AGENT


@dataclass
class WikiConfig:
    """MediaWiki API settings."""
    api_url: str = DEFAULT_API_URL
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = 30.0
    max_concurrency: int = 8
    merge_adjacent_deltas: bool = True


@dataclass
class AnalysisConfig:
    """Filtering and culling settings."""
    word_count_threshold: int = 9
    filters: list[str] = field(default_factory=lambda: ["references"])
    culling: list[str] = field(default_factory=lambda: ["word_count"])
    # "any": minor if one predicate says so, "all": minor only if all do
    culling_mode: str = "any"
    exempt_titles: list[str] = field(default_factory=list)
    # judge diffs that could not be fetched as empty text instead of keeping them
    cull_failed_fetches: bool = False
    report_size_threshold: int = 500


@dataclass
class PathsConfig:
    """Path settings."""
    cache_dir: Path = Path(".cci_cache")


@dataclass
class CacheConfig:
    """Diff cache settings."""
    enabled: bool = True
    max_age_days: int = 90


@dataclass
class Settings:
    """Application settings."""

    wiki: WikiConfig = field(default_factory=WikiConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)

    @property
    def api_url(self) -> str:
        return self.wiki.api_url

    @property
    def word_count_threshold(self) -> int:
        return self.analysis.word_count_threshold

    @property
    def cache_dir(self) -> Path:
        return self.paths.cache_dir


def load_config(config_path: Path = Path("config.yaml")) -> dict:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def get_settings(config_path: Path = Path("config.yaml")) -> Settings:
    """Get application settings from YAML config and environment."""
    config = load_config(config_path)
    settings = Settings()

    if "wiki" in config:
        for key, value in config["wiki"].items():
            _set_known(settings.wiki, "wiki", key, value)

    if "analysis" in config:
        for key, value in config["analysis"].items():
            _set_known(settings.analysis, "analysis", key, value)

    if "paths" in config:
        for key, value in config["paths"].items():
            _set_known(settings.paths, "paths", key, Path(value))

    if "cache" in config:
        for key, value in config["cache"].items():
            _set_known(settings.cache, "cache", key, value)

    # Environment wins over the file
    settings.wiki.api_url = os.getenv("CCI_WIKI_API_URL", settings.wiki.api_url)
    settings.wiki.user_agent = os.getenv("CCI_USER_AGENT", settings.wiki.user_agent)

    return settings


def _set_known(section: object, name: str, key: str, value: object) -> None:
    if not hasattr(section, key):
        raise ValueError(f"Unknown setting {name}.{key}")
    setattr(section, key, value)
