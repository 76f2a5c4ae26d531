"""Cache of fetched added text, stored as individual YAML artifacts."""

import sys
from datetime import date
from pathlib import Path
from typing import Optional

import yaml

from cci_analyzer.core.entities import FetchResult
from cci_analyzer.core.interfaces import DiffSource
from cci_analyzer.core.listing_parser import parse_revid


class DiffCache:
    """Store the added text of revisions so re-runs skip the network."""

    def __init__(self, storage_dir: Path, wiki: str = "default") -> None:
        self.storage_dir = storage_dir / wiki
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def get(self, revid: int) -> Optional[str]:
        """Cached added text for a revision, or None."""
        path = self._get_artifact_path(revid)
        if not path.exists():
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            print(f"⚠️  Warning: Could not read cached diff {revid}: {e}", file=sys.stderr)
            return None

        text = data.get("added_text")
        return text if isinstance(text, str) else None

    def put(self, revid: int, added_text: str) -> None:
        path = self._get_artifact_path(revid)
        artifact = {
            "revid": revid,
            "date_cached": date.today().isoformat(),
            "added_text": added_text,
        }
        try:
            with open(path, "w", encoding="utf-8") as f:
                yaml.safe_dump(artifact, f, allow_unicode=True, default_flow_style=False, sort_keys=False)
        except OSError as e:
            print(f"⚠️  Warning: Could not cache diff {revid}: {e}", file=sys.stderr)

    def __contains__(self, revid: int) -> bool:
        return self._get_artifact_path(revid).exists()

    def get_stats(self) -> dict:
        return {"cached_diffs": len(list(self.storage_dir.glob("*.yaml")))}

    def prune_old(self, days: int = 90) -> int:
        """Remove artifacts cached more than N days ago.

        Returns:
            Number of artifacts removed
        """
        cutoff = date.today()
        removed = 0

        for path in self.storage_dir.glob("*.yaml"):
            try:
                with open(path, "r", encoding="utf-8") as f:
                    data = yaml.safe_load(f) or {}
                cached = data.get("date_cached")
                if not cached:
                    continue
                if (cutoff - date.fromisoformat(str(cached))).days > days:
                    path.unlink()
                    removed += 1
            except (OSError, ValueError, yaml.YAMLError):
                continue

        return removed

    def _get_artifact_path(self, revid: int) -> Path:
        return self.storage_dir / f"{revid}.yaml"


class CachedDiffSource(DiffSource):
    """Read-through cache in front of another diff source.

    Only successful fetches are cached, so failures are retried next run.
    """

    def __init__(self, source: DiffSource, cache: DiffCache) -> None:
        self.source = source
        self.cache = cache
        self.hits = 0

    async def fetch_added_text(self, identifier: str) -> FetchResult:
        revid = parse_revid(identifier)
        if revid is not None:
            cached = self.cache.get(revid)
            if cached is not None:
                self.hits += 1
                return FetchResult(added_text=cached, ok=True)

        result = await self.source.fetch_added_text(identifier)
        if result.ok and revid is not None:
            self.cache.put(revid, result.added_text)
        return result
