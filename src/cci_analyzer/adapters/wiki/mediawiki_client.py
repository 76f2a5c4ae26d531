"""MediaWiki API client for diffs and page text."""

import sys
from typing import Any, Optional

import httpx

from cci_analyzer.adapters.wiki.diff_html import extract_added_text
from cci_analyzer.core import DiffSource, FetchResult
from cci_analyzer.core.listing_parser import parse_revid

DEFAULT_API_URL = "https://en.wikipedia.org/w/api.php"
DEFAULT_USER_AGENT = "cci-analyzer/0.1 (contributor copyright investigation helper)"


class WikiError(Exception):
    """Raised when the wiki cannot provide something the caller needs."""


class MediaWikiClient(DiffSource):
    """Read-only access to a MediaWiki site through its web API.

    Use as an async context manager to share one connection pool across
    requests; otherwise each call opens its own client.
    """

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 30.0,
        merge_deltas: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_url = api_url
        self.user_agent = user_agent
        self.timeout = timeout
        self.merge_deltas = merge_deltas
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "MediaWikiClient":
        self._client = self._new_client()
        return self

    async def __aexit__(self, *exc_info) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch_added_text(self, identifier: str) -> FetchResult:
        """Fetch the text added by the revision a diff reference points to."""
        revid = parse_revid(identifier)
        if revid is None:
            print(f"  └─ ⚠️  No revision id in {identifier}", file=sys.stderr)
            return FetchResult.failed()

        # No plain text diffs are available from the API, so parse the HTML.
        params = {
            "action": "compare",
            "fromrev": revid,
            "torelative": "prev",
            "prop": "diff",
            "format": "json",
            "formatversion": "2",
        }

        try:
            data = await self._get(params)
        except (httpx.HTTPError, ValueError) as e:
            print(f"  └─ ⚠️  Skipping revision {revid}: {e}", file=sys.stderr)
            return FetchResult.failed()

        if "error" in data:
            code = data["error"].get("code", "unknown")
            # nosuchrevid, missingcontent (revision deleted) and friends
            print(f"  └─ ⚠️  Skipping revision {revid}: API error {code}", file=sys.stderr)
            return FetchResult.failed()

        compare = data.get("compare") or {}
        body = compare.get("body", compare.get("*"))
        if body is None:
            print(f"  └─ ⚠️  Skipping revision {revid}: diff hidden", file=sys.stderr)
            return FetchResult.failed()

        return FetchResult(added_text=extract_added_text(body, self.merge_deltas), ok=True)

    async def fetch_page_text(self, title: str) -> str:
        """Current wikitext of a page.

        Raises:
            WikiError: if the page is missing or the wiki cannot be reached
        """
        params = {
            "action": "query",
            "prop": "revisions",
            "titles": title,
            "rvprop": "content",
            "rvslots": "main",
            "format": "json",
            "formatversion": "2",
        }

        try:
            data = await self._get(params)
        except (httpx.HTTPError, ValueError) as e:
            raise WikiError(f"Could not fetch {title}: {e}") from e

        if "error" in data:
            raise WikiError(f"Could not fetch {title}: {data['error'].get('info', data['error'])}")

        pages = data.get("query", {}).get("pages", [])
        if not pages or pages[0].get("missing") or pages[0].get("invalid"):
            raise WikiError(f"Page does not exist: {title}")

        try:
            return pages[0]["revisions"][0]["slots"]["main"]["content"]
        except (KeyError, IndexError) as e:
            raise WikiError(f"No readable content for {title}") from e

    async def _get(self, params: dict[str, Any]) -> dict:
        if self._client is not None:
            response = await self._client.get(self.api_url, params=params)
        else:
            async with self._new_client() as client:
                response = await client.get(self.api_url, params=params)
        response.raise_for_status()
        return response.json()

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": self.user_agent},
            transport=self._transport,
        )
