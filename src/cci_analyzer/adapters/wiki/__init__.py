"""MediaWiki adapters."""

from cci_analyzer.adapters.wiki.diff_html import extract_added_text
from cci_analyzer.adapters.wiki.mediawiki_client import MediaWikiClient, WikiError

__all__ = ["MediaWikiClient", "WikiError", "extract_added_text"]
