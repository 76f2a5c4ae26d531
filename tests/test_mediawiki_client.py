"""Tests for the MediaWiki client."""

import httpx
import pytest

from cci_analyzer.adapters.wiki import MediaWikiClient, WikiError

DIFF_BODY = (
    '<tr><td class="diff-marker" data-marker="+"></td>'
    '<td class="diff-addedline diff-side-added"><div>Added sentence.</div></td></tr>'
)


def make_client(handler, **kwargs) -> MediaWikiClient:
    return MediaWikiClient(
        api_url="https://test.wikipedia.org/w/api.php",
        user_agent="cci-analyzer-tests",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_fetch_added_text():
    """Test a compare request is built and parsed."""
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"compare": {"fromrevid": 1, "torevid": 509191673, "body": DIFF_BODY}})

    result = await make_client(handler).fetch_added_text("[[Special:Diff/509191673|(+7148)]]")

    assert result.ok
    assert result.added_text == "Added sentence."

    params = seen[0].url.params
    assert params["action"] == "compare"
    assert params["fromrev"] == "509191673"
    assert params["torelative"] == "prev"
    assert seen[0].headers["User-Agent"] == "cci-analyzer-tests"


@pytest.mark.asyncio
async def test_fetch_added_text_api_error():
    """Test API errors such as deleted revisions become failed fetches."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"error": {"code": "nosuchrevid", "info": "There is no revision"}})

    result = await make_client(handler).fetch_added_text("[[Special:Diff/1|(+1)]]")

    assert not result.ok
    assert result.added_text == ""


@pytest.mark.asyncio
async def test_fetch_added_text_hidden_body():
    """Test a compare result without a body is a failed fetch."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"compare": {"fromrevid": 1, "torevid": 2}})

    result = await make_client(handler).fetch_added_text("[[Special:Diff/2|(+1)]]")

    assert not result.ok


@pytest.mark.asyncio
async def test_fetch_added_text_http_errors():
    """Test HTTP and transport errors never raise."""

    def server_error(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="oops")

    def unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    def not_json(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>maintenance</html>")

    for handler in (server_error, unreachable, not_json):
        result = await make_client(handler).fetch_added_text("[[Special:Diff/3|(+1)]]")
        assert not result.ok


@pytest.mark.asyncio
async def test_fetch_added_text_without_revid():
    """Test references without a revision id are not requested."""
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    result = await make_client(handler).fetch_added_text("[[Foo]]")

    assert not result.ok
    assert calls == []


@pytest.mark.asyncio
async def test_shared_client_context():
    """Test the client can be used as a context manager."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"compare": {"body": DIFF_BODY}})

    async with make_client(handler) as wiki:
        first = await wiki.fetch_added_text("[[Special:Diff/1|(+1)]]")
        second = await wiki.fetch_added_text("[[Special:Diff/2|(+1)]]")

    assert first.added_text == second.added_text == "Added sentence."
    assert wiki._client is None


@pytest.mark.asyncio
async def test_fetch_page_text():
    """Test reading the wikitext of a CCI page."""

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["titles"] == "Wikipedia:Contributor copyright investigations/Example"
        return httpx.Response(200, json={
            "query": {"pages": [{
                "title": "Wikipedia:Contributor copyright investigations/Example",
                "revisions": [{"slots": {"main": {"content": "*[[:Foo]] (1 edit): [[Special:Diff/1|(+1)]]"}}}],
            }]},
        })

    text = await make_client(handler).fetch_page_text("Wikipedia:Contributor copyright investigations/Example")

    assert text == "*[[:Foo]] (1 edit): [[Special:Diff/1|(+1)]]"


@pytest.mark.asyncio
async def test_fetch_page_text_missing():
    """Test a missing page raises."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"query": {"pages": [{"title": "Nope", "missing": True}]}})

    with pytest.raises(WikiError, match="does not exist"):
        await make_client(handler).fetch_page_text("Nope")


@pytest.mark.asyncio
async def test_fetch_page_text_unreachable():
    """Test network failures raise a wiki error."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(WikiError):
        await make_client(handler).fetch_page_text("Anything")
