"""
Tests for adapters/http_client.py

Covers:
- Default headers (User-Agent, Accept) and per-call Accept override
- Query parameters and timeout configuration
- Non-2xx responses raise, bodies are decoded as JSON
- html_to_text() stripping and truncation
"""

import httpx
import pytest

from adapters.http_client import HttpxJsonFetcher, build_async_client, html_to_text
from core.config import AppSettings


def _recording_transport(seen: list[httpx.Request], *, status: int = 200, body=None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(status, json=body if body is not None else {"ok": True})

    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_get_json_sends_user_agent_and_accept(settings):
    seen: list[httpx.Request] = []
    fetcher = HttpxJsonFetcher(settings, transport=_recording_transport(seen))

    payload = await fetcher.get_json("https://example.org/users/alice", accept="application/activity+json")

    assert payload == {"ok": True}
    assert seen[0].method == "GET"
    assert seen[0].headers["User-Agent"] == "ActivityPub-Learning-Setup/1.0"
    assert seen[0].headers["Accept"] == "application/activity+json"


@pytest.mark.asyncio
async def test_get_json_keeps_webfinger_query_intact(settings):
    seen: list[httpx.Request] = []
    fetcher = HttpxJsonFetcher(settings, transport=_recording_transport(seen))

    await fetcher.get_json(
        "https://example.org/.well-known/webfinger?resource=acct:alice@example.org",
        accept="application/jrd+json",
    )

    assert seen[0].url.host == "example.org"
    assert seen[0].url.path == "/.well-known/webfinger"
    assert seen[0].url.params["resource"] == "acct:alice@example.org"


@pytest.mark.asyncio
async def test_get_json_passes_params(settings):
    seen: list[httpx.Request] = []
    fetcher = HttpxJsonFetcher(settings, transport=_recording_transport(seen, body=[]))

    payload = await fetcher.get_json(
        "https://mastodon.social/api/v1/timelines/public",
        accept="application/json",
        params={"limit": 3, "local": "false"},
    )

    assert payload == []
    assert seen[0].url.params["limit"] == "3"
    assert seen[0].url.params["local"] == "false"


@pytest.mark.asyncio
async def test_get_json_raises_on_http_error(settings):
    fetcher = HttpxJsonFetcher(settings, transport=_recording_transport([], status=404, body={"error": "nope"}))

    with pytest.raises(httpx.HTTPStatusError):
        await fetcher.get_json("https://example.org/users/ghost", accept="application/activity+json")


@pytest.mark.asyncio
async def test_get_json_raises_on_invalid_json(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>not json</html>")

    fetcher = HttpxJsonFetcher(settings, transport=httpx.MockTransport(handler))

    with pytest.raises(ValueError):
        await fetcher.get_json("https://example.org/", accept="application/json")


def test_build_async_client_uses_configured_timeout():
    custom = AppSettings(_env_file=None, http_timeout_seconds=2.5, user_agent="tests/0.1")

    client = build_async_client(custom, extra_headers={"X-Extra": "1"})

    assert client.timeout.read == 2.5
    assert client.timeout.connect == 2.5
    assert client.headers["User-Agent"] == "tests/0.1"
    assert client.headers["X-Extra"] == "1"
    assert client.follow_redirects is True


def test_html_to_text_strips_markup_and_collapses_whitespace():
    html = '<p>Hello <a href="https://x">@bob</a></p>\n<p>  second   line</p>'

    assert html_to_text(html) == "Hello @bob second line"


def test_html_to_text_truncates_with_ellipsis():
    assert html_to_text("<p>" + "a" * 150 + "</p>", max_chars=100) == "a" * 100 + "..."


def test_html_to_text_short_text_untouched():
    assert html_to_text("<b>short</b>", max_chars=100) == "short"


@pytest.mark.parametrize("empty", [None, ""])
def test_html_to_text_empty(empty):
    assert html_to_text(empty) == ""
