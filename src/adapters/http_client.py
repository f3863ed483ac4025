"""httpx wrapper.

Standardizes timeouts and headers (User-Agent on every request) and
implements `core.interfaces.fetcher.JsonFetcher` on top of httpx. Also hosts
the HTML-to-text helper used when showing post content to a learner.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from bs4 import BeautifulSoup

from core.config import AppSettings

log = logging.getLogger(__name__)


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` with the project defaults.

    `transport` lets tests plug an `httpx.MockTransport`.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )


class HttpxJsonFetcher:
    """`JsonFetcher` backed by httpx: one GET per call, no retries, no cache."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._transport = transport

    async def get_json(
        self,
        url: str,
        *,
        accept: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        async with build_async_client(
            self._settings,
            extra_headers={"Accept": accept},
            transport=self._transport,
        ) as client:
            log.debug("GET %s (Accept: %s)", url, accept)
            response = await client.get(url, params=params)
            log.debug("GET %s -> HTTP %s", url, response.status_code)
            response.raise_for_status()
            return response.json()


def html_to_text(html: str | None, *, max_chars: int | None = None) -> str:
    """Strip markup from post/bio HTML, optionally truncating with `...`."""

    if not html:
        return ""
    text = BeautifulSoup(html, "html.parser").get_text(separator=" ")
    text = " ".join(text.split())
    if max_chars is not None and len(text) > max_chars:
        return text[:max_chars].rstrip() + "..."
    return text
