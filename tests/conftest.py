"""
Fixtures shared by all tests.
"""

import asyncio
import copy
from dataclasses import dataclass
from typing import Any

import httpx
import pytest

from core.config import AppSettings


# ---------------------------------------------------------------------------
# Recording JsonFetcher: no real HTTP, every call is kept for assertions
# ---------------------------------------------------------------------------


@dataclass
class FetchCall:
    url: str
    accept: str
    params: dict[str, Any] | None


class RecordingFetcher:
    """In-memory `JsonFetcher`.

    `responses` maps URL -> JSON payload, or -> exception instance to raise.
    Unknown URLs raise `httpx.ConnectError`, like an unreachable host.
    """

    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[FetchCall] = []

    async def get_json(self, url: str, *, accept: str, params: dict[str, Any] | None = None) -> Any:
        self.calls.append(FetchCall(url=url, accept=accept, params=params))
        # Yield like real I/O so concurrent resolutions interleave.
        await asyncio.sleep(0)
        if url not in self.responses:
            raise httpx.ConnectError(f"no route to {url}")
        value = self.responses[url]
        if isinstance(value, BaseException):
            raise value
        return copy.deepcopy(value)

    @property
    def urls(self) -> list[str]:
        return [call.url for call in self.calls]


@pytest.fixture
def make_fetcher():
    """Factory for `RecordingFetcher` instances."""

    def _make(responses: dict[str, Any] | None = None) -> RecordingFetcher:
        return RecordingFetcher(responses)

    return _make


# ---------------------------------------------------------------------------
# Settings isolated from .env files and FEDI_PRIMER_* variables
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """No test reads the developer's configuration."""

    import os

    for key in list(os.environ):
        if key.upper().startswith("FEDI_PRIMER_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(_env_file=None)


# ---------------------------------------------------------------------------
# Sample documents (shapes as served by Mastodon)
# ---------------------------------------------------------------------------

ALICE_WEBFINGER_URL = "https://example.org/.well-known/webfinger?resource=acct:alice@example.org"
ALICE_ACTOR_URL = "https://example.org/users/alice"
ALICE_OUTBOX_URL = "https://example.org/users/alice/outbox"
ALICE_OUTBOX_PAGE_URL = "https://example.org/users/alice/outbox?page=true"


@pytest.fixture
def webfinger_doc() -> dict:
    return {
        "subject": "acct:alice@example.org",
        "aliases": ["https://example.org/@alice"],
        "links": [
            {"rel": "http://webfinger.net/rel/profile-page", "type": "text/html", "href": "https://example.org/@alice"},
            {"rel": "self", "type": "application/activity+json", "href": ALICE_ACTOR_URL},
        ],
    }


@pytest.fixture
def actor_doc() -> dict:
    return {
        "@context": ["https://www.w3.org/ns/activitystreams", "https://w3id.org/security/v1"],
        "id": ALICE_ACTOR_URL,
        "type": "Person",
        "preferredUsername": "alice",
        "name": "Alice",
        "summary": "<p>Hello <b>fediverse</b></p>",
        "url": "https://example.org/@alice",
        "inbox": f"{ALICE_ACTOR_URL}/inbox",
        "outbox": ALICE_OUTBOX_URL,
        "followers": f"{ALICE_ACTOR_URL}/followers",
        "following": f"{ALICE_ACTOR_URL}/following",
        "publicKey": {
            "id": f"{ALICE_ACTOR_URL}#main-key",
            "owner": ALICE_ACTOR_URL,
            "publicKeyPem": "-----BEGIN PUBLIC KEY-----\nMIIB...\n-----END PUBLIC KEY-----",
        },
        "icon": {"type": "Image", "mediaType": "image/png", "url": "https://example.org/avatar.png"},
        "featured": f"{ALICE_ACTOR_URL}/collections/featured",
    }


def make_activities(count: int) -> list[dict]:
    return [
        {
            "id": f"{ALICE_ACTOR_URL}/statuses/{n}/activity",
            "type": "Create",
            "actor": ALICE_ACTOR_URL,
            "published": f"2024-01-{n + 1:02d}T10:00:00Z",
            "object": {
                "id": f"{ALICE_ACTOR_URL}/statuses/{n}",
                "type": "Note",
                "content": f"<p>post {n}</p>",
            },
        }
        for n in range(count)
    ]


@pytest.fixture
def outbox_doc() -> dict:
    return {
        "@context": "https://www.w3.org/ns/activitystreams",
        "id": ALICE_OUTBOX_URL,
        "type": "OrderedCollection",
        "totalItems": 42,
        "first": ALICE_OUTBOX_PAGE_URL,
        "last": f"{ALICE_OUTBOX_URL}?min_id=0&page=true",
    }


@pytest.fixture
def outbox_page_doc() -> dict:
    return {
        "id": ALICE_OUTBOX_PAGE_URL,
        "type": "OrderedCollectionPage",
        "partOf": ALICE_OUTBOX_URL,
        "orderedItems": make_activities(10),
    }


@pytest.fixture
def alice_responses(webfinger_doc, actor_doc, outbox_doc, outbox_page_doc) -> dict:
    """Every document of the alice@example.org chain."""

    return {
        ALICE_WEBFINGER_URL: webfinger_doc,
        ALICE_ACTOR_URL: actor_doc,
        ALICE_OUTBOX_URL: outbox_doc,
        ALICE_OUTBOX_PAGE_URL: outbox_page_doc,
    }


@pytest.fixture
def fixed_now():
    from datetime import datetime, timezone

    return datetime(2024, 3, 1, 9, 0, 0, tzinfo=timezone.utc)
