"""
Tests for core/services/timeline.py

Covers:
- Request URL, query params and Accept header
- Status -> Note mapping (addressing by visibility, counters, attachments)
- Errors wrapped in TimelineFetchFailed, isolation across instances
"""

import httpx
import pytest

from core.domain.errors import TimelineFetchFailed
from core.domain.models import PUBLIC_COLLECTION, TimelineStatus
from core.services.timeline import build_timeline_url, convert_to_note, fetch_public_timeline, fetch_timelines

TIMELINE_URL = "https://mastodon.social/api/v1/timelines/public"


def _status(**overrides) -> dict:
    status = {
        "id": "111",
        "uri": "https://fosstodon.org/users/bob/statuses/111",
        "url": "https://fosstodon.org/@bob/111",
        "created_at": "2024-01-15T10:30:00.000Z",
        "visibility": "public",
        "language": "en",
        "content": "<p>hello</p>",
        "replies_count": 1,
        "reblogs_count": 2,
        "favourites_count": 3,
        "account": {"id": "9", "username": "bob", "acct": "bob@fosstodon.org", "url": "https://fosstodon.org/@bob"},
        "media_attachments": [{"type": "image", "url": "https://files/x.png"}, {"type": "video", "url": "https://files/y.mp4"}],
        "emojis": [],
    }
    status.update(overrides)
    return status


@pytest.mark.parametrize(
    "instance",
    ["mastodon.social", "https://mastodon.social", "mastodon.social/", " mastodon.social "],
)
def test_build_timeline_url_normalizes_instance(instance):
    assert build_timeline_url(instance) == TIMELINE_URL


@pytest.mark.asyncio
async def test_fetch_public_timeline_request_shape(make_fetcher):
    fetcher = make_fetcher({TIMELINE_URL: [_status()]})

    statuses = await fetch_public_timeline(fetcher, "mastodon.social", limit=3)

    assert [s.id for s in statuses] == ["111"]
    call = fetcher.calls[0]
    assert call.url == TIMELINE_URL
    assert call.params == {"limit": 3, "local": "false"}
    assert call.accept == "application/json"


@pytest.mark.asyncio
async def test_fetch_public_timeline_wraps_transport_errors(make_fetcher):
    fetcher = make_fetcher()

    with pytest.raises(TimelineFetchFailed) as exc_info:
        await fetch_public_timeline(fetcher, "mastodon.social")

    assert isinstance(exc_info.value.cause, httpx.ConnectError)
    assert exc_info.value.url == TIMELINE_URL


@pytest.mark.asyncio
async def test_fetch_public_timeline_rejects_non_list(make_fetcher):
    fetcher = make_fetcher({TIMELINE_URL: {"error": "This method requires an authenticated user"}})

    with pytest.raises(TimelineFetchFailed):
        await fetch_public_timeline(fetcher, "mastodon.social")


@pytest.mark.asyncio
async def test_fetch_timelines_isolates_failures(make_fetcher):
    fetcher = make_fetcher({TIMELINE_URL: [_status(), _status(id="112")]})

    results = await fetch_timelines(fetcher, ["down.example", "mastodon.social"], limit=2)

    assert [r.instance for r in results] == ["down.example", "mastodon.social"]
    assert isinstance(results[0].error, TimelineFetchFailed)
    assert results[0].statuses == []
    assert results[1].error is None
    assert len(results[1].statuses) == 2


def test_convert_to_note_public():
    note = convert_to_note(TimelineStatus.model_validate(_status()))

    assert note["@context"] == "https://www.w3.org/ns/activitystreams"
    assert note["type"] == "Note"
    assert note["id"] == "https://fosstodon.org/users/bob/statuses/111"
    assert note["published"] == "2024-01-15T10:30:00Z"
    assert note["attributedTo"] == "https://fosstodon.org/@bob"
    assert note["to"] == [PUBLIC_COLLECTION]
    assert note["cc"] == []
    assert note["replies"] == {"type": "Collection", "totalItems": 1}
    assert note["shares"]["totalItems"] == 2
    assert note["likes"]["totalItems"] == 3
    assert [a["mediaType"] for a in note["attachment"]] == ["image/*", "unknown"]


def test_convert_to_note_unlisted_goes_to_cc():
    note = convert_to_note(TimelineStatus.model_validate(_status(visibility="unlisted")))

    assert note["to"] == []
    assert note["cc"] == [PUBLIC_COLLECTION]
