"""Public timeline service.

Fetches the federated public timeline of a Mastodon instance through its REST
API and maps statuses onto ActivityStreams `Note` objects.

Why it exists:
- Learners usually meet Mastodon through its client API first; putting a
  status next to the Note it becomes shows how that API relates to the
  federation format.

Rules:
- One GET per instance (`local=false`, so federated posts are included).
- A failing instance is reported on its own `InstanceTimeline`; the others
  are still fetched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from pydantic import ValidationError

from core.domain.errors import TimelineFetchFailed
from core.domain.models import ACTIVITYSTREAMS_CONTEXT, PUBLIC_COLLECTION, TimelineStatus
from core.interfaces.fetcher import JsonFetcher

log = logging.getLogger(__name__)


def build_timeline_url(instance: str) -> str:
    host = instance.strip().removeprefix("https://").removeprefix("http://").rstrip("/")
    return f"https://{host}/api/v1/timelines/public"


async def fetch_public_timeline(
    fetcher: JsonFetcher,
    instance: str,
    limit: int = 5,
) -> list[TimelineStatus]:
    """Latest public statuses (local and federated) of `instance`."""

    url = build_timeline_url(instance)
    params = {"limit": limit, "local": "false"}
    try:
        payload = await fetcher.get_json(url, accept="application/json", params=params)
        if not isinstance(payload, list):
            raise ValueError("timeline response is not a JSON array")
        statuses = [TimelineStatus.model_validate(item) for item in payload]
    except (ValidationError, ValueError) as exc:
        raise TimelineFetchFailed(f"Unexpected timeline payload from {instance}", url=url, cause=exc) from exc
    except Exception as exc:
        raise TimelineFetchFailed(f"Failed to fetch timeline from {instance}", url=url, cause=exc) from exc

    log.info("Fetched %d statuses from %s", len(statuses), instance)
    return statuses


def convert_to_note(status: TimelineStatus) -> dict[str, Any]:
    """Map a Mastodon REST status onto an ActivityStreams Note."""

    return {
        "@context": ACTIVITYSTREAMS_CONTEXT,
        "type": "Note",
        "id": status.uri,
        "published": status.created_at.isoformat().replace("+00:00", "Z"),
        "attributedTo": status.account.url,
        "content": status.content,
        "to": [PUBLIC_COLLECTION] if status.visibility == "public" else [],
        "cc": [PUBLIC_COLLECTION] if status.visibility == "unlisted" else [],
        "url": status.url,
        "replies": {"type": "Collection", "totalItems": status.replies_count},
        "likes": {"type": "Collection", "totalItems": status.favourites_count},
        "shares": {"type": "Collection", "totalItems": status.reblogs_count},
        "attachment": [
            {
                "type": "Document",
                "mediaType": "image/*" if media.type == "image" else "unknown",
                "url": media.url,
            }
            for media in status.media_attachments
        ],
    }


@dataclass
class InstanceTimeline:
    instance: str
    statuses: list[TimelineStatus] = field(default_factory=list)
    error: TimelineFetchFailed | None = None


async def fetch_timelines(
    fetcher: JsonFetcher,
    instances: Iterable[str],
    limit: int = 5,
) -> list[InstanceTimeline]:
    """One `InstanceTimeline` per instance; failures stay isolated."""

    results: list[InstanceTimeline] = []
    for instance in instances:
        try:
            statuses = await fetch_public_timeline(fetcher, instance, limit)
        except TimelineFetchFailed as exc:
            log.warning("%s", exc.describe())
            results.append(InstanceTimeline(instance=instance, error=exc))
            continue
        results.append(InstanceTimeline(instance=instance, statuses=statuses))
    return results
