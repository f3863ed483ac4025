"""ActivityPub object tour.

Turns JSON-LD objects (the bundled examples or anything fetched) into labelled
rows a learner can read, and describes how the example objects relate.
Rendering is left to the CLI.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from adapters.http_client import html_to_text
from core.domain.models import ACTIVITYSTREAMS_CONTEXT, PUBLIC_COLLECTION

PLATFORM_NOTE_ID = "https://learning-platform.uni.edu/videos/activitypub-intro/note"
PLATFORM_VIDEO_URL = "https://learning-platform.uni.edu/videos/activitypub-intro"
PROFESSOR_ACTOR = "https://mastodon.social/users/professor"

RELATIONSHIPS: list[tuple[str, list[str]]] = [
    (
        "Actor creates a Note",
        ["Actor: Dr. ActivityPub (professor)", "Creates: Note about new video", "Wrapped in: Create activity"],
    ),
    (
        "Student follows Professor",
        ["Actor: Student", "Action: Follow activity", "Object: Professor's actor ID"],
    ),
    (
        "Professor accepts follow",
        ["Actor: Professor", "Action: Accept activity", "Object: Original Follow activity"],
    ),
    (
        "Student interacts with Note",
        ["Like activity: Student likes the Note", "Announce activity: Student boosts the Note"],
    ),
    (
        "Collections manage relationships",
        [
            "Followers collection: Who follows the Professor",
            "Following collection: Who the Professor follows",
            "Outbox collection: Professor's activities",
        ],
    ),
]


def example_title(key: str) -> str:
    return f"{key[:1].upper()}{key[1:]} Object"


def format_published(value: str) -> str:
    """ISO-8601 timestamp as `YYYY-MM-DD HH:MM:SS UTC`; unparsable input is returned unchanged."""

    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (TypeError, ValueError):
        return str(value)
    if parsed.tzinfo is None:
        return parsed.strftime("%Y-%m-%d %H:%M:%S")
    return parsed.strftime("%Y-%m-%d %H:%M:%S %Z")


def _join(value: Any) -> str:
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)


def describe_object(obj: dict[str, Any]) -> list[tuple[str, str]]:
    """Labelled rows for the interesting properties of a JSON-LD object.

    Only properties present in `obj` produce rows (type and id always do).
    """

    rows: list[tuple[str, str]] = [
        ("Type", str(obj.get("type"))),
        ("ID", str(obj.get("id"))),
    ]

    if obj.get("actor"):
        rows.append(("Actor", _join(obj["actor"])))
    if obj.get("published"):
        rows.append(("Published", format_published(obj["published"])))

    embedded = obj.get("object")
    if isinstance(embedded, str):
        rows.append(("Object (reference)", embedded))
    elif isinstance(embedded, dict):
        rows.append(("Object (embedded)", f"{embedded.get('type')} - {embedded.get('id')}"))

    if obj.get("content"):
        rows.append(("Content", html_to_text(obj["content"])))
    if obj.get("to"):
        rows.append(("To", _join(obj["to"])))
    if obj.get("cc"):
        rows.append(("CC", _join(obj["cc"])))
    if obj.get("preferredUsername"):
        rows.append(("Username", str(obj["preferredUsername"])))
    if obj.get("name"):
        rows.append(("Name", str(obj["name"])))
    if obj.get("summary"):
        rows.append(("Bio", html_to_text(obj["summary"])))
    if "totalItems" in obj:
        rows.append(("Total Items", str(obj["totalItems"])))
    if obj.get("@context"):
        rows.append(("Context", _join(obj["@context"])))
    return rows


def build_platform_note(now: datetime) -> dict[str, Any]:
    """Note a learning platform would publish for a new video."""

    return {
        "@context": ACTIVITYSTREAMS_CONTEXT,
        "type": "Note",
        "id": PLATFORM_NOTE_ID,
        "published": now.isoformat(),
        "attributedTo": PROFESSOR_ACTOR,
        "content": (
            '<p>New video available: "Introduction to ActivityPub"</p>'
            "<p>Course: Distributed Systems</p>"
            f'<p>Watch: <a href="{PLATFORM_VIDEO_URL}">{PLATFORM_VIDEO_URL.removeprefix("https://")}</a></p>'
            "<p>#ActivityPub #DistributedSystems #UniversityEducation</p>"
        ),
        "to": [PUBLIC_COLLECTION],
        "cc": [f"{PROFESSOR_ACTOR}/followers"],
        "tag": [
            {"type": "Hashtag", "name": "#ActivityPub"},
            {"type": "Hashtag", "name": "#DistributedSystems"},
            {"type": "Hashtag", "name": "#UniversityEducation"},
        ],
    }
