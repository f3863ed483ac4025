"""Learning platform -> Mastodon notification simulation.

Scenario: a professor uploads a video, the platform turns the upload into a
Note wrapped in a Create activity, and describes the inbox POST a real
integration would perform. Nothing is sent and nothing is signed; the
`Signature` header is a placeholder.
"""

from __future__ import annotations

import random
import re
from datetime import datetime
from email.utils import format_datetime
from typing import Any, Sequence

from core.domain.models import ACTIVITY_JSON, ACTIVITYSTREAMS_CONTEXT, PUBLIC_COLLECTION
from core.domain.simulation import (
    Course,
    DeliveryRequest,
    Professor,
    Reaction,
    Student,
    Video,
    VideoUpload,
    WebhookPayload,
)

REACTION_TYPES = ("Like", "Announce", "Create")
REPLY_TEXT = "Thanks for the new video! Looking forward to watching it"
PLACEHOLDER_SIGNATURE = 'keyId="...",headers="...",signature="..."'

DEFAULT_STUDENTS: tuple[Student, ...] = (
    Student(name="Alice", handle="alice_cs"),
    Student(name="Bob", handle="bob_student"),
    Student(name="Carol", handle="carol_learns"),
)

_WHITESPACE_RE = re.compile(r"\s+")
_NON_ALNUM_RE = re.compile(r"[^a-zA-Z0-9]")


def demo_upload() -> VideoUpload:
    """The upload used by the `notify` command."""

    return VideoUpload(
        video=Video(
            id="activitypub-intro-2024",
            title="Introduction to ActivityPub Protocol",
            description="Learn the basics of decentralized social networking with ActivityPub",
            duration="15:42",
            url="https://learning-platform.uni.edu/courses/distributed-systems/videos/activitypub-intro",
            thumbnail="https://learning-platform.uni.edu/thumbnails/activitypub-intro.jpg",
        ),
        course=Course(id="CS-480", name="Distributed Systems"),
        professor=Professor(id="prof-smith", name="Dr. Sarah Smith", mastodon_handle="dr_smith"),
        enrolled_students=[s.handle for s in DEFAULT_STUDENTS],
    )


def build_webhook_payload(upload: VideoUpload, now: datetime) -> WebhookPayload:
    return WebhookPayload(
        timestamp=now.isoformat(),
        course=upload.course,
        professor=upload.professor,
        video=upload.video,
        enrolled_students=list(upload.enrolled_students),
    )


def course_hashtag(course_name: str) -> str:
    """`Distributed Systems` -> `DistributedSystems` (ASCII alphanumerics only)."""

    return _NON_ALNUM_RE.sub("", _WHITESPACE_RE.sub("", course_name))


def actor_id_for(professor: Professor, instance: str) -> str:
    return f"https://{instance}/users/{professor.mastodon_handle}"


def build_note(payload: WebhookPayload, instance: str = "mastodon.social") -> dict[str, Any]:
    """ActivityStreams Note announcing the video."""

    video = payload.video
    hashtag = course_hashtag(payload.course.name)
    actor_id = actor_id_for(payload.professor, instance)

    content = (
        "<p><strong>New Video Available!</strong></p>"
        f"<p><strong>Course:</strong> {payload.course.name}</p>"
        f"<p><strong>Title:</strong> {video.title}</p>"
        f"<p><strong>Description:</strong> {video.description}</p>"
        f"<p><strong>Duration:</strong> {video.duration}</p>"
        f'<p><strong>Watch now:</strong> <a href="{video.url}">{video.url}</a></p>'
        f'<p><a href="{video.thumbnail}">Video Thumbnail</a></p>'
        f"<p>#{hashtag} #UniversityLearning #NewContent</p>"
    )

    return {
        "@context": ACTIVITYSTREAMS_CONTEXT,
        "type": "Note",
        "id": f"https://learning-platform.uni.edu/videos/{video.id}/activitypub",
        "published": payload.timestamp,
        "attributedTo": actor_id,
        "content": content,
        "to": [PUBLIC_COLLECTION],
        "cc": [f"{actor_id}/followers"],
        "url": video.url,
        "attachment": [
            {
                "type": "Document",
                "mediaType": "image/jpeg",
                "url": video.thumbnail,
                "name": f"Thumbnail for {video.title}",
            }
        ],
        "tag": [
            {
                "type": "Hashtag",
                "href": f"https://{instance}/tags/{hashtag.lower()}",
                "name": f"#{hashtag}",
            },
            {
                "type": "Hashtag",
                "href": f"https://{instance}/tags/universitylearning",
                "name": "#UniversityLearning",
            },
            {
                "type": "Hashtag",
                "href": f"https://{instance}/tags/newcontent",
                "name": "#NewContent",
            },
        ],
    }


def build_create_activity(note: dict[str, Any], actor_id: str) -> dict[str, Any]:
    """Wrap `note` in a Create activity sharing its addressing."""

    return {
        "@context": ACTIVITYSTREAMS_CONTEXT,
        "type": "Create",
        "id": f"{note['id']}/activity",
        "actor": actor_id,
        "published": note.get("published"),
        "to": note.get("to", []),
        "cc": note.get("cc", []),
        "object": note,
    }


def describe_delivery(activity: dict[str, Any], instance: str, now: datetime) -> DeliveryRequest:
    """The inbox POST a real integration would send (unsigned, never sent)."""

    username = str(activity["actor"]).rstrip("/").split("/")[-1]
    return DeliveryRequest(
        method="POST",
        url=f"https://{instance}/users/{username}/inbox",
        headers={
            "Content-Type": ACTIVITY_JSON,
            "Date": format_datetime(now, usegmt=True),
            "Host": instance,
            "Signature": PLACEHOLDER_SIGNATURE,
        },
        body=activity,
    )


def simulate_reactions(
    students: Sequence[Student] = DEFAULT_STUDENTS,
    rng: random.Random | None = None,
) -> list[Reaction]:
    """One random reaction (Like, Announce or reply) per student."""

    rng = rng or random.Random()
    reactions: list[Reaction] = []
    for student in students:
        kind = rng.choice(REACTION_TYPES)
        reactions.append(
            Reaction(
                student=student,
                activity_type=kind,
                reply_text=REPLY_TEXT if kind == "Create" else None,
            )
        )
    return reactions
