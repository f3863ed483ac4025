"""Observation events emitted by the resolver pipeline.

The resolver never prints. Presentation layers subscribe to these events
(see `core.services.resolver.ResolverHooks`) and decide how to render them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from core.domain.errors import ActivityPubError


class EventKind(str, Enum):
    DISCOVERY_STARTED = "discovery.started"
    DISCOVERY_SUCCEEDED = "discovery.succeeded"
    DISCOVERY_FAILED = "discovery.failed"
    ACTOR_URL_MISSING = "discovery.actor_url_missing"
    ACTOR_FETCH_STARTED = "actor.started"
    ACTOR_FETCH_SUCCEEDED = "actor.succeeded"
    ACTOR_FETCH_FAILED = "actor.failed"
    OUTBOX_MISSING = "outbox.missing"
    OUTBOX_STARTED = "outbox.started"
    OUTBOX_FETCHED = "outbox.fetched"
    OUTBOX_FAILED = "outbox.failed"

    @property
    def is_failure(self) -> bool:
        return self in (
            EventKind.DISCOVERY_FAILED,
            EventKind.ACTOR_FETCH_FAILED,
            EventKind.OUTBOX_FAILED,
        )


@dataclass(frozen=True)
class ResolverEvent:
    """One step of a resolution, as seen from the outside."""

    kind: EventKind
    handle: str | None = None
    url: str | None = None
    detail: str | None = None
    error: ActivityPubError | None = None
