"""Handle resolution pipeline.

Chains the four network stages a learner follows by hand:

    WebFinger discovery -> actor document -> outbox -> first outbox page

Why it exists:
- The CLI, the JSON export and the tests all need the same chain; keeping it
  here leaves printing, progress and exit codes to the callers.
- Every stage talks to the network only through `JsonFetcher`, so the whole
  pipeline runs against an in-memory fake.

Rules:
- Stages never print. Every step is reported as a `ResolverEvent` through
  `ResolverHooks`, and logged.
- Failure of a stage aborts the remaining stages for that handle only.
- Outbox failures are downgraded to warnings; the profile is still returned.
- Nothing is cached: every call performs its requests again.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Sequence
from urllib.parse import quote, urlparse

from pydantic import ValidationError

from core.config import AppSettings
from core.domain.errors import (
    ActivityPubError,
    ActorFetchFailed,
    DiscoveryFailed,
    InvalidHandleFormat,
    OutboxFetchFailed,
)
from core.domain.events import EventKind, ResolverEvent
from core.domain.models import (
    ACTIVITY_JSON,
    ACTIVITYSTREAMS_CONTEXT,
    JRD_JSON,
    LD_JSON,
    Activity,
    Actor,
    ActorProfile,
    CollectionPage,
    Handle,
    OrderedCollection,
    ResolutionResult,
    WebFingerDocument,
    ref_id,
)
from core.interfaces.fetcher import JsonFetcher

log = logging.getLogger(__name__)

ACTOR_ACCEPT = f"{ACTIVITY_JSON}, {LD_JSON}"

_FORBIDDEN_DOMAIN_CHARS = frozenset("/?#\\")


def parse_handle(handle: str) -> Handle:
    """Split `username@domain`, raising `InvalidHandleFormat` when malformed."""

    if not isinstance(handle, str):
        raise InvalidHandleFormat(repr(handle), "handle must be a string")

    value = handle.strip()
    if value.count("@") != 1:
        raise InvalidHandleFormat(handle, "expected exactly one '@' (username@domain)")

    username, domain = value.split("@", 1)
    if not username:
        raise InvalidHandleFormat(handle, "empty username")
    if not domain:
        raise InvalidHandleFormat(handle, "empty domain")
    if any(ch.isspace() or ch in _FORBIDDEN_DOMAIN_CHARS for ch in domain):
        raise InvalidHandleFormat(handle, "domain contains invalid characters")

    return Handle(username=username, domain=domain)


def _encode(part: str) -> str:
    # Same rule for username and domain: only RFC 3986 unreserved chars stay literal.
    return quote(part, safe="")


def build_webfinger_url(handle: Handle | str) -> str:
    """`https://<domain>/.well-known/webfinger?resource=acct:<user>@<domain>`."""

    parsed = handle if isinstance(handle, Handle) else parse_handle(handle)
    user = _encode(parsed.username)
    domain = _encode(parsed.domain)
    return f"https://{domain}/.well-known/webfinger?resource=acct:{user}@{domain}"


def extract_actor_url(document: WebFingerDocument) -> str | None:
    """`href` of the first link typed exactly `application/activity+json`.

    First match wins even when it carries no `href`; later links are not consulted.
    """

    for link in document.links:
        if link.type == ACTIVITY_JSON:
            return link.href
    return None


def _is_absolute_http_url(url: object) -> bool:
    if not isinstance(url, str) or not url:
        return False
    parts = urlparse(url)
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def _has_activitystreams_context(context: Any) -> bool:
    if isinstance(context, str):
        return context == ACTIVITYSTREAMS_CONTEXT
    if isinstance(context, list):
        return ACTIVITYSTREAMS_CONTEXT in context
    return False


def _to_activity(item: Any) -> Activity:
    if isinstance(item, str):
        return Activity(id=item)
    if isinstance(item, dict):
        try:
            return Activity.model_validate(item)
        except ValidationError as exc:
            log.debug("Keeping unvalidated outbox item %s: %s", item.get("id"), exc)
            return Activity.model_construct(**item)
    return Activity(id=str(item))


@dataclass
class ResolverHooks:
    """Optional callbacks for UI layers."""

    event: Callable[[ResolverEvent], None] | None = None


@dataclass
class HandleOutcome:
    """Per-handle result of a batch: exactly one of `profile`/`error` is meaningful.

    `profile` is None with no `error` when discovery found no actor URL.
    """

    handle: str
    profile: ActorProfile | None = None
    error: ActivityPubError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.profile is not None


class HandleResolver:
    """Resolves `user@domain` handles into actors and recent activities."""

    def __init__(
        self,
        fetcher: JsonFetcher,
        *,
        settings: AppSettings | None = None,
        hooks: ResolverHooks | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._settings = settings or AppSettings()
        self._hooks = hooks or ResolverHooks()

    def _emit(self, kind: EventKind, **fields: Any) -> None:
        event = ResolverEvent(kind=kind, **fields)
        if kind.is_failure:
            log.warning("%s handle=%s url=%s %s", kind.value, event.handle, event.url, event.detail or "")
        else:
            log.info("%s handle=%s url=%s", kind.value, event.handle, event.url)
        if self._hooks.event:
            self._hooks.event(event)

    async def resolve(self, handle: str) -> ResolutionResult:
        """WebFinger discovery for one handle."""

        parsed = parse_handle(handle)
        url = build_webfinger_url(parsed)
        label = str(parsed)

        self._emit(EventKind.DISCOVERY_STARTED, handle=label, url=url)
        try:
            payload = await self._fetcher.get_json(url, accept=JRD_JSON)
            if not isinstance(payload, dict):
                raise ValueError("WebFinger response is not a JSON object")
            document = WebFingerDocument.model_validate(payload)
        except Exception as exc:
            error = DiscoveryFailed(f"WebFinger discovery failed for {label}", url=url, cause=exc)
            self._emit(EventKind.DISCOVERY_FAILED, handle=label, url=url, detail=str(exc), error=error)
            raise error from exc

        actor_url = extract_actor_url(document)
        self._emit(EventKind.DISCOVERY_SUCCEEDED, handle=label, url=url, detail=actor_url)
        return ResolutionResult(handle=label, webfinger=document, actor_url=actor_url)

    async def fetch_actor(self, actor_url: str, *, handle: str | None = None) -> Actor:
        """Fetch and parse an actor document. Never cached."""

        self._emit(EventKind.ACTOR_FETCH_STARTED, handle=handle, url=actor_url)
        try:
            if not _is_absolute_http_url(actor_url):
                raise ValueError(f"not an absolute http(s) URI: {actor_url!r}")
            payload = await self._fetcher.get_json(actor_url, accept=ACTOR_ACCEPT)
            if not isinstance(payload, dict):
                raise ValueError("actor response is not a JSON object")
            actor = Actor.model_validate(payload)
            if self._settings.require_activitystreams_context and not _has_activitystreams_context(actor.context):
                raise ValueError("actor document lacks the ActivityStreams @context")
        except Exception as exc:
            error = ActorFetchFailed(f"Failed to fetch actor from {actor_url}", url=actor_url, cause=exc)
            self._emit(EventKind.ACTOR_FETCH_FAILED, handle=handle, url=actor_url, detail=str(exc), error=error)
            raise error from exc

        self._emit(EventKind.ACTOR_FETCH_SUCCEEDED, handle=handle, url=actor_url, detail=actor.type)
        return actor

    async def _load_outbox(
        self,
        outbox: str | OrderedCollection | dict[str, Any],
        limit: int,
    ) -> tuple[int | None, list[Activity]]:
        current = ref_id(outbox)
        try:
            if isinstance(outbox, str):
                collection = OrderedCollection.model_validate(
                    await self._fetcher.get_json(outbox, accept=ACTOR_ACCEPT)
                )
            else:
                # Embedded outbox: no request for the collection itself.
                collection = OrderedCollection.model_validate(outbox)
            page: CollectionPage = collection
            if isinstance(collection.first, CollectionPage):
                page = collection.first
            elif isinstance(collection.first, str):
                current = collection.first
                page = CollectionPage.model_validate(
                    await self._fetcher.get_json(collection.first, accept=ACTOR_ACCEPT)
                )
        except Exception as exc:
            raise OutboxFetchFailed(f"Failed to fetch outbox {current}", url=current, cause=exc) from exc

        items = page.raw_items()[: max(0, limit)]
        return collection.total_items, [_to_activity(item) for item in items]

    async def _read_outbox(
        self,
        outbox: str | OrderedCollection | dict[str, Any] | None,
        limit: int,
        handle: str | None,
    ) -> tuple[int | None, list[Activity], OutboxFetchFailed | None]:
        if outbox is None or outbox == "":
            self._emit(EventKind.OUTBOX_MISSING, handle=handle)
            return None, [], None

        outbox_url = ref_id(outbox)
        self._emit(EventKind.OUTBOX_STARTED, handle=handle, url=outbox_url)
        try:
            total, activities = await self._load_outbox(outbox, limit)
        except OutboxFetchFailed as exc:
            self._emit(EventKind.OUTBOX_FAILED, handle=handle, url=exc.url, detail=str(exc.cause), error=exc)
            return None, [], exc

        self._emit(
            EventKind.OUTBOX_FETCHED,
            handle=handle,
            url=outbox_url,
            detail=f"total={total if total is not None else 'unknown'} shown={len(activities)}",
        )
        return total, activities, None

    async def fetch_outbox_page(
        self,
        outbox: str | OrderedCollection | dict[str, Any] | None,
        limit: int,
        *,
        handle: str | None = None,
    ) -> list[Activity]:
        """First `limit` activities of an outbox, in server order.

        `outbox` is the actor's `outbox` property: a URL or an embedded
        collection. Absent -> `[]` without any request. Failures are reported
        as an `OUTBOX_FAILED` event and also yield `[]`.
        """

        _, activities, _ = await self._read_outbox(outbox, limit, handle)
        return activities

    async def resolve_complete(self, handle: str, *, limit: int | None = None) -> ActorProfile | None:
        """resolve -> fetch_actor -> outbox. None when no actor URL was discovered."""

        resolution = await self.resolve(handle)
        if not resolution.actor_url:
            self._emit(
                EventKind.ACTOR_URL_MISSING,
                handle=resolution.handle,
                detail="No ActivityPub actor URL found in WebFinger response",
            )
            return None

        actor = await self.fetch_actor(resolution.actor_url, handle=resolution.handle)

        outbox_limit = self._settings.outbox_limit if limit is None else limit
        total, activities, outbox_error = await self._read_outbox(actor.outbox, outbox_limit, resolution.handle)
        warnings: list[str] = []
        if outbox_error is not None:
            warnings.append(outbox_error.describe())

        return ActorProfile(
            handle=resolution.handle,
            resolution=resolution,
            actor=actor,
            outbox_total_items=total,
            activities=activities,
            warnings=warnings,
        )

    async def _outcome(self, handle: str, limit: int | None) -> HandleOutcome:
        try:
            profile = await self.resolve_complete(handle, limit=limit)
        except ActivityPubError as exc:
            return HandleOutcome(handle=handle, error=exc)
        return HandleOutcome(handle=handle, profile=profile)

    async def resolve_many(
        self,
        handles: Iterable[str],
        *,
        limit: int | None = None,
        max_concurrency: int | None = None,
    ) -> list[HandleOutcome]:
        """Resolve several handles; one handle's failure never affects the others.

        Outcomes come back in input order. With concurrency 1 each handle's
        pipeline finishes before the next one starts.
        """

        items: Sequence[str] = list(handles)
        concurrency = max(1, max_concurrency or self._settings.max_concurrency)

        if concurrency == 1:
            return [await self._outcome(handle, limit) for handle in items]

        sem = asyncio.Semaphore(concurrency)

        async def guarded(handle: str) -> HandleOutcome:
            async with sem:
                return await self._outcome(handle, limit)

        return list(await asyncio.gather(*(guarded(handle) for handle in items)))
