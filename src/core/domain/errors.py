"""Error taxonomy for the ActivityPub pipelines.

Transport failures keep the URL that was attempted and the underlying
exception (`cause`, also chained via `raise ... from`), so the CLI can print a
single normalized line per failed item.
"""

from __future__ import annotations


class ActivityPubError(Exception):
    """Base class for every failure raised by the core services."""

    def __init__(self, message: str, *, url: str | None = None, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.cause = cause

    def describe(self) -> str:
        parts = [str(self)]
        if self.url:
            parts.append(f"url={self.url}")
        if self.cause is not None:
            parts.append(f"cause={self.cause}")
        return " | ".join(parts)


class InvalidHandleFormat(ActivityPubError, ValueError):
    """Handle does not split into a non-empty username and domain."""

    def __init__(self, handle: str, reason: str = "expected username@domain") -> None:
        super().__init__(f"Invalid handle format {handle!r}: {reason}")
        self.handle = handle
        self.reason = reason


class DiscoveryFailed(ActivityPubError):
    """WebFinger request failed (network, timeout, non-2xx, bad body)."""


class ActorFetchFailed(ActivityPubError):
    """Actor document could not be fetched or parsed."""


class OutboxFetchFailed(ActivityPubError):
    """Outbox collection or its first page could not be fetched."""


class TimelineFetchFailed(ActivityPubError):
    """Mastodon public timeline request failed."""
