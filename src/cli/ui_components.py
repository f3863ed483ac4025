"""CLI UI components (Rich).

Keeps command logic apart from visual details; tables and panels are reused
across commands. The resolver event subscriber lives here too.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from rich.align import Align
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from adapters.http_client import html_to_text
from core.domain.events import EventKind, ResolverEvent
from core.domain.models import Activity, Actor, TimelineStatus
from core.domain.simulation import DeliveryRequest, Reaction
from core.services.resolver import HandleOutcome

_EVENT_STYLES: dict[EventKind, tuple[str, str]] = {
    EventKind.DISCOVERY_STARTED: ("blue", "Discovering actor"),
    EventKind.DISCOVERY_SUCCEEDED: ("green", "WebFinger discovery successful"),
    EventKind.DISCOVERY_FAILED: ("red", "WebFinger discovery failed"),
    EventKind.ACTOR_URL_MISSING: ("red", "No ActivityPub actor URL found in WebFinger response"),
    EventKind.ACTOR_FETCH_STARTED: ("blue", "Fetching ActivityPub actor"),
    EventKind.ACTOR_FETCH_SUCCEEDED: ("green", "Successfully fetched actor data"),
    EventKind.ACTOR_FETCH_FAILED: ("red", "Failed to fetch actor"),
    EventKind.OUTBOX_MISSING: ("yellow", "No outbox URL available"),
    EventKind.OUTBOX_STARTED: ("blue", "Fetching actor's outbox"),
    EventKind.OUTBOX_FETCHED: ("green", "Outbox fetched"),
    EventKind.OUTBOX_FAILED: ("yellow", "Could not fetch outbox activities"),
}


def print_banner(console: Console) -> None:
    title = Text("fedi-primer", style="bold cyan")
    subtitle = Text("WebFinger • Actors • Outboxes • Objects", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def print_info(console: Console, title: str, lines: Sequence[str]) -> None:
    """Short educational blurb printed before a command runs."""

    body = Text()
    for line in lines:
        body.append(f"- {line}\n")
    console.print(Panel(body, title=Text(title, style="bold cyan"), border_style="cyan"))


def print_event(console: Console, event: ResolverEvent) -> None:
    """Resolver event subscriber: one line per pipeline step."""

    style, label = _EVENT_STYLES.get(event.kind, ("white", event.kind.value))
    line = Text(label, style=style)
    if event.url and event.kind not in (EventKind.DISCOVERY_SUCCEEDED, EventKind.OUTBOX_FETCHED):
        line.append(f": {event.url}", style="dim")
    if event.detail and event.kind in (
        EventKind.DISCOVERY_SUCCEEDED,
        EventKind.OUTBOX_FETCHED,
        EventKind.DISCOVERY_FAILED,
        EventKind.ACTOR_FETCH_FAILED,
        EventKind.OUTBOX_FAILED,
    ):
        prefix = " -> actor " if event.kind is EventKind.DISCOVERY_SUCCEEDED else " "
        line.append(f"{prefix}{event.detail}")
    console.print(line)


def build_actor_panel(actor: Actor) -> Panel:
    """Actor analysis: identity, endpoints, key, images, extra properties."""

    table = Table.grid(padding=(0, 2))
    table.add_column(style="cyan", no_wrap=True)
    table.add_column(style="white")

    table.add_row("Type", actor.type)
    table.add_row("ID", actor.id)
    table.add_row("Name", actor.name or "Not specified")
    table.add_row("Preferred Username", actor.preferred_username or "-")
    table.add_row("Summary", html_to_text(actor.summary, max_chars=100) or "No bio")
    if actor.url:
        table.add_row("Profile URL", str(actor.url))

    for label, value in (
        ("Inbox", actor.inbox_url),
        ("Outbox", actor.outbox_url or ("embedded collection" if actor.outbox else None)),
        ("Followers Collection", actor.followers_url),
        ("Following Collection", actor.following_url),
    ):
        if value:
            table.add_row(label, value)

    key = actor.key
    if key is not None:
        pem = key.public_key_pem or ""
        table.add_row("Key ID", key.id or "-")
        table.add_row("Key Owner", key.owner or "-")
        table.add_row("Key", Text(f"{pem[:50]}...", style="dim"))

    for label, media in (("Avatar", actor.avatar), ("Header Image", actor.header)):
        if media is not None:
            table.add_row(label, f"{media.type or '-'}: {media.href or '-'}")

    if actor.discoverable is not None:
        table.add_row("Discoverable", str(actor.discoverable))
    if actor.manually_approves_followers is not None:
        table.add_row("Manually Approves Followers", str(actor.manually_approves_followers))
    for index, field in enumerate(actor.profile_fields, start=1):
        value = None if field.value is None else str(field.value)
        table.add_row(f"  {field.name or f'Field {index}'}", html_to_text(value) or "No value")

    return Panel(table, title=Text("ActivityPub Actor Analysis", style="bold yellow"), border_style="yellow")


def build_activities_table(activities: Sequence[Activity], total_items: int | None) -> Table:
    total = total_items if total_items is not None else "unknown"
    table = Table(title=f"Recent Activities (showing {len(activities)}, total items: {total})")
    table.add_column("#", style="dim", no_wrap=True)
    table.add_column("Type", style="cyan", no_wrap=True)
    table.add_column("Published", style="white")
    table.add_column("Object", style="magenta")
    table.add_column("Content", style="dim")

    for index, activity in enumerate(activities, start=1):
        embedded = activity.embedded_object
        if embedded is not None:
            object_label = embedded.type or "-"
            content = html_to_text(embedded.content, max_chars=80)
        else:
            object_label = str(activity.object or "-")
            content = ""
        table.add_row(str(index), activity.type or "-", activity.published or "-", object_label, content)
    return table


def build_status_panel(status: TimelineStatus, index: int) -> Panel:
    """A Mastodon status with its ActivityPub-relevant fields."""

    host = status.account.url.split("/")[2] if "://" in status.account.url else status.account.url
    body = Table.grid(padding=(0, 2))
    body.add_column(style="cyan", no_wrap=True)
    body.add_column(style="white")
    body.add_row("ID", status.id)
    body.add_row("Author", f"@{status.account.username}@{host}")
    body.add_row("Created", status.created_at.strftime("%Y-%m-%d %H:%M:%S %Z"))
    body.add_row("Visibility", status.visibility)
    body.add_row("Language", status.language or "unknown")
    body.add_row("Content", html_to_text(status.content, max_chars=100))
    body.add_row(
        "Engagement",
        f"Replies: {status.replies_count} | Boosts: {status.reblogs_count} | Favorites: {status.favourites_count}",
    )
    for position, media in enumerate(status.media_attachments, start=1):
        body.add_row(f"Attachment {position}", f"{media.type}: {media.url}")
    body.add_row("ActivityPub URL", status.url or "-")
    body.add_row("ActivityPub URI", status.uri)
    return Panel(body, title=Text(f"Post #{index}", style="bold yellow"), border_style="yellow")


def build_object_table(title: str, rows: Iterable[tuple[str, str]]) -> Table:
    table = Table(title=title, show_header=False)
    table.add_column("Property", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    for label, value in rows:
        table.add_row(label, value)
    return table


def build_relationships_panel(relationships: Sequence[tuple[str, Sequence[str]]]) -> Panel:
    body = Text()
    for number, (title, points) in enumerate(relationships, start=1):
        body.append(f"{number}. {title}\n", style="yellow")
        for point in points:
            body.append(f"   - {point}\n")
    return Panel(body, title=Text("ActivityPub Object Relationships", style="bold magenta"), border_style="magenta")


def build_delivery_panel(request: DeliveryRequest) -> Panel:
    body = Table.grid(padding=(0, 2))
    body.add_column(style="cyan", no_wrap=True)
    body.add_column(style="white")
    body.add_row("Target", request.url)
    body.add_row("Method", request.method)
    for name, value in request.headers.items():
        body.add_row(name, value)
    note = Text("In production this request must carry a real HTTP signature.", style="dim")
    return Panel(Group(body, note), title=Text("Delivery simulation", style="bold yellow"), border_style="yellow")


def build_reactions_table(reactions: Sequence[Reaction]) -> Table:
    verbs = {"Like": "liked", "Announce": "boosted", "Create": "replied to"}
    table = Table(title="Student reactions")
    table.add_column("Student", style="cyan")
    table.add_column("Activity", style="green")
    table.add_column("Reply", style="dim")
    for reaction in reactions:
        table.add_row(
            f"{reaction.student.name} (@{reaction.student.handle})",
            f"{reaction.activity_type} ({verbs.get(reaction.activity_type, reaction.activity_type)} the notification)",
            reaction.reply_text or "",
        )
    return table


def build_outcomes_table(outcomes: Sequence[HandleOutcome]) -> Table:
    table = Table(title="Summary")
    table.add_column("Handle", style="cyan", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Actor", style="magenta")
    table.add_column("Activities", style="green")
    table.add_column("Error", style="red")
    for outcome in outcomes:
        if outcome.error is not None:
            table.add_row(outcome.handle, "FAIL", "-", "-", str(outcome.error))
        elif outcome.profile is None:
            table.add_row(outcome.handle, "NO ACTOR", "-", "-", "")
        else:
            profile = outcome.profile
            status = "OK" if not profile.warnings else "DEGRADED"
            table.add_row(
                outcome.handle,
                status,
                profile.actor.id,
                str(len(profile.activities)),
                "; ".join(profile.warnings),
            )
    return table
