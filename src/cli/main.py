"""fedi-primer command line.

Each command is one learning exercise:

  webfinger  - WebFinger discovery of user@domain handles
  timeline   - public timelines via the Mastodon REST API, mapped to Notes
  actor      - full actor analysis: WebFinger -> actor -> outbox
  objects    - tour of ActivityPub object and activity shapes
  notify     - video upload -> Mastodon notification simulation
  doctor     - configuration and connectivity checks
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import partial
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from adapters.http_client import HttpxJsonFetcher
from adapters.json_exporter import export_outcomes_json
from cli import doctor
from cli.ui_components import (
    build_activities_table,
    build_actor_panel,
    build_delivery_panel,
    build_object_table,
    build_outcomes_table,
    build_reactions_table,
    build_relationships_panel,
    build_status_panel,
    print_banner,
    print_event,
    print_info,
)
from core.config import AppSettings
from core.domain.errors import ActivityPubError
from core.log_setup import configure_logging
from core.resources_loader import load_example_objects
from core.services import notification
from core.services.objects import RELATIONSHIPS, build_platform_note, describe_object, example_title
from core.services.resolver import HandleResolver, ResolverHooks
from core.services.timeline import convert_to_note, fetch_timelines

log = logging.getLogger(__name__)

app = typer.Typer(no_args_is_help=True, help="Hands-on ActivityPub exercises against public servers.")
app.command(name="doctor")(doctor.run)

_console = Console()


@dataclass
class CliState:
    settings: AppSettings
    verbose: bool = False


def _state(ctx: typer.Context) -> CliState:
    if isinstance(ctx.obj, CliState):
        return ctx.obj
    return CliState(settings=AppSettings())


def _build_resolver(settings: AppSettings) -> HandleResolver:
    return HandleResolver(
        HttpxJsonFetcher(settings),
        settings=settings,
        hooks=ResolverHooks(event=partial(print_event, _console)),
    )


def _exit_on_total_failure(failures: int, total: int) -> None:
    if total and failures == total:
        raise typer.Exit(code=1)


def _report_error(exc: ActivityPubError, *, verbose: bool) -> None:
    _console.print(Text(f"Error: {exc}", style="red"))
    if verbose and exc.cause is not None:
        _console.print(Text(f"  cause: {exc.cause!r}", style="dim red"))


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging and error causes."),
    no_banner: bool = typer.Option(False, "--no-banner", help="Do not print the banner."),
) -> None:
    settings = AppSettings()
    configure_logging("DEBUG" if verbose else settings.log_level)
    ctx.obj = CliState(settings=settings, verbose=verbose)
    if not no_banner:
        print_banner(_console)


async def _run_webfinger(state: CliState, handles: list[str]) -> int:
    resolver = _build_resolver(state.settings)
    failures = 0
    for handle in handles:
        _console.rule(handle, style="blue")
        try:
            result = await resolver.resolve(handle)
        except ActivityPubError as exc:
            failures += 1
            _report_error(exc, verbose=state.verbose)
            _console.print(Text(f"Skipping {handle} due to error", style="red"))
            continue

        _console.print(Text("Response data:", style="yellow"))
        _console.print_json(data=result.webfinger.to_jsonld())
        if result.actor_url:
            _console.print(Text(f"Actor URL found: {result.actor_url}", style="cyan"))
    return failures


@app.command()
def webfinger(
    ctx: typer.Context,
    handles: list[str] | None = typer.Argument(None, help="Handles like user@domain."),
) -> None:
    """WebFinger discovery (RFC 7033) for one or more handles."""

    state = _state(ctx)
    targets = list(handles or state.settings.webfinger_handles)
    print_info(
        _console,
        "WebFinger in ActivityPub",
        [
            "Maps human-readable identifiers to machine-readable resources",
            "Returns a JSON Resource Descriptor (JRD) with links",
            'ActivityPub actors are found via the "application/activity+json" link type',
            "Used for federation between different ActivityPub instances",
        ],
    )
    failures = asyncio.run(_run_webfinger(state, targets))
    _console.print(Text("To test your own handle: fedi-primer webfinger yourname@mastodon.social", style="dim"))
    _exit_on_total_failure(failures, len(targets))


@app.command()
def timeline(
    ctx: typer.Context,
    instances: list[str] | None = typer.Argument(None, help="Instance domains, e.g. mastodon.social."),
    limit: int | None = typer.Option(None, "--limit", "-n", min=1, max=40, help="Posts per instance."),
) -> None:
    """Public timeline analysis and Mastodon status -> ActivityPub Note mapping."""

    state = _state(ctx)
    settings = state.settings
    targets = list(instances or settings.timeline_instances)
    print_info(
        _console,
        "ActivityPub Notes and Timelines",
        [
            "Notes are the most common ActivityPub object type",
            "They contain content, attribution and addressing information",
            "Mastodon API responses can be mapped to ActivityPub objects",
            "Public timelines show federated content from multiple instances",
        ],
    )

    results = asyncio.run(
        fetch_timelines(HttpxJsonFetcher(settings), targets, limit or settings.timeline_limit)
    )
    failures = 0
    for result in results:
        _console.rule(result.instance, style="blue")
        if result.error is not None:
            failures += 1
            _report_error(result.error, verbose=state.verbose)
            _console.print(Text(f"Skipping {result.instance} due to error", style="red"))
            continue

        _console.print(Text(f"Successfully fetched {len(result.statuses)} posts", style="green"))
        for index, status in enumerate(result.statuses, start=1):
            _console.print(build_status_panel(status, index))
        if result.statuses:
            _console.print(Text("Example ActivityPub Note conversion:", style="magenta"))
            _console.print_json(data=convert_to_note(result.statuses[0]))

    _exit_on_total_failure(failures, len(targets))


@app.command()
def actor(
    ctx: typer.Context,
    handles: list[str] | None = typer.Argument(None, help="Handles like user@domain."),
    limit: int | None = typer.Option(None, "--limit", "-n", min=0, max=100, help="Outbox activities to show."),
    concurrency: int | None = typer.Option(
        None, "--concurrency", "-c", min=1, max=32, help="Handles resolved in parallel."
    ),
    json_out: Path | None = typer.Option(None, "--json-out", help="Also write the results as JSON."),
) -> None:
    """Complete actor analysis: WebFinger -> actor document -> outbox."""

    state = _state(ctx)
    settings = state.settings
    targets = list(handles or settings.actor_handles)
    print_info(
        _console,
        "ActivityPub Actors",
        [
            "Actors have unique IDs and can send/receive activities",
            "They have inboxes (receive) and outboxes (send) for activities",
            "Public keys enable cryptographic verification",
            "Followers/Following collections manage social relationships",
        ],
    )

    resolver = _build_resolver(settings)
    outcomes = asyncio.run(resolver.resolve_many(targets, limit=limit, max_concurrency=concurrency))

    for outcome in outcomes:
        _console.rule(f"Complete Actor Analysis for: {outcome.handle}", style="magenta")
        if outcome.error is not None:
            _report_error(outcome.error, verbose=state.verbose)
            continue
        if outcome.profile is None:
            _console.print(Text("No ActivityPub actor URL found in WebFinger response", style="red"))
            continue
        profile = outcome.profile
        _console.print(build_actor_panel(profile.actor))
        if profile.actor.outbox:
            _console.print(build_activities_table(profile.activities, profile.outbox_total_items))
        for warning in profile.warnings:
            _console.print(Text(f"Warning: {warning}", style="yellow"))

    if len(outcomes) > 1:
        _console.print(build_outcomes_table(outcomes))

    if json_out is not None:
        path = export_outcomes_json(outcomes=outcomes, output_path=json_out)
        _console.print(Text(f"Saved JSON to: {path}", style="green"))

    failures = sum(1 for o in outcomes if not o.ok)
    _exit_on_total_failure(failures, len(targets))


@app.command()
def objects(
    full: bool = typer.Option(True, "--full/--no-full", help="Print the full JSON of each object."),
) -> None:
    """Tour of ActivityPub objects, activities and their relationships."""

    print_info(
        _console,
        "ActivityPub Objects and Activities",
        [
            "Objects: things like Notes, Images, Videos",
            "Activities: actions performed on objects (Create, Like, Follow)",
            "Actors: entities that perform activities",
            "Collections: groups of objects or activities",
        ],
    )

    for key, obj in load_example_objects().items():
        _console.print(build_object_table(example_title(key), describe_object(obj)))
        if full:
            _console.print_json(data=obj)

    _console.print(build_relationships_panel(RELATIONSHIPS))

    _console.rule("University Learning Platform Integration", style="magenta")
    print_info(
        _console,
        "Scenario: Professor uploads a new video",
        [
            "Learning platform detects new video upload",
            "Platform creates ActivityPub Note about the video",
            "Platform sends Create activity to Professor's Mastodon instance",
            "Mastodon distributes to followers (students)",
            "Students receive notifications about new educational content",
        ],
    )
    _console.print(Text("Example Note that would be created:", style="cyan"))
    _console.print_json(data=build_platform_note(datetime.now(timezone.utc)))


@app.command()
def notify(
    ctx: typer.Context,
    instance: str | None = typer.Option(None, "--instance", help="Mastodon instance of the professor."),
    seed: int | None = typer.Option(None, "--seed", help="Seed for the simulated student reactions."),
) -> None:
    """Simulate: video upload -> Note -> Create -> (unsent) inbox delivery."""

    state = _state(ctx)
    target = instance or state.settings.simulation_instance
    now = datetime.now(timezone.utc)
    print_info(
        _console,
        "ActivityPub Notifications in Education",
        [
            "Decentralized: students use any ActivityPub client",
            "Real-time: immediate notifications for new content",
            "Interactive: students can like, boost and reply",
            "Federated: works across different university instances",
        ],
    )

    upload = notification.demo_upload()

    _console.print(Text("Simulating video upload to learning platform...", style="blue"))
    payload = notification.build_webhook_payload(upload, now)
    _console.print_json(data=payload.model_dump(mode="json", by_alias=True))

    _console.print(Text("Converting to ActivityPub Note...", style="blue"))
    note = notification.build_note(payload, target)
    _console.print_json(data=note)

    _console.print(Text("Creating ActivityPub Create activity...", style="blue"))
    actor_id = notification.actor_id_for(upload.professor, target)
    create = notification.build_create_activity(note, actor_id)
    _console.print_json(data=create)

    request = notification.describe_delivery(create, target, now)
    log.debug("Simulated delivery to %s (not sent)", request.url)
    _console.print(build_delivery_panel(request))
    _console.print(Text("Students would now see the notification in their Mastodon feeds", style="cyan"))

    rng = random.Random(seed) if seed is not None else None
    _console.print(build_reactions_table(notification.simulate_reactions(rng=rng)))

    print_info(
        _console,
        "What happened in this simulation",
        [
            "Learning platform detected new video upload",
            "System converted video metadata to ActivityPub Note",
            "Note was wrapped in a Create activity",
            "Activity was described as a POST to the professor's Mastodon inbox",
            "Mastodon would distribute to all student followers",
        ],
    )
    _console.print(
        Panel(
            Text(
                "Video Upload -> Webhook -> ActivityPub Note\n"
                "Note -> Create Activity -> HTTP Signature\n"
                "Signed Activity -> Mastodon Inbox\n"
                "Mastodon -> Student Followers -> Notifications"
            ),
            title=Text("Integration Architecture", style="bold magenta"),
            border_style="magenta",
        )
    )


def run() -> None:
    app()


if __name__ == "__main__":
    run()
