"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import HttpxJsonFetcher
from core.config import AppSettings, get_user_env_file
from core.resources_loader import get_examples_path, load_example_objects

_console = Console()


async def _check_nodeinfo(fetcher: HttpxJsonFetcher, instance: str) -> tuple[bool, str]:
    """Check `/.well-known/nodeinfo`, which every ActivityPub server exposes."""

    url = f"https://{instance}/.well-known/nodeinfo"
    try:
        payload = await fetcher.get_json(url, accept="application/json")
    except Exception as exc:
        return False, str(exc) or type(exc).__name__
    links = payload.get("links") if isinstance(payload, dict) else None
    if not isinstance(links, list):
        return False, "no nodeinfo links"
    return True, f"{len(links)} nodeinfo link(s)"


async def _check_instances(settings: AppSettings) -> list[tuple[str, bool, str]]:
    fetcher = HttpxJsonFetcher(settings)
    results: list[tuple[str, bool, str]] = []
    for instance in settings.doctor_instances:
        ok, detail = await _check_nodeinfo(fetcher, instance)
        results.append((instance, ok, detail))
    return results


def _check_examples() -> tuple[bool, str]:
    try:
        examples = load_example_objects()
    except (OSError, ValueError) as exc:
        return False, str(exc)
    return True, f"{len(examples)} objects from {get_examples_path()}"


def run(offline: bool = typer.Option(False, "--offline", help="Skip network checks.")) -> None:
    """Configuration and connectivity checks."""

    settings = AppSettings()

    table = Table(title="fedi-primer doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    table.add_row("User config", "OK" if get_user_env_file().exists() else "OPTIONAL", str(get_user_env_file()))
    table.add_row("HTTP timeout", "OK", f"{settings.http_timeout_seconds:g}s")
    table.add_row("User-Agent", "OK", settings.user_agent)
    table.add_row(
        "@context check",
        "STRICT" if settings.require_activitystreams_context else "LENIENT",
        "actor documents without the ActivityStreams context are "
        + ("rejected" if settings.require_activitystreams_context else "accepted"),
    )

    ok_examples, detail_examples = _check_examples()
    table.add_row("Example objects", "OK" if ok_examples else "FAIL", detail_examples)

    failures = 0 if ok_examples else 1
    if not offline:
        for instance, ok, detail in asyncio.run(_check_instances(settings)):
            table.add_row(f"NodeInfo {instance}", "OK" if ok else "FAIL", detail)
            failures += 0 if ok else 1

    _console.print(table)

    if failures:
        _console.print("\n[yellow]Note:[/yellow] unreachable instances only affect the commands that target them.")
