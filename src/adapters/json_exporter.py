"""JSON export of resolved profiles.

Actors and activities are written back in their JSON-LD shape (aliases,
unknown keys preserved) so the output can be fed to other tools.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

from core.services.resolver import HandleOutcome


def outcome_to_dict(outcome: HandleOutcome) -> dict[str, Any]:
    data: dict[str, Any] = {"handle": outcome.handle, "ok": outcome.ok}
    if outcome.error is not None:
        data["error"] = {
            "type": type(outcome.error).__name__,
            "message": str(outcome.error),
            "url": outcome.error.url,
        }
    profile = outcome.profile
    if profile is not None:
        data["webfinger"] = profile.resolution.webfinger.to_jsonld()
        data["actor_url"] = profile.resolution.actor_url
        data["actor"] = profile.actor.to_jsonld()
        data["outbox_total_items"] = profile.outbox_total_items
        data["activities"] = [a.to_jsonld() for a in profile.activities]
        data["warnings"] = list(profile.warnings)
    return data


def export_outcomes_json(*, outcomes: Iterable[HandleOutcome], output_path: Path) -> Path:
    """Write the outcomes as UTF-8 JSON with a stable layout."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = [outcome_to_dict(o) for o in outcomes]
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
