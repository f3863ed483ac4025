"""Core configuration.

Centralizes environment variables (pydantic-settings) so the CLI and the
adapters read the same values: HTTP timeout, User-Agent and the default
handles/instances each learning command works on.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no extra dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "fedi-primer"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "fedi-primer"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "fedi-primer"
    return Path.home() / ".config" / "fedi-primer"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


class AppSettings(BaseSettings):
    """Application settings.

    List values can be given in the environment as JSON, e.g.
    `FEDI_PRIMER_ACTOR_HANDLES='["alice@example.org"]'`.
    """

    model_config = SettingsConfigDict(
        env_prefix="FEDI_PRIMER_",
        extra="ignore",
        case_sensitive=False,
        # Project .env first, then the per-user one.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    http_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout per request (seconds).",
    )
    user_agent: str = Field(
        default="ActivityPub-Learning-Setup/1.0",
        min_length=1,
        description="User-Agent sent on every request.",
    )

    webfinger_handles: list[str] = Field(
        default_factory=lambda: ["Gargron@mastodon.social", "dansup@pixelfed.social"],
        description="Handles used by the `webfinger` command when none are given.",
    )
    actor_handles: list[str] = Field(
        default_factory=lambda: ["Gargron@mastodon.social"],
        description="Handles used by the `actor` command when none are given.",
    )
    timeline_instances: list[str] = Field(
        default_factory=lambda: ["mastodon.social", "fosstodon.org"],
        description="Instances used by the `timeline` command when none are given.",
    )
    doctor_instances: list[str] = Field(
        default_factory=lambda: ["mastodon.social", "mastodon.world", "fosstodon.org", "mstdn.social"],
        description="Instances checked by `doctor`.",
    )

    timeline_limit: int = Field(default=3, ge=1, le=40)
    outbox_limit: int = Field(default=3, ge=0, le=100)
    max_concurrency: int = Field(
        default=1,
        ge=1,
        le=32,
        description="Handles resolved in parallel by `actor` (1 = strictly sequential).",
    )

    require_activitystreams_context: bool = Field(
        default=False,
        description="Reject actor documents without the ActivityStreams @context.",
    )

    simulation_instance: str = Field(
        default="mastodon.social",
        min_length=1,
        description="Instance named in the notification simulation.",
    )

    log_level: str = Field(
        default="WARNING",
        description="Root log level (DEBUG, INFO, WARNING, ERROR).",
    )
