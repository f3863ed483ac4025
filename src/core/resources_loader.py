"""Bundled resources loader.

Lives in `core/` because it centralizes *which* static data the commands
need (the JSON-LD example objects) without coupling adapters or the CLI to
file locations.

Rules:
- If FEDI_PRIMER_EXAMPLES_PATH is set, that file is used as is.
- Otherwise the copy shipped in `core/data/` is loaded.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

_DATA_DIR = Path(__file__).resolve().parent / "data"
EXAMPLES_FILENAME = "activitypub_examples.json"


def get_examples_path() -> Path:
    override = (os.environ.get("FEDI_PRIMER_EXAMPLES_PATH") or "").strip()
    if override:
        return Path(override)
    return _DATA_DIR / EXAMPLES_FILENAME


def load_example_objects(path: Path | None = None) -> dict[str, dict[str, Any]]:
    """Load the example objects keyed by name (note, create, follow, ...).

    Key order of the file is preserved; it is the order the tour walks them.
    """

    source = path or get_examples_path()
    data = json.loads(source.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{source}: expected a JSON object of examples")
    return {str(name): obj for name, obj in data.items() if isinstance(obj, dict)}
