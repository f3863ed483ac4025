"""Run script.

Lets `python -m main` work from inside `src/` during development, next to
the installed `fedi-primer` console script.
"""

from __future__ import annotations

import sys

# Rich box-drawing characters need utf-8 on Windows terminals (cp1252).
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8")
    sys.stderr.reconfigure(encoding="utf-8")

from cli.main import run


def main() -> None:
    run()


if __name__ == "__main__":
    main()
