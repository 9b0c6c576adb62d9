"""Atajo para usar las dos CLIs sin `pip install -e .`.

Desde la carpeta que contiene el `.env`:
- `python main.py`        equivale a `metabase-setup`
- `python main.py start`  equivale a `metabase-run` (lanza `metabase.jar`)
"""

from __future__ import annotations

import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parent / "src"


def main(argv: list[str] | None = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    if str(SRC_DIR) not in sys.path:
        sys.path.insert(0, str(SRC_DIR))

    if args[:1] == ["start"]:
        from cli.launcher import app  # noqa: PLC0415

        app(args[1:])
    else:
        from cli.main import app  # noqa: PLC0415

        app(args)


if __name__ == "__main__":
    main()
