#!/usr/bin/env python3
"""Hello World entry point run by the example workflows (`python src/main.py`)."""

from __future__ import annotations

import sys
from pathlib import Path

# Runs from a bare checkout; put the repo root on sys.path so the package imports.
_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from actions_lab.greeting import main  # noqa: E402  # pylint: disable=wrong-import-position

if __name__ == "__main__":
    raise SystemExit(main())
