"""Make the project packages importable when a script is run by path."""

from __future__ import annotations

import sys
from pathlib import Path


def add_root() -> None:
    """Put the project root (the parent of ``scripts/``) first on ``sys.path``."""

    root = str(Path(__file__).resolve().parent.parent)
    if root not in sys.path:
        sys.path.insert(0, root)
