"""
Path resolution utilities.

Relative data paths from the environment are resolved against the project root.
"""
from __future__ import annotations

from pathlib import Path
from typing import Union

BASE_DIR = Path(__file__).resolve().parent.parent


def resolve_repo_path(path: Union[str, Path]) -> Path:
    candidate = Path(path)
    if candidate.is_absolute() or candidate.drive:
        return candidate
    return BASE_DIR / candidate
