"""
Executable lookup on PATH.
"""

from __future__ import annotations

import shutil
from collections.abc import Iterable


def find_executable(name: str) -> str | None:
    return shutil.which(name)


def has_executable(name: str) -> bool:
    return find_executable(name) is not None


def find_executables(names: Iterable[str]) -> dict[str, str | None]:
    """Map each name to its resolved path (None when absent)."""
    return {name: find_executable(name) for name in names}
