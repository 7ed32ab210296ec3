"""Adaptive Morse code trainer."""

from __future__ import annotations

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

__all__ = ["__version__"]


def _source_tree_version() -> str | None:
    """Read [project].version when running from a source checkout."""
    pyproject = Path(__file__).resolve().parents[2] / "pyproject.toml"
    if not pyproject.is_file():
        return None
    with pyproject.open("rb") as handle:
        data = tomllib.load(handle)
    value = data.get("project", {}).get("version")
    return value if isinstance(value, str) else None


_project_version = _source_tree_version()
if _project_version is not None:
    __version__ = _project_version
else:
    try:
        __version__ = version("morsetrainer")
    except PackageNotFoundError:
        __version__ = "0+unknown"
