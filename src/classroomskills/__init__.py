"""classroomskills package."""

from __future__ import annotations

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

__all__ = ["__version__"]


def _source_tree_version() -> str | None:
    """Version from the checkout's pyproject.toml when running uninstalled from ``src/``."""
    pyproject = Path(__file__).resolve().parents[2] / "pyproject.toml"
    try:
        project = tomllib.loads(pyproject.read_text(encoding="utf-8")).get("project", {})
    except (OSError, tomllib.TOMLDecodeError):
        return None
    if project.get("name") != "classroomskills":
        return None
    return project.get("version")


try:
    __version__ = version("classroomskills")
except PackageNotFoundError:
    __version__ = _source_tree_version() or "0+unknown"
