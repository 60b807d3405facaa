from __future__ import annotations

from pathlib import Path


def display_path(path: Path, root: Path) -> str:
    """POSIX path relative to `root` when the file lives under it, else the path as given."""

    try:
        return path.resolve().relative_to(root.resolve()).as_posix()
    except (OSError, ValueError):
        return path.as_posix()
