"""
Filesystem helpers for task directories: link refresh, residue scan and
archive destination naming.
"""

import os
from pathlib import Path
from typing import List

from ..core import AlreadyExistsError

# Finder metadata; never counts as user content in a task directory.
PLATFORM_METADATA_FILES = frozenset({'.DS_Store'})


def refresh_symlink(link: Path, target: Path) -> None:
    """Point link at target, replacing an existing link or file (ln -sf).

    A real directory at link is never replaced; AlreadyExistsError is raised.
    """
    if link.is_symlink() or link.is_file():
        link.unlink()
    elif link.exists():
        raise AlreadyExistsError(f"{link} exists and is not a link")
    os.symlink(str(target), str(link))


def residual_entries(directory: Path) -> List[str]:
    """Names of entries left in directory, ignoring platform metadata."""
    return sorted(
        entry.name for entry in directory.iterdir()
        if entry.name not in PLATFORM_METADATA_FILES
    )


def visible_entries(directory: Path) -> List[str]:
    """Sorted entry names of directory, hidden entries skipped (like ls)."""
    return sorted(entry.name for entry in directory.iterdir() if not entry.name.startswith('.'))


def unique_destination(destination: Path) -> Path:
    """Return destination, or destination.N for the first free N >= 1."""
    if not os.path.lexists(destination):
        return destination
    n = 1
    while os.path.lexists(f"{destination}.{n}"):
        n += 1
    return Path(f"{destination}.{n}")
