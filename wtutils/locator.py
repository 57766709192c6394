"""
Discovery of source trees under the worktree base.
"""

from pathlib import Path
from typing import Iterator

from .config import WorktreeConfig

BARE_DIR = '.bare'
GIT_POINTER_FILE = '.git'
GIT_POINTER_TEXT = 'gitdir: ./.bare\n'


class RepositoryLocator:
    """Enumerates and validates source trees under the worktree base."""

    def __init__(self, config: WorktreeConfig):
        self.config = config

    @property
    def base(self) -> Path:
        return self.config.worktree_base

    def tree_path(self, name: str) -> Path:
        """Directory of a source tree (whether or not it exists)."""
        return self.base / name

    def bare_path(self, name: str) -> Path:
        return self.tree_path(name) / BARE_DIR

    def is_initialized(self, name: str) -> bool:
        """A tree is initialized iff its .bare store is a directory."""
        return self.bare_path(name).is_dir()

    def list_trees(self) -> Iterator[str]:
        """Yield names of initialized trees, in directory enumeration order.

        A missing base directory yields nothing.
        """
        if not self.base.is_dir():
            return
        for entry in self.base.iterdir():
            if entry.is_dir() and (entry / BARE_DIR).is_dir():
                yield entry.name

    def __iter__(self) -> Iterator[str]:
        return self.list_trees()
