"""
Default (integration) branch resolution for a source tree.
"""

from typing import Optional

from .config import WorktreeConfig
from .core import git_output
from .locator import RepositoryLocator

FALLBACK_DEFAULT_BRANCH = 'main'
REMOTE_HEAD_REF = 'refs/remotes/origin/HEAD'
REMOTE_PREFIX = 'refs/remotes/origin/'


def strip_remote_prefix(ref: str) -> str:
    """refs/remotes/origin/main -> main"""
    ref = ref.strip()
    if ref.startswith(REMOTE_PREFIX):
        return ref[len(REMOTE_PREFIX):]
    return ref


class DefaultRefResolver:
    """Determines a tree's default branch.

    Precedence: configured override, then origin's symbolic HEAD as recorded
    in the bare store, then 'main'. Never mutates repository state.
    """

    def __init__(self, config: WorktreeConfig, locator: Optional[RepositoryLocator] = None):
        self.config = config
        self.locator = locator or RepositoryLocator(config)

    def override_for(self, tree: str) -> Optional[str]:
        return self.config.default_branch_overrides.get(tree.lower())

    def remote_head(self, tree: str) -> Optional[str]:
        """Branch that origin/HEAD points at, if the store records one."""
        bare = self.locator.bare_path(tree.lower())
        if not bare.is_dir():
            bare = self.locator.bare_path(tree)
        if not bare.is_dir():
            return None
        detected = git_output(bare, 'symbolic-ref', REMOTE_HEAD_REF)
        if detected:
            return strip_remote_prefix(detected) or None
        return None

    def resolve(self, tree: str) -> str:
        """Return the default branch name for tree."""
        override = self.override_for(tree)
        if override:
            return override
        return self.remote_head(tree) or FALLBACK_DEFAULT_BRANCH
