"""
Shell tab-completion hooks (argcomplete).

Completers only call the read-only listings: trees, worktree branches,
remote branches and tasks. Any configuration problem yields no candidates.
"""

from typing import List, Optional

from .config import WorktreeConfig, load_config
from .core import WorktreeUtilsError
from .lifecycle import WorktreeLifecycle
from .locator import RepositoryLocator
from .tasks import TaskIndex


def _config() -> Optional[WorktreeConfig]:
    try:
        return load_config()
    except WorktreeUtilsError:
        return None


def _matching(candidates, prefix: str) -> List[str]:
    return [c for c in candidates if c.startswith(prefix)]


def tree_completer(prefix: str, **kwargs) -> List[str]:
    """Complete initialized tree names."""
    config = _config()
    if config is None:
        return []
    return _matching(RepositoryLocator(config).list_trees(), prefix)


def branch_completer(prefix: str, parsed_args=None, **kwargs) -> List[str]:
    """Complete branches that have a worktree in the chosen tree."""
    config = _config()
    tree = getattr(parsed_args, 'tree', None)
    if config is None or not tree or tree == '.':
        return []
    return _matching(WorktreeLifecycle(config).list_branches(tree), prefix)


def remote_branch_completer(prefix: str, parsed_args=None, **kwargs) -> List[str]:
    """Complete origin's branches for the chosen tree."""
    config = _config()
    tree = getattr(parsed_args, 'tree', None)
    if config is None or not tree:
        return []
    return _matching(WorktreeLifecycle(config).list_remote_branches(tree), prefix)


def task_completer(prefix: str, **kwargs) -> List[str]:
    """Complete cross-repo task names."""
    config = _config()
    if config is None:
        return []
    return _matching(TaskIndex(config).list_task_names(), prefix)
