"""
Single-tree commands: clone, init, new, continue, rm, ls, cd, update, rebase, repos.
"""

from wtutils.config import WorktreeConfig
from wtutils.core import NotFoundError
from wtutils.lifecycle import WorktreeLifecycle
from wtutils.locator import RepositoryLocator


def _lifecycle(config: WorktreeConfig, args) -> WorktreeLifecycle:
    return WorktreeLifecycle(config, verbose=getattr(args, 'verbose', False))


def _available_repos(config: WorktreeConfig) -> str:
    return ' '.join(RepositoryLocator(config).list_trees())


def clone_command(config: WorktreeConfig, args) -> int:
    """Clone a remote repository into the worktree layout."""
    info = _lifecycle(config, args).clone_remote(args.url, args.name)
    print(f"✓ Cloned {info.tree} (default branch: {info.branch})")
    print(f"  Repo path: {info.path.parent}")
    print(f"  Worktree:  {info.path}")
    return 0


def init_command(config: WorktreeConfig, args) -> int:
    """Initialize a new local repository in the worktree layout."""
    info = _lifecycle(config, args).init_fresh(args.name, args.branch)
    print(f"✓ Initialized {info.tree} (default branch: {info.branch})")
    print(f"  Repo path: {info.path.parent}")
    print(f"  Worktree:  {info.path}")
    print()
    print("Next: Add a remote with 'git remote add origin <url>'")
    return 0


def new_command(config: WorktreeConfig, args) -> int:
    """Create a feature worktree from the freshly updated default branch."""
    info = _lifecycle(config, args).new_feature(args.tree, args.branch)
    print(f"Created worktree: {info.path} (branch: {info.branch})")
    return 0


def continue_command(config: WorktreeConfig, args) -> int:
    """Create a worktree tracking an existing remote branch."""
    info = _lifecycle(config, args).resume_remote(args.tree, args.branch)
    print(f"Created worktree: {info.path} (tracking origin/{info.branch})")
    return 0


def rm_command(config: WorktreeConfig, args) -> int:
    """Remove a feature worktree, optionally deleting its branch."""
    lifecycle = _lifecycle(config, args)
    result = lifecycle.remove(args.tree, args.branch, auto_confirm=args.yes)
    if result.inferred and not args.verbose:
        print(f"Detected: {result.tree} / {result.branch}")
    print(f"Removed worktree: {result.path}")
    if result.branch_deleted:
        print(f"Deleted branch '{result.branch}'")
    elif result.deletion_skipped:
        print("Skipping branch deletion (non-interactive mode, use --yes to delete)")
    if result.was_inside:
        print(f"Current directory was removed; cd {lifecycle.tree_path(result.tree)}")
    return 0


def ls_command(config: WorktreeConfig, args) -> int:
    """List git's worktrees for a repository."""
    print(_lifecycle(config, args).list_worktrees(args.tree))
    return 0


def cd_command(config: WorktreeConfig, args) -> int:
    """Print the directory of a repository or one of its worktrees."""
    lifecycle = _lifecycle(config, args)
    lifecycle.require_tree(args.tree)
    path = lifecycle.worktree_path(args.tree, args.branch)
    if not path.is_dir():
        raise NotFoundError(f"Worktree {path} not found")
    print(path)
    return 0


def update_command(config: WorktreeConfig, args) -> int:
    """Reset a repository's default branch worktree to origin."""
    info = _lifecycle(config, args).update_default(args.tree)
    print(f"Updated {info.tree}/{info.branch} to origin/{info.branch}")
    return 0


def rebase_command(config: WorktreeConfig, args) -> int:
    """Rebase the current worktree's branch onto the updated default branch."""
    info = _lifecycle(config, args).rebase_current()
    print(f"Rebased {info.tree}/{info.branch}")
    return 0


def repos_command(config: WorktreeConfig, args) -> int:
    """List initialized repositories."""
    trees = sorted(RepositoryLocator(config).list_trees())
    if not trees:
        print(f"No repositories found in {config.worktree_base}")
        return 0
    for tree in trees:
        print(tree)
    return 0
