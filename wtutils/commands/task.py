"""
Cross-repo task commands: task new, add, rm, ls, cd.
"""

from wtutils.config import WorktreeConfig
from wtutils.core import NotFoundError
from wtutils.tasks import TaskIndex, TaskResult


def _index(config: WorktreeConfig, args) -> TaskIndex:
    return TaskIndex(config, verbose=getattr(args, 'verbose', False))


def _print_task_result(result: TaskResult) -> int:
    for tree in result.skipped:
        print(f"  - {tree} (already linked)")
    for tree in result.linked:
        note = " (worktree already exists)" if tree in result.existing else ""
        print(f"  ✓ {tree}{note}")
    for tree, reason in result.failures.items():
        print(f"  ✗ Failed to create worktree for {tree}: {reason}")
    print()
    print(f"Task directory: {result.path}")
    return 0 if result.ok else 1


def task_new_command(config: WorktreeConfig, args) -> int:
    """Create worktrees across several repositories for one task."""
    return _print_task_result(_index(config, args).create(args.branch, args.trees))


def task_add_command(config: WorktreeConfig, args) -> int:
    """Add repositories to an existing task."""
    return _print_task_result(_index(config, args).add(args.branch, args.trees))


def task_rm_command(config: WorktreeConfig, args) -> int:
    """Remove a task's worktrees; archive the task directory if it holds notes."""
    removal = _index(config, args).remove(args.branch)
    for result in removal.removed:
        print(f"Removed worktree: {result.tree}/{result.branch}")
    if removal.archived_to is not None:
        print(f"✓ Task archived to: {removal.archived_to}")
    else:
        print("✓ Task removed")
    return 0


def task_ls_command(config: WorktreeConfig, args) -> int:
    """List cross-repo tasks and their members."""
    tasks = _index(config, args).list()
    if not tasks:
        print("No cross-repo tasks found")
        return 0
    print("Cross-repo tasks:")
    for task in tasks:
        print(f"  {task.name}: {' '.join(task.entries)}")
    return 0


def task_cd_command(config: WorktreeConfig, args) -> int:
    """Print a task's directory."""
    path = _index(config, args).task_path(args.branch)
    if not path.is_dir():
        raise NotFoundError(f"Task '{args.branch}' not found at {path}")
    print(path)
    return 0
