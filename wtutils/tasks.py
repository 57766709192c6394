"""
Cross-repo tasks: one directory per task under the cross-repo base, holding
a symlink per participating tree that points at the tree's worktree for the
task branch.

    <cross_repo_base>/<encoded-task>/<tree> -> <worktree_base>/<tree>/<encoded-task>

Anything else in a task directory (notes, scratch files) belongs to the user.
On removal such leftovers cause the task directory to be archived instead of
deleted.
"""

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .config import WorktreeConfig
from .core import NotFoundError, WorktreeUtilsError
from .lifecycle import RemovalResult, WorktreeLifecycle
from .utils.fs import refresh_symlink, residual_entries, unique_destination, visible_entries
from .utils.naming import branch_to_dir, dir_to_branch


@dataclass
class TaskInfo:
    """A task directory and its visible entries."""
    name: str
    dir_name: str
    path: Path
    entries: List[str]


@dataclass
class TaskResult:
    """Per-tree outcome of creating or extending a task."""
    task: str
    path: Path
    linked: List[str] = field(default_factory=list)
    existing: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failures: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass
class TaskRemoval:
    """Outcome of tearing down a task."""
    task: str
    path: Path
    removed: List[RemovalResult] = field(default_factory=list)
    leftovers: List[str] = field(default_factory=list)
    archived_to: Optional[Path] = None


class TaskIndex:
    """Creates, extends, lists and tears down cross-repo tasks."""

    def __init__(
        self,
        config: WorktreeConfig,
        lifecycle: Optional[WorktreeLifecycle] = None,
        verbose: bool = False
    ):
        self.config = config
        self.lifecycle = lifecycle or WorktreeLifecycle(config, verbose=verbose)
        self.verbose = verbose

    def _log(self, message: str) -> None:
        if self.verbose:
            print(message)

    @property
    def base(self) -> Path:
        return self.config.cross_repo_base

    def task_path(self, task: str) -> Path:
        return self.base / branch_to_dir(task)

    def create(self, task: str, trees: Sequence[str]) -> TaskResult:
        """Create (or reuse) the task directory and attach each tree.

        A tree that fails is recorded in the result and the rest still run.
        """
        path = self.task_path(task)
        path.mkdir(parents=True, exist_ok=True)
        result = TaskResult(task, path)
        for tree in trees:
            self._attach(task, tree, result)
        return result

    def add(self, task: str, trees: Sequence[str]) -> TaskResult:
        """Attach more trees to an existing task; already linked trees are skipped."""
        path = self.task_path(task)
        if not path.is_dir():
            raise NotFoundError(f"Task '{task}' not found at {path}")
        result = TaskResult(task, path)
        for tree in trees:
            if (path / tree).is_symlink():
                self._log(f"{tree} already linked")
                result.skipped.append(tree)
                continue
            self._attach(task, tree, result)
        return result

    def _attach(self, task: str, tree: str, result: TaskResult) -> None:
        self._log(f"Creating worktree for {tree}...")
        worktree = self.lifecycle.worktree_path(tree, task)
        try:
            self.lifecycle.new_feature(tree, task)
        except WorktreeUtilsError as e:
            if not worktree.is_dir():
                result.failures[tree] = str(e)
                return
            result.existing.append(tree)
        try:
            refresh_symlink(result.path / tree, worktree)
        except (WorktreeUtilsError, OSError) as e:
            result.failures[tree] = str(e)
            return
        result.linked.append(tree)

    def list(self) -> List[TaskInfo]:
        """All tasks, sorted by directory name; empty if the base is absent."""
        if not self.base.is_dir():
            return []
        archive = self.config.cross_repo_archive.resolve()
        tasks = []
        for entry in sorted(self.base.iterdir()):
            if entry.name.startswith('.') or not entry.is_dir():
                continue
            if entry.resolve() == archive:
                continue
            tasks.append(TaskInfo(
                name=dir_to_branch(entry.name),
                dir_name=entry.name,
                path=entry,
                entries=visible_entries(entry),
            ))
        return tasks

    def list_task_names(self) -> List[str]:
        return [task.name for task in self.list()]

    def remove(self, task: str) -> TaskRemoval:
        """Unlink and remove every tree's worktree, then delete or archive the task.

        Branches are never deleted here. If anything other than platform
        metadata remains, the directory moves to the archive root under a
        non-colliding name.
        """
        path = self.task_path(task)
        if not path.is_dir():
            raise NotFoundError(f"Task '{task}' not found at {path}")

        removal = TaskRemoval(task, path)
        for entry in sorted(path.iterdir()):
            if not entry.is_symlink():
                continue
            tree = entry.name
            self._log(f"Removing worktree: {tree}/{task}")
            entry.unlink()
            removal.removed.append(
                self.lifecycle.remove(tree, task, auto_confirm=False, interactive=False)
            )

        removal.leftovers = residual_entries(path)
        if removal.leftovers:
            archive = self.config.cross_repo_archive
            archive.mkdir(parents=True, exist_ok=True)
            destination = unique_destination(archive / path.name)
            shutil.move(str(path), str(destination))
            removal.archived_to = destination
        else:
            shutil.rmtree(path)
        return removal
