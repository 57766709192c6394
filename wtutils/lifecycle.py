"""
Worktree lifecycle for a single source tree: clone/init, new and resumed
feature worktrees, removal, listing and default-branch synchronization.

Layout of a tree:

    <worktree_base>/<tree>/.bare/            bare object store
    <worktree_base>/<tree>/.git              "gitdir: ./.bare"
    <worktree_base>/<tree>/<encoded-branch>/ one directory per worktree

git is the only source of truth for refs; this module only decides which
git commands to run and where.
"""

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from .config import WorktreeConfig
from .core import (
    AlreadyExistsError,
    AmbiguousLocationError,
    NotFoundError,
    PolicyViolationError,
    ResolutionError,
    WorktreeUtilsError,
    clone_bare,
    git_output,
    git_version,
    init_bare,
    ref_exists,
    run_git,
    run_git_interactive,
)
from .locator import BARE_DIR, GIT_POINTER_FILE, GIT_POINTER_TEXT, RepositoryLocator
from .resolver import FALLBACK_DEFAULT_BRANCH, REMOTE_HEAD_REF, DefaultRefResolver, strip_remote_prefix
from .utils.naming import branch_to_dir, dir_to_branch

# Never removed, whatever the configured default branch is.
PROTECTED_BRANCHES = ('main', 'master')
FETCH_ALL_REFSPEC = '+refs/heads/*:refs/remotes/origin/*'
INITIAL_COMMIT_MESSAGE = 'Initial commit'
MAX_CANDIDATE_BRANCHES = 10
# First git release whose 'worktree add' accepts --orphan.
ORPHAN_WORKTREE_GIT_VERSION = (2, 42)


@dataclass
class WorktreeInfo:
    """A worktree of one branch in one tree."""
    tree: str
    branch: str
    path: Path


@dataclass
class RemovalResult:
    """Outcome of removing a worktree."""
    tree: str
    branch: str
    path: Path
    branch_deleted: bool = False
    deletion_skipped: bool = False
    inferred: bool = False
    was_inside: bool = False


def tree_name_from_url(url: str) -> str:
    """Derive a tree name from a clone URL (basename without .git)."""
    name = url.rstrip('/').replace(':', '/').split('/')[-1]
    if name.endswith('.git'):
        name = name[:-4]
    if not name:
        raise WorktreeUtilsError(f"Cannot derive a repository name from '{url}'")
    return name


def parse_remote_show_head(output: str) -> Optional[str]:
    """Extract the branch from the 'HEAD branch: <name>' line of remote show."""
    for line in output.splitlines():
        if 'HEAD branch' in line:
            fields = line.split()
            if fields and fields[-1] != '(unknown)':
                return fields[-1]
    return None


class WorktreeLifecycle:
    """Creates, resumes, removes and lists worktrees of source trees."""

    def __init__(
        self,
        config: WorktreeConfig,
        locator: Optional[RepositoryLocator] = None,
        resolver: Optional[DefaultRefResolver] = None,
        verbose: bool = False
    ):
        self.config = config
        self.locator = locator or RepositoryLocator(config)
        self.resolver = resolver or DefaultRefResolver(config, self.locator)
        self.verbose = verbose

    def _log(self, message: str) -> None:
        if self.verbose:
            print(message)

    # Paths

    def tree_path(self, tree: str) -> Path:
        return self.locator.tree_path(tree)

    def worktree_path(self, tree: str, branch: Optional[str] = None) -> Path:
        """Directory of a branch's worktree, or the tree root without a branch."""
        if not branch:
            return self.tree_path(tree)
        return self.tree_path(tree) / branch_to_dir(branch)

    def require_tree(self, tree: str) -> Path:
        """Return the tree directory, raising NotFoundError if uninitialized."""
        path = self.tree_path(tree)
        if not self.locator.is_initialized(tree):
            raise NotFoundError(f"Repository '{tree}' not found at {path}")
        return path

    # Creation

    def clone_remote(self, url: str, name: Optional[str] = None) -> WorktreeInfo:
        """Bare-clone url as a new tree and create its default-branch worktree."""
        name = name or tree_name_from_url(url)
        tree_path = self.tree_path(name)
        if tree_path.exists():
            raise AlreadyExistsError(f"{tree_path} already exists")

        self._log(f"Cloning {url} into {tree_path}...")
        tree_path.mkdir(parents=True)
        clone_bare(url, tree_path / BARE_DIR)
        self._write_git_pointer(tree_path)

        run_git(tree_path, 'config', 'remote.origin.fetch', FETCH_ALL_REFSPEC)
        run_git(tree_path, 'fetch', 'origin')

        default_branch = self._detect_remote_default(tree_path)
        self._log(f"Default branch: {default_branch}")
        run_git(tree_path, 'worktree', 'add', branch_to_dir(default_branch), default_branch)
        return WorktreeInfo(name, default_branch, self.worktree_path(name, default_branch))

    def init_fresh(self, name: str, default_branch: str = FALLBACK_DEFAULT_BRANCH) -> WorktreeInfo:
        """Create a new local tree whose default branch holds one empty commit."""
        tree_path = self.tree_path(name)
        if tree_path.exists():
            raise AlreadyExistsError(f"{tree_path} already exists")

        self._log(f"Initializing new repo at {tree_path}...")
        tree_path.mkdir(parents=True)
        init_bare(tree_path / BARE_DIR)
        self._write_git_pointer(tree_path)

        ref = f'refs/heads/{default_branch}'
        run_git(tree_path, 'symbolic-ref', 'HEAD', ref)
        worktree = self.worktree_path(name, default_branch)
        if git_version() >= ORPHAN_WORKTREE_GIT_VERSION:
            run_git(tree_path, 'worktree', 'add', '--orphan', '-b', default_branch,
                    branch_to_dir(default_branch))
            run_git(worktree, 'commit', '--allow-empty', '-m', INITIAL_COMMIT_MESSAGE)
        else:
            # Older git cannot check out an unborn branch; build the root commit first.
            empty_tree = run_git(tree_path, 'hash-object', '-w', '-t', 'tree', os.devnull)
            commit = run_git(tree_path, 'commit-tree', empty_tree, '-m', INITIAL_COMMIT_MESSAGE)
            run_git(tree_path, 'update-ref', ref, commit)
            run_git(tree_path, 'worktree', 'add', branch_to_dir(default_branch), default_branch)
        return WorktreeInfo(name, default_branch, worktree)

    def new_feature(self, tree: str, branch: str) -> WorktreeInfo:
        """Branch off the freshly synced default branch into a new worktree.

        The default-branch worktree is hard-reset to origin first, even when
        the target worktree turns out to exist already.
        """
        tree_path = self.require_tree(tree)
        default_branch = self.resolver.resolve(tree)
        default_path = self.worktree_path(tree, default_branch)
        if not default_path.is_dir():
            raise ResolutionError(
                f"Default branch worktree for '{tree}' not found at {default_path}"
            )

        if self._has_origin(tree_path):
            self._sync_with_origin(default_path, default_branch)
        else:
            self._log(f"No origin remote for '{tree}', branching from local {default_branch}")

        target = self.worktree_path(tree, branch)
        if os.path.lexists(target):
            raise AlreadyExistsError(f"Worktree {target} already exists")

        run_git(tree_path, 'worktree', 'add', '-b', branch, branch_to_dir(branch), default_branch)
        return WorktreeInfo(tree, branch, target)

    def resume_remote(self, tree: str, branch: str) -> WorktreeInfo:
        """Create a worktree with a local branch tracking origin/<branch>."""
        tree_path = self.require_tree(tree)
        target = self.worktree_path(tree, branch)
        if os.path.lexists(target):
            raise AlreadyExistsError(f"Worktree {target} already exists")

        run_git(tree_path, 'fetch', 'origin')

        if not ref_exists(tree_path, f'refs/remotes/origin/{branch}'):
            candidates = self.list_remote_branches(tree)[:MAX_CANDIDATE_BRANCHES]
            message = f"Remote branch 'origin/{branch}' does not exist"
            if candidates:
                message += "\nAvailable remote branches:\n" + '\n'.join(
                    f"  origin/{name}" for name in candidates
                )
            raise NotFoundError(message)

        # A local branch left behind by a previously removed worktree.
        if ref_exists(tree_path, f'refs/heads/{branch}'):
            self._log(f"Deleting stale local branch '{branch}'...")
            run_git(tree_path, 'branch', '-D', branch)

        run_git(tree_path, 'worktree', 'add', '--track', '-b', branch,
                branch_to_dir(branch), f'origin/{branch}')
        return WorktreeInfo(tree, branch, target)

    # Removal

    def infer_location(self, cwd: Optional[Path] = None) -> Tuple[str, str]:
        """Derive (tree, branch) from a directory inside a worktree."""
        current = Path(cwd or os.getcwd()).resolve()
        base = self.locator.base.resolve()
        try:
            parts = current.relative_to(base).parts
        except ValueError:
            raise AmbiguousLocationError(
                f"Not in a worktree directory: {current} is not under {base}"
            ) from None
        if len(parts) < 2 or parts[1] in (BARE_DIR, GIT_POINTER_FILE):
            raise AmbiguousLocationError(f"Not in a worktree (in repo root): {current}")
        return parts[0], dir_to_branch(parts[1])

    def remove(
        self,
        tree: str,
        branch: Optional[str] = None,
        auto_confirm: bool = False,
        interactive: bool = True,
        cwd: Optional[Path] = None
    ) -> RemovalResult:
        """Remove a branch's worktree and, if confirmed, its branch.

        tree '.' infers tree and branch from cwd. The branch is deleted when
        auto_confirm is set, or when interactive and the user agrees at a
        terminal prompt; otherwise deletion is skipped.
        """
        inferred = False
        if tree == '.':
            tree, branch = self.infer_location(cwd)
            inferred = True
            self._log(f"Detected: {tree} / {branch}")
        if not branch:
            raise AmbiguousLocationError(f"No branch given for repository '{tree}'")

        default_branch = self.resolver.resolve(tree)
        if branch == default_branch or branch in PROTECTED_BRANCHES:
            raise PolicyViolationError(
                f"Cannot remove the default branch worktree '{tree}/{branch}'"
            )

        tree_path = self.require_tree(tree)
        target = self.worktree_path(tree, branch)
        if not os.path.lexists(target):
            raise NotFoundError(f"Worktree {target} not found")

        current = Path(cwd or os.getcwd()).resolve()
        resolved_target = target.resolve()
        was_inside = current == resolved_target or resolved_target in current.parents

        run_git(tree_path, 'worktree', 'remove', branch_to_dir(branch))
        result = RemovalResult(tree, branch, target, inferred=inferred, was_inside=was_inside)

        if auto_confirm or (interactive and self._confirm_branch_deletion(branch)):
            run_git(tree_path, 'branch', '-D', branch)
            result.branch_deleted = True
        elif not interactive or not sys.stdin.isatty():
            result.deletion_skipped = True
        return result

    def _confirm_branch_deletion(self, branch: str) -> bool:
        if not sys.stdin.isatty():
            return False
        answer = input(f"Delete branch '{branch}' as well? [y/N] ").strip()
        return answer in ('y', 'Y')

    # Queries and synchronization

    def list_worktrees(self, tree: str) -> str:
        """git's own worktree listing for tree, verbatim."""
        tree_path = self.require_tree(tree)
        return run_git(tree_path, 'worktree', 'list')

    def list_branches(self, tree: str) -> List[str]:
        """Branch names of the worktree directories present in tree."""
        tree_path = self.tree_path(tree)
        if not tree_path.is_dir():
            return []
        return sorted(
            dir_to_branch(entry.name) for entry in tree_path.iterdir()
            if entry.is_dir() and not entry.name.startswith('.')
        )

    def list_remote_branches(self, tree: str) -> List[str]:
        """Names of origin's branches known to the store (origin/ stripped)."""
        bare = self.locator.bare_path(tree)
        if not bare.is_dir():
            return []
        output = git_output(bare, 'for-each-ref', '--format=%(refname)', 'refs/remotes/origin/')
        if not output:
            return []
        names = [strip_remote_prefix(line) for line in output.splitlines() if line.strip()]
        return [name for name in names if name != 'HEAD']

    def update_default(self, tree: str) -> WorktreeInfo:
        """Fetch origin and hard-reset the default-branch worktree to it."""
        default_branch = self.resolver.resolve(tree)
        default_path = self.worktree_path(tree, default_branch)
        if not default_path.is_dir():
            raise NotFoundError(
                f"Default branch worktree for '{tree}' not found at {default_path}"
            )
        self._sync_with_origin(default_path, default_branch)
        return WorktreeInfo(tree, default_branch, default_path)

    def rebase_current(self, cwd: Optional[Path] = None) -> WorktreeInfo:
        """Refresh the default branch, then rebase -i the current worktree onto it.

        The current directory must be a worktree directly under its tree root.
        """
        current = Path(cwd or os.getcwd())
        tree_root = current.parent
        tree = tree_root.name
        default_branch = self.resolver.resolve(tree)
        default_path = tree_root / branch_to_dir(default_branch)
        if not default_path.is_dir():
            raise NotFoundError(
                f"Default branch worktree for '{tree}' not found at {default_path}"
            )
        self._sync_with_origin(default_path, default_branch)
        run_git_interactive(current, 'rebase', '-i', default_branch)
        return WorktreeInfo(tree, dir_to_branch(current.name), current)

    # Helpers

    def _write_git_pointer(self, tree_path: Path) -> None:
        with open(tree_path / GIT_POINTER_FILE, 'w') as f:
            f.write(GIT_POINTER_TEXT)

    def _has_origin(self, tree_path: Path) -> bool:
        return git_output(tree_path, 'config', '--get', 'remote.origin.url') is not None

    def _sync_with_origin(self, default_path: Path, default_branch: str) -> None:
        self._log(f"Updating {default_branch} from origin...")
        run_git(default_path, 'fetch', 'origin')
        run_git(default_path, 'reset', '--hard', f'origin/{default_branch}')

    def _detect_remote_default(self, tree_path: Path) -> str:
        """origin's default branch as seen right after cloning."""
        detected = git_output(tree_path, 'symbolic-ref', REMOTE_HEAD_REF)
        if detected:
            return strip_remote_prefix(detected)
        shown = git_output(tree_path, 'remote', 'show', 'origin')
        if shown:
            head = parse_remote_show_head(shown)
            if head:
                return head
        return FALLBACK_DEFAULT_BRANCH
