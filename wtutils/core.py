"""
Core wtutils functionality - error taxonomy and the git subprocess boundary.
"""

import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Union

import git


PathLike = Union[str, Path]


class WorktreeUtilsError(Exception):
    """Base exception for wtutils operations."""
    pass


class AlreadyExistsError(WorktreeUtilsError):
    """Target directory is present where creation expected it absent."""
    pass


class NotFoundError(WorktreeUtilsError):
    """Tree, branch or task is absent where the operation expects it."""
    pass


class AmbiguousLocationError(WorktreeUtilsError):
    """Tree/branch could not be inferred from the current directory."""
    pass


class PolicyViolationError(WorktreeUtilsError):
    """Attempt to remove a protected (default) branch worktree."""
    pass


class ResolutionError(WorktreeUtilsError):
    """Default-branch worktree is missing but is needed as a pivot."""
    pass


class ConfigError(WorktreeUtilsError):
    """Required configuration is absent or malformed."""
    pass


class SubprocessFailure(WorktreeUtilsError):
    """A git invocation exited non-zero."""

    def __init__(self, args: Sequence[str], cwd: PathLike, status: Optional[int] = None,
                 stderr: str = ''):
        self.command = list(args)
        self.cwd = str(cwd)
        self.status = status
        self.stderr = stderr.strip()
        message = f"'git {' '.join(self.command)}' failed in {self.cwd}"
        if status is not None:
            message += f" (exit {status})"
        if self.stderr:
            message += f": {self.stderr}"
        super().__init__(message)


def _clean_stderr(stderr) -> str:
    """Strip GitPython's "stderr: '...'" decoration from an error's stderr."""
    if isinstance(stderr, bytes):
        stderr = stderr.decode('utf-8', errors='replace')
    text = (stderr or '').strip()
    if text.startswith("stderr: '") and text.endswith("'"):
        text = text[len("stderr: '"):-1]
    return text.strip()


def run_git(cwd: PathLike, *args: str) -> str:
    """Run a git command in cwd and return its stdout.

    Raises SubprocessFailure when git exits non-zero.
    """
    try:
        return git.Git(str(cwd)).execute(['git', *args])
    except git.exc.CommandError as e:
        raise SubprocessFailure(args, cwd, e.status, _clean_stderr(e.stderr)) from e


def git_output(cwd: PathLike, *args: str) -> Optional[str]:
    """Run a read-only git query; return stdout, or None if git fails."""
    try:
        return run_git(cwd, *args)
    except SubprocessFailure:
        return None


def git_succeeds(cwd: PathLike, *args: str) -> bool:
    """Check whether a git command exits zero."""
    return git_output(cwd, *args) is not None


def ref_exists(cwd: PathLike, ref: str) -> bool:
    """Check whether a fully qualified ref exists (show-ref --verify)."""
    return git_succeeds(cwd, 'show-ref', '--verify', '--quiet', ref)


def run_git_interactive(cwd: PathLike, *args: str) -> None:
    """Run a git command attached to the caller's terminal.

    Used for commands that open an editor session (interactive rebase).
    """
    command: List[str] = ['git', *args]
    result = subprocess.run(command, cwd=str(cwd))
    if result.returncode != 0:
        raise SubprocessFailure(args, cwd, result.returncode)


def clone_bare(url: str, destination: PathLike) -> None:
    """Bare-clone url into destination."""
    try:
        git.Repo.clone_from(url, str(destination), bare=True)
    except git.exc.CommandError as e:
        raise SubprocessFailure(['clone', '--bare', url, str(destination)],
                                Path(destination).parent, e.status,
                                _clean_stderr(e.stderr)) from e


def init_bare(destination: PathLike) -> None:
    """Initialize an empty bare repository at destination."""
    try:
        git.Repo.init(str(destination), bare=True)
    except git.exc.CommandError as e:
        raise SubprocessFailure(['init', '--bare', str(destination)],
                                Path(destination).parent, e.status,
                                _clean_stderr(e.stderr)) from e


def git_version() -> tuple:
    """Version of the installed git as a tuple of ints, e.g. (2, 43, 0)."""
    return git.Git().version_info
