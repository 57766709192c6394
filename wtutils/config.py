"""
Configuration for wtutils - worktree base, cross-repo base/archive and
default-branch overrides.
"""

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from .core import ConfigError


CONFIG_FILE_ENV = 'WT_CONFIG_FILE'
DEFAULT_ARCHIVE_DIRNAME = 'wt-archive'

ENV_KEYS = {
    'worktree_base': 'WORKTREE_BASE',
    'cross_repo_base': 'CROSS_REPO_BASE',
    'cross_repo_archive': 'CROSS_REPO_ARCHIVE',
}
OVERRIDES_ENV = 'WT_DEFAULT_BRANCH_OVERRIDES'


@dataclass(frozen=True)
class WorktreeConfig:
    """Resolved configuration, threaded explicitly into every component."""
    worktree_base: Path
    cross_repo_base: Path
    cross_repo_archive: Path
    default_branch_overrides: Dict[str, str] = field(default_factory=dict)
    source_file: Optional[Path] = None

    @classmethod
    def create(
        cls,
        worktree_base: Any,
        cross_repo_base: Any,
        cross_repo_archive: Any = None,
        default_branch_overrides: Optional[Mapping[str, str]] = None,
        source_file: Optional[Path] = None
    ) -> 'WorktreeConfig':
        """Build a config from raw values, applying defaults and validation."""
        if not worktree_base:
            raise ConfigError(
                f"Worktree base is not set (set {ENV_KEYS['worktree_base']} "
                f"or [paths] worktree_base in the config file)"
            )
        if not cross_repo_base:
            raise ConfigError(
                f"Cross-repo base is not set (set {ENV_KEYS['cross_repo_base']} "
                f"or [paths] cross_repo_base in the config file)"
            )

        cross_base = _expand(cross_repo_base)
        archive = _expand(cross_repo_archive) if cross_repo_archive else cross_base / DEFAULT_ARCHIVE_DIRNAME
        overrides = {
            str(tree).lower(): str(branch)
            for tree, branch in (default_branch_overrides or {}).items()
        }
        return cls(
            worktree_base=_expand(worktree_base),
            cross_repo_base=cross_base,
            cross_repo_archive=archive,
            default_branch_overrides=overrides,
            source_file=source_file,
        )


def _expand(value: Any) -> Path:
    return Path(os.path.expandvars(str(value))).expanduser()


def default_config_file(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Location of the TOML config file."""
    environ = os.environ if environ is None else environ
    if environ.get(CONFIG_FILE_ENV):
        return _expand(environ[CONFIG_FILE_ENV])
    config_home = environ.get('XDG_CONFIG_HOME') or str(Path.home() / '.config')
    return Path(config_home).expanduser() / 'git-worktree-utils' / 'config.toml'


def load_config_file(path: Path) -> Dict[str, Any]:
    """Load the TOML config file; a missing file is an empty config."""
    if not path.exists():
        return {}
    try:
        with open(path, 'rb') as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e


def parse_overrides(value: str) -> Dict[str, str]:
    """Parse 'repo=branch' pairs separated by commas and/or whitespace.

    >>> parse_overrides('comfyui=master, api=develop')
    {'comfyui': 'master', 'api': 'develop'}
    """
    overrides = {}
    for item in value.replace(',', ' ').split():
        tree, sep, branch = item.partition('=')
        if not sep or not tree or not branch:
            raise ConfigError(f"Invalid default branch override '{item}' (expected repo=branch)")
        overrides[tree.strip().lower()] = branch.strip()
    return overrides


def load_config(
    environ: Optional[Mapping[str, str]] = None,
    config_file: Optional[Path] = None
) -> WorktreeConfig:
    """Resolve configuration from the config file, then the environment."""
    environ = os.environ if environ is None else environ
    path = config_file if config_file is not None else default_config_file(environ)
    data = load_config_file(path)

    paths = data.get('paths', {})
    file_overrides = data.get('default_branch_overrides', {})
    if not isinstance(paths, dict) or not isinstance(file_overrides, dict):
        raise ConfigError(f"Invalid config file {path}: [paths] and "
                          f"[default_branch_overrides] must be tables")

    values = {key: paths.get(key) for key in ENV_KEYS}
    for key, env_name in ENV_KEYS.items():
        if environ.get(env_name):
            values[key] = environ[env_name]

    overrides = {str(k).lower(): str(v) for k, v in file_overrides.items()}
    if environ.get(OVERRIDES_ENV):
        overrides.update(parse_overrides(environ[OVERRIDES_ENV]))

    return WorktreeConfig.create(
        values['worktree_base'],
        values['cross_repo_base'],
        values['cross_repo_archive'],
        overrides,
        source_file=path if path.exists() else None,
    )
