"""
Command for showing the effective wtutils configuration.
"""

from wtutils.config import ENV_KEYS, OVERRIDES_ENV, WorktreeConfig


def config_command(config: WorktreeConfig, args) -> int:
    """Print resolved paths and default branch overrides."""
    print("wtutils configuration:")
    print("-" * 40)
    source = config.source_file if config.source_file else "(none, environment only)"
    print(f"  Config file:        {source}")
    print(f"  Worktree base:      {config.worktree_base}")
    print(f"  Cross-repo base:    {config.cross_repo_base}")
    print(f"  Cross-repo archive: {config.cross_repo_archive}")

    if config.default_branch_overrides:
        print("\n[default_branch_overrides]")
        for tree, branch in sorted(config.default_branch_overrides.items()):
            print(f"{tree} = {branch}")

    if getattr(args, 'verbose', False):
        print("\nEnvironment variables:")
        for key, env_name in ENV_KEYS.items():
            print(f"  {env_name} ({key.replace('_', ' ')})")
        print(f"  {OVERRIDES_ENV} (repo=branch pairs)")
    return 0
