"""
CLI interface for wtutils.
"""

import sys
import argparse
from typing import Optional, List

import argcomplete

from . import __version__
from .config import load_config
from .core import WorktreeUtilsError
from .completion import branch_completer, remote_branch_completer, task_completer, tree_completer
from .commands import config as config_commands
from .commands import task as task_commands
from .commands import worktree as worktree_commands


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='wt',
        description='Manage bare-repository worktrees and cross-repo tasks'
    )

    # Add global options
    parser.add_argument(
        '--version', '-V',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose output'
    )

    # Add subcommands
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Repository setup
    clone_parser = subparsers.add_parser('clone', help='Clone a remote repo into the worktree structure')
    clone_parser.add_argument('url', help='Repository URL')
    clone_parser.add_argument('name', nargs='?', help='Local name (default: derived from URL)')
    clone_parser.set_defaults(handler=worktree_commands.clone_command)

    init_parser = subparsers.add_parser('init', help='Initialize a new local repo in the worktree structure')
    init_parser.add_argument('name', help='Repository name')
    init_parser.add_argument('branch', nargs='?', default='main', help='Default branch (default: main)')
    init_parser.set_defaults(handler=worktree_commands.init_command)

    # Worktree lifecycle
    new_parser = subparsers.add_parser('new', help='Create a feature worktree from the default branch')
    new_parser.add_argument('tree', help='Repository name').completer = tree_completer
    new_parser.add_argument('branch', help='New branch name')
    new_parser.set_defaults(handler=worktree_commands.new_command)

    continue_parser = subparsers.add_parser('continue', help='Create a worktree tracking origin/<branch>')
    continue_parser.add_argument('tree', help='Repository name').completer = tree_completer
    continue_parser.add_argument('branch', help='Remote branch name').completer = remote_branch_completer
    continue_parser.set_defaults(handler=worktree_commands.continue_command)

    rm_parser = subparsers.add_parser('rm', help='Remove a feature worktree')
    rm_parser.add_argument('tree', help="Repository name, or '.' to detect from the current directory"
                           ).completer = tree_completer
    rm_parser.add_argument('branch', nargs='?', help='Branch name').completer = branch_completer
    rm_parser.add_argument('--yes', '-y', action='store_true', help='Delete the branch without prompting')
    rm_parser.set_defaults(handler=worktree_commands.rm_command)

    ls_parser = subparsers.add_parser('ls', help='List worktrees of a repository')
    ls_parser.add_argument('tree', help='Repository name').completer = tree_completer
    ls_parser.set_defaults(handler=worktree_commands.ls_command)

    cd_parser = subparsers.add_parser('cd', help='Print the path of a repository or worktree')
    cd_parser.add_argument('tree', help='Repository name').completer = tree_completer
    cd_parser.add_argument('branch', nargs='?', help='Branch name').completer = branch_completer
    cd_parser.set_defaults(handler=worktree_commands.cd_command)

    update_parser = subparsers.add_parser('update', help='Reset the default branch worktree to origin')
    update_parser.add_argument('tree', help='Repository name').completer = tree_completer
    update_parser.set_defaults(handler=worktree_commands.update_command)

    rebase_parser = subparsers.add_parser('rebase', help='Rebase the current worktree onto the default branch')
    rebase_parser.set_defaults(handler=worktree_commands.rebase_command)

    repos_parser = subparsers.add_parser('repos', help='List repositories')
    repos_parser.set_defaults(handler=worktree_commands.repos_command)

    config_parser = subparsers.add_parser('config', help='Show effective configuration')
    config_parser.set_defaults(handler=config_commands.config_command)

    # Cross-repo tasks
    task_parser = subparsers.add_parser('task', help='Manage cross-repo tasks')
    task_subparsers = task_parser.add_subparsers(dest='task_command')

    task_new_parser = task_subparsers.add_parser('new', help='Create worktrees across repos for a task')
    task_new_parser.add_argument('branch', help='Task branch name')
    task_new_parser.add_argument('trees', nargs='+', help='Repositories').completer = tree_completer
    task_new_parser.set_defaults(handler=task_commands.task_new_command)

    task_add_parser = task_subparsers.add_parser('add', help='Add repos to an existing task')
    task_add_parser.add_argument('branch', help='Task branch name').completer = task_completer
    task_add_parser.add_argument('trees', nargs='+', help='Repositories').completer = tree_completer
    task_add_parser.set_defaults(handler=task_commands.task_add_command)

    task_rm_parser = task_subparsers.add_parser('rm', help='Remove a task (archived if it holds other files)')
    task_rm_parser.add_argument('branch', help='Task branch name').completer = task_completer
    task_rm_parser.set_defaults(handler=task_commands.task_rm_command)

    task_ls_parser = task_subparsers.add_parser('ls', help='List tasks')
    task_ls_parser.set_defaults(handler=task_commands.task_ls_command)

    task_cd_parser = task_subparsers.add_parser('cd', help='Print the path of a task directory')
    task_cd_parser.add_argument('branch', help='Task branch name').completer = task_completer
    task_cd_parser.set_defaults(handler=task_commands.task_cd_command)

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    if args is None:
        args = sys.argv[1:]

    parser = create_parser()
    argcomplete.autocomplete(parser)
    parsed_args = parser.parse_args(args)

    handler = getattr(parsed_args, 'handler', None)
    if handler is None:
        parser.print_help()
        return 1

    try:
        config = load_config()
        return handler(config, parsed_args)

    except WorktreeUtilsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return 130
    except Exception as e:
        if parsed_args.verbose:
            import traceback
            traceback.print_exc()
        else:
            print(f"Unexpected error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
