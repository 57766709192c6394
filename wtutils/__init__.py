"""
wtutils - manage bare-repository git worktrees and cross-repo tasks.

Each repository lives under a worktree base as a bare store plus one
directory per checked-out branch; a cross-repo task links the same branch's
worktree from several repositories into one task directory.
"""

__version__ = "0.1.0"
__author__ = "wtutils"
