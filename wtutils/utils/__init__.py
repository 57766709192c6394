"""
Utility modules for wtutils.
"""

from .naming import (
    branch_to_dir,
    dir_to_branch,
    is_round_trip_safe
)

from .fs import (
    refresh_symlink,
    residual_entries,
    visible_entries,
    unique_destination
)

__all__ = [
    # naming utilities
    'branch_to_dir',
    'dir_to_branch',
    'is_round_trip_safe',

    # filesystem utilities
    'refresh_symlink',
    'residual_entries',
    'visible_entries',
    'unique_destination'
]
