"""
Mapping between branch/task identifiers and filesystem-safe directory names.

A '/' in a branch name becomes the reserved token '__' in the directory name
(feature/foo <-> feature__foo). Branch names that themselves contain '__'
do not survive the round trip; that is a known limitation of the on-disk
layout shared with existing installations.
"""

SEPARATOR = '/'
RESERVED_TOKEN = '__'


def branch_to_dir(branch: str) -> str:
    """Encode a branch identifier as a directory name."""
    return branch.replace(SEPARATOR, RESERVED_TOKEN)


def dir_to_branch(dir_name: str) -> str:
    """Decode a directory name back into a branch identifier."""
    return dir_name.replace(RESERVED_TOKEN, SEPARATOR)


def is_round_trip_safe(branch: str) -> bool:
    """Whether branch decodes back to itself after encoding."""
    return RESERVED_TOKEN not in branch
