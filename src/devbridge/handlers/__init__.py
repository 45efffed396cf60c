"""
Message handlers for the dev bridge.

All handlers share the signature ``async (ctx, request) -> dict``.
"""

from .context import ConnectionContext
from .files import handle_create, handle_delete, handle_list, handle_read, handle_write
from .git import handle_git_commit, handle_git_diff, handle_git_push, handle_git_status

__all__ = [
    'ConnectionContext',
    'handle_read',
    'handle_write',
    'handle_list',
    'handle_create',
    'handle_delete',
    'handle_git_status',
    'handle_git_diff',
    'handle_git_commit',
    'handle_git_push',
]
