"""Dev bridge MCP tool implementations."""

from . import files, git

__all__ = [
    "files",
    "git",
]
