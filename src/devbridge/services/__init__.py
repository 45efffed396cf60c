"""
Services used by the bridge handlers.
"""

from .git_runner import GitResult, GitRunner

__all__ = ['GitResult', 'GitRunner']
