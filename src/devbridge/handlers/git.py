"""
Git message handlers.

Wrap the git executable for status, diff, commit and push requests.
"""

import logging
from typing import Any, Dict, List

from ..protocol import Request, RequestKind, build_failure, build_success
from .context import ConnectionContext

logger = logging.getLogger("devbridge")

DEFAULT_COMMIT_MESSAGE = "Update files"

# Never reported by git-status, at any directory depth
HIDDEN_STATUS_FILE = "package-lock.json"


def classify_status(status):
    # type: (str) -> str
    """Map a two-letter porcelain status code to a change type."""
    if status.startswith("??"):
        return "untracked"
    if status.startswith("A"):
        return "added"
    if status.startswith("D"):
        return "deleted"
    if status.startswith("M"):
        return "modified"
    if status.startswith("R"):
        return "renamed"
    return "modified"


def parse_porcelain(output):
    # type: (str) -> List[Dict[str, str]]
    """
    Parse ``git status --porcelain -z`` output into change entries.

    Entries are NUL-separated and paths are never quoted. A rename or copy
    entry is followed by an extra field holding its source path; it is
    reported as ``"<source> -> <destination>"``.

    Args:
        output: Raw porcelain text (leading spaces on each entry preserved)

    Returns:
        List of {file, status, type} dicts in git's output order
    """
    changes = []
    fields = iter(output.split("\0"))
    for entry in fields:
        if not entry.strip():
            continue
        status = entry[:2]
        file_path = entry[3:]
        if "R" in status or "C" in status:
            source = next(fields, "")
            if source:
                file_path = f"{source} -> {file_path}"

        if file_path == HIDDEN_STATUS_FILE or file_path.endswith("/" + HIDDEN_STATUS_FILE):
            continue

        changes.append({
            "file": file_path,
            "status": status.strip(),
            "type": classify_status(status),
        })
    return changes


async def handle_git_status(ctx, request):
    # type: (ConnectionContext, Request) -> Dict[str, Any]
    """Handle git-status message: list uncommitted changes."""
    _ = request
    result = await ctx.git.status_porcelain()
    if not result.success and "not a git repository" in result.stderr:
        return build_success(RequestKind.GIT_STATUS, changes=[], message="Not a git repository")

    changes = parse_porcelain(result.stdout)
    logger.info(f"Git status: {len(changes)} changes")
    return build_success(RequestKind.GIT_STATUS, changes=changes)


async def handle_git_diff(ctx, request):
    # type: (ConnectionContext, Request) -> Dict[str, Any]
    """Handle git-diff message: raw diff of the working tree, optionally for one file."""
    result = await ctx.git.diff(request.file)
    logger.info("Git diff{}".format(" for " + request.file if request.file else ""))
    return build_success(RequestKind.GIT_DIFF, diff=result.stdout, file=request.file or None)


async def handle_git_commit(ctx, request):
    # type: (ConnectionContext, Request) -> Dict[str, Any]
    """
    Handle git-commit message.

    Stages all working-tree changes (``git add -A``), not only the files the
    client edited, then commits them.
    """
    message = request.message or DEFAULT_COMMIT_MESSAGE
    result = await ctx.git.commit_all(message)

    if not result.success:
        logger.error(f"Commit failed: {result.stderr or result.stdout}")
        return build_failure(
            RequestKind.GIT_COMMIT,
            result.stderr or result.stdout or "Failed to commit",
        )

    logger.info(f"Committed: {message}")
    return build_success(
        RequestKind.GIT_COMMIT,
        message=result.stdout or "Changes committed successfully",
    )


async def handle_git_push(ctx, request):
    # type: (ConnectionContext, Request) -> Dict[str, Any]
    """Handle git-push message: push the current branch to its upstream."""
    _ = request
    result = await ctx.git.push()

    if not result.success:
        logger.error(f"Push failed: {result.stderr or result.stdout}")
        return build_failure(
            RequestKind.GIT_PUSH,
            result.stderr or result.stdout or "Failed to push",
        )

    logger.info("Pushed to remote")
    return build_success(
        RequestKind.GIT_PUSH,
        message=result.stdout or "Changes pushed successfully",
    )
