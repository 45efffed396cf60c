"""Git tools backed by the dev bridge."""

from collections import Counter
from typing import Any

from fastmcp import FastMCP

from devbridge_mcp.bridge import get_bridge_client
from devbridge_mcp.contracts import GitChange, build_error_from_response, build_ok
from devbridge_mcp.formatting import build_bridge_error
from devbridge_mcp.utils import CommitMessage, DiffFile


def register(mcp: FastMCP) -> None:
    """Register git status/diff/commit/push tools."""

    @mcp.tool()
    async def bridge_git_status() -> dict[str, Any]:
        """List uncommitted changes in the project repository."""
        try:
            client = await get_bridge_client()
            response = await client.git_status()
        except Exception as exc:
            return build_bridge_error(exc)

        if not response.get("success"):
            return build_error_from_response("bridge_git_status", response)

        changes = [
            GitChange.model_validate(item).model_dump()
            for item in response.get("changes") or []
        ]
        data: dict[str, Any] = {
            "total_count": len(changes),
            "by_type": dict(Counter(change["type"] for change in changes)),
            "changes": changes,
        }
        if response.get("message"):
            data["message"] = response["message"]
        return build_ok(data)

    @mcp.tool()
    async def bridge_git_diff(file: DiffFile = None) -> dict[str, Any]:
        """Show the unstaged diff of the working tree, or of one file."""
        try:
            client = await get_bridge_client()
            response = await client.git_diff(file)
        except Exception as exc:
            return build_bridge_error(exc, path=file)

        if not response.get("success"):
            return build_error_from_response("bridge_git_diff", response)

        diff = response.get("diff") or ""
        return build_ok({"file": file, "diff": diff, "empty": not diff})

    @mcp.tool()
    async def bridge_git_commit(message: CommitMessage = None) -> dict[str, Any]:
        """Stage ALL working-tree changes (git add -A) and commit them."""
        try:
            client = await get_bridge_client()
            response = await client.git_commit(message)
        except Exception as exc:
            return build_bridge_error(exc)

        if not response.get("success"):
            return build_error_from_response("bridge_git_commit", response)
        return build_ok({"committed": True, "message": response.get("message", "")})

    @mcp.tool()
    async def bridge_git_push() -> dict[str, Any]:
        """Push the current branch to its configured remote."""
        try:
            client = await get_bridge_client()
            response = await client.git_push()
        except Exception as exc:
            return build_bridge_error(exc)

        if not response.get("success"):
            return build_error_from_response("bridge_git_push", response)
        return build_ok({"pushed": True, "message": response.get("message", "")})
