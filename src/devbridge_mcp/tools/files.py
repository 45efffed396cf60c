"""File tools backed by the dev bridge."""

from typing import Any

from fastmcp import FastMCP

from devbridge_mcp.bridge import get_bridge_client
from devbridge_mcp.contracts import FileEntry, build_error_from_response, build_ok
from devbridge_mcp.formatting import build_bridge_error
from devbridge_mcp.utils import DirectoryPath, FileContent, FilePath, NewFileContent


def register(mcp: FastMCP) -> None:
    """Register file read/write/create/delete/list tools."""

    @mcp.tool()
    async def bridge_read_file(path: FilePath) -> dict[str, Any]:
        """Read the full text of a project file."""
        try:
            client = await get_bridge_client()
            response = await client.read_file(path)
        except Exception as exc:
            return build_bridge_error(exc, path=path)

        if not response.get("success"):
            return build_error_from_response("bridge_read_file", response)
        return build_ok({"path": path, "content": response.get("content", "")})

    @mcp.tool()
    async def bridge_write_file(path: FilePath, content: FileContent) -> dict[str, Any]:
        """Overwrite a project file. The parent directory must already exist."""
        try:
            client = await get_bridge_client()
            response = await client.write_file(path, content)
        except Exception as exc:
            return build_bridge_error(exc, path=path)

        if not response.get("success"):
            return build_error_from_response("bridge_write_file", response)
        return build_ok({"path": path, "written": True})

    @mcp.tool()
    async def bridge_create_file(path: FilePath, content: NewFileContent = "") -> dict[str, Any]:
        """Create a project file, creating missing parent directories."""
        try:
            client = await get_bridge_client()
            response = await client.create_file(path, content)
        except Exception as exc:
            return build_bridge_error(exc, path=path)

        if not response.get("success"):
            return build_error_from_response("bridge_create_file", response)
        return build_ok({"path": path, "created": True})

    @mcp.tool()
    async def bridge_delete_file(path: FilePath) -> dict[str, Any]:
        """Delete a single project file. This cannot be undone."""
        try:
            client = await get_bridge_client()
            response = await client.delete_file(path)
        except Exception as exc:
            return build_bridge_error(exc, path=path)

        if not response.get("success"):
            return build_error_from_response("bridge_delete_file", response)
        return build_ok({"path": path, "deleted": True})

    @mcp.tool()
    async def bridge_list_files(path: DirectoryPath = ".") -> dict[str, Any]:
        """List every file under a directory, recursively."""
        try:
            client = await get_bridge_client()
            response = await client.list_files(path)
        except Exception as exc:
            return build_bridge_error(exc, path=path)

        if not response.get("success"):
            return build_error_from_response("bridge_list_files", response)

        entries = [
            FileEntry.model_validate(item).model_dump()
            for item in response.get("files") or []
        ]
        return build_ok({"path": path, "total_count": len(entries), "files": entries})
