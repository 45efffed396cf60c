"""
File message handlers.

read/write/create/delete let failures propagate to the message-level error
handler (untagged error reply); list reports its own failures.
"""

import asyncio
import logging
import os
from typing import Any, Dict, List

from ..protocol import (
    Request,
    RequestError,
    RequestKind,
    build_failure,
    build_success,
    require_field,
)
from .context import ConnectionContext

logger = logging.getLogger("devbridge")

# Directories whose path contains one of these are not descended by list
SKIPPED_DIRECTORIES = ("node_modules", "dist")


def _read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8", errors="replace", newline="") as f:
        return f.read()


def _write_text(path: str, content: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)


def _create_text(path: str, content: str) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    _write_text(path, content)


def _is_skipped(path: str) -> bool:
    return any(name in path for name in SKIPPED_DIRECTORIES)


def list_files_recursive(display_dir, real_dir):
    # type: (str, str) -> List[Dict[str, Any]]
    """
    Depth-first listing of the files under a directory.

    Entries come in directory-read order; a subdirectory's files are emitted
    where the subdirectory appears, before later siblings. Directories are
    traversed but never listed themselves.

    Args:
        display_dir: Path as the client named it (used to build entry paths)
        real_dir: Same directory resolved against the workspace

    Returns:
        List of {name, path, isDirectory} dicts
    """
    results = []  # type: List[Dict[str, Any]]
    for name in os.listdir(real_dir):
        item_path = os.path.normpath(os.path.join(display_dir, name))
        real_path = os.path.join(real_dir, name)

        if os.path.isdir(real_path):
            if not _is_skipped(item_path):
                results.extend(list_files_recursive(item_path, real_path))
        else:
            results.append({
                "name": name,
                "path": item_path,
                "isDirectory": False,
            })
    return results


async def handle_read(ctx, request):
    # type: (ConnectionContext, Request) -> Dict[str, Any]
    """Handle read message: return the full text of a file."""
    path = require_field(request, "path")
    loop = asyncio.get_running_loop()
    content = await loop.run_in_executor(None, _read_text, ctx.resolve(path))
    logger.info(f"Read file: {path}")
    return build_success(RequestKind.READ, path=path, content=content)


async def handle_write(ctx, request):
    # type: (ConnectionContext, Request) -> Dict[str, Any]
    """Handle write message: overwrite a file with the given content."""
    path = require_field(request, "path")
    if request.content is None:
        raise RequestError("content required")
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, _write_text, ctx.resolve(path), request.content)
    logger.info(f"Wrote file: {path}")
    return build_success(RequestKind.WRITE, path=path)


async def handle_create(ctx, request):
    # type: (ConnectionContext, Request) -> Dict[str, Any]
    """
    Handle create message.

    Creates missing parent directories, then writes the content (default
    empty). Directories created before a failed write are left in place.
    """
    path = require_field(request, "path")
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, _create_text, ctx.resolve(path), request.content or "")
    logger.info(f"Created file: {path}")
    return build_success(RequestKind.CREATE, path=path)


async def handle_delete(ctx, request):
    # type: (ConnectionContext, Request) -> Dict[str, Any]
    """Handle delete message: remove a single file."""
    path = require_field(request, "path")
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, os.remove, ctx.resolve(path))
    logger.info(f"Deleted file: {path}")
    return build_success(RequestKind.DELETE, path=path)


async def handle_list(ctx, request):
    # type: (ConnectionContext, Request) -> Dict[str, Any]
    """
    Handle list message: recursively enumerate files under a directory.

    Subdirectories whose path contains ``node_modules`` or ``dist`` are
    skipped at any depth. Failures are reported as a tagged list response.
    """
    path = request.path
    try:
        if not path:
            raise ValueError("path required")
        loop = asyncio.get_running_loop()
        files = await loop.run_in_executor(None, list_files_recursive, path, ctx.resolve(path))
    except Exception as e:
        logger.error(f"Error listing directory: {e}")
        return build_failure(RequestKind.LIST, str(e), path=path)

    logger.info(f"Listed directory (recursive): {path} - {len(files)} files")
    return build_success(RequestKind.LIST, path=path, files=files)
