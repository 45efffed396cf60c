"""
Git Runner - Executes git commands for the bridge's git-* requests.

Each call shells out to the ``git`` executable on PATH inside the workspace
directory. There is no locking between connections: two clients committing at
the same time can interleave their ``add -A``/``commit`` pairs, so which
changes land in which commit is undefined.
"""

import asyncio
import logging
import os
import subprocess
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger("devbridge")


@dataclass(frozen=True)
class GitResult:
    """Outcome of one git invocation."""

    stdout: str
    stderr: str
    success: bool
    returncode: Optional[int] = None


class GitRunner:
    """
    Run git commands in a workspace directory.

    Failures never raise: a non-zero exit status or a missing git executable
    is reported through ``GitResult.success`` and ``GitResult.stderr``.
    """

    def __init__(self, workspace_dir=None):
        # type: (Optional[str]) -> None
        """
        Initialize GitRunner.

        Args:
            workspace_dir: Directory git runs in. If None, uses current directory.
        """
        self.workspace_dir = workspace_dir or os.getcwd()

    def run_sync(self, args):
        # type: (List[str]) -> GitResult
        """
        Run a git command and wait for it to finish.

        Args:
            args: List of git command arguments (without 'git' prefix)

        Returns:
            GitResult with trimmed output
        """
        cmd = ["git"] + list(args)
        kwargs = {
            "cwd": self.workspace_dir,
            "stdout": subprocess.PIPE,
            "stderr": subprocess.PIPE,
            "stdin": subprocess.DEVNULL,
            "text": True,
            "encoding": "utf-8",
            "errors": "replace",
        }
        # Windows: hide console window
        if os.name == "nt":
            kwargs["creationflags"] = subprocess.CREATE_NO_WINDOW

        try:
            result = subprocess.run(cmd, **kwargs)
        except OSError as e:
            logger.error("Git command error: {} -> {}".format(" ".join(cmd), e))
            return GitResult(stdout="", stderr=str(e), success=False)

        if result.returncode != 0:
            logger.debug("Git command failed: {} -> {}".format(" ".join(cmd), result.stderr.strip()))

        # Leading whitespace is significant in porcelain output (" M file")
        return GitResult(
            stdout=result.stdout.rstrip(),
            stderr=result.stderr.strip(),
            success=result.returncode == 0,
            returncode=result.returncode,
        )

    async def run(self, *args):
        # type: (*str) -> GitResult
        """Run a git command without blocking the event loop."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.run_sync, list(args))

    async def status_porcelain(self):
        # type: () -> GitResult
        return await self.run("status", "--porcelain", "-z")

    async def diff(self, file=None):
        # type: (Optional[str]) -> GitResult
        if file:
            return await self.run("diff", "--", file)
        return await self.run("diff")

    async def commit_all(self, message):
        # type: (str) -> GitResult
        """
        Stage every working-tree change and commit it.

        The ``add -A`` outcome is not checked; a failed stage surfaces as a
        failed (or empty) commit.
        """
        await self.run("add", "-A")
        return await self.run("commit", "-m", message)

    async def push(self):
        # type: () -> GitResult
        return await self.run("push")
