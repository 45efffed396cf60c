"""
Connection Context for Handler Dependency Injection.

Each accepted WebSocket connection gets its own context object carrying
everything handlers need, so no module-level state is shared between
connections.
"""

import os
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..services import GitRunner
    from ..watcher import ChangeWatcher


class ConnectionContext:
    """
    Context object providing per-connection dependencies for handlers.

    Attributes:
        workspace_dir: Directory relative request paths resolve against
        git: Git command runner bound to the workspace
        watcher: Change watcher owned by this connection
        connection_id: Short identifier used in log lines
        remote: Peer address description for logging
    """

    def __init__(
        self,
        workspace_dir: str,
        git: "GitRunner",
        watcher: Optional["ChangeWatcher"] = None,
        connection_id: str = "-",
        remote: str = "unknown",
    ) -> None:
        self.workspace_dir = workspace_dir
        self.git = git
        self.watcher = watcher
        self.connection_id = connection_id
        self.remote = remote

    def resolve(self, path: str) -> str:
        """Map a request path onto the filesystem (absolute paths pass through)."""
        return os.path.join(self.workspace_dir, path)
