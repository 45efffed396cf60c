"""
Dev Bridge WebSocket Server.

Accepts editor connections and answers one JSON response per JSON request,
dispatching on the request ``kind`` to file and git handlers. Server startup
is done through ``devbridge.start()`` or the ``devbridge`` console script.
"""

import asyncio
import json
import logging
import uuid
from typing import Any, Awaitable, Callable, Dict, Optional

import websockets
from websockets.asyncio.server import ServerConnection

from .config import BridgeSettings, get_bridge_settings
from .handlers import (
    ConnectionContext,
    handle_create,
    handle_delete,
    handle_git_commit,
    handle_git_diff,
    handle_git_push,
    handle_git_status,
    handle_list,
    handle_read,
    handle_write,
)
from .protocol import Request, RequestKind, build_error, parse_request
from .services import GitRunner
from .watcher import ChangeWatcher

# Module logger
logger = logging.getLogger("devbridge")

Handler = Callable[[ConnectionContext, Request], Awaitable[Dict[str, Any]]]

# Message handlers registry (all handlers are async with unified signature)
HANDLERS = {
    RequestKind.READ: handle_read,
    RequestKind.WRITE: handle_write,
    RequestKind.LIST: handle_list,
    RequestKind.CREATE: handle_create,
    RequestKind.DELETE: handle_delete,
    RequestKind.GIT_STATUS: handle_git_status,
    RequestKind.GIT_DIFF: handle_git_diff,
    RequestKind.GIT_COMMIT: handle_git_commit,
    RequestKind.GIT_PUSH: handle_git_push,
}  # type: Dict[RequestKind, Handler]

_missing = set(RequestKind) - set(HANDLERS)
if _missing:
    raise RuntimeError("No handler registered for: {}".format(
        ", ".join(sorted(kind.value for kind in _missing))))


class DevBridgeServer:
    """WebSocket server exposing workspace file and git operations.

    Connections are independent: each gets its own ConnectionContext and
    change watcher. The workspace directory and its git repository are the
    only shared state, and access to them is not serialized.
    """

    def __init__(self, settings: BridgeSettings) -> None:
        """
        Initialize WebSocket server.

        Args:
            settings: Host, port, workspace and keepalive configuration
        """
        self.settings = settings
        self.git = GitRunner(settings.workspace_dir)
        self.active_connections = set()
        self.server = None
        # Keep references to in-flight message tasks; they outlive their connection
        self._inflight = set()  # type: set

    @property
    def port(self) -> Optional[int]:
        """Bound port (useful when started with port 0)."""
        if self.server is None or not self.server.sockets:
            return None
        return self.server.sockets[0].getsockname()[1]

    async def _send_response(
        self,
        websocket: ServerConnection,
        response: Dict[str, Any],
        ctx: ConnectionContext,
    ) -> bool:
        """
        Send response to client with connection error handling.

        Returns:
            True if sent successfully, False if connection closed
        """
        try:
            await websocket.send(json.dumps(response))
            return True
        except websockets.exceptions.ConnectionClosed:
            logger.warning(
                f"Cannot send {response.get('kind', 'error')} response, "
                f"connection closed: {ctx.connection_id}"
            )
            return False

    async def dispatch(self, ctx: ConnectionContext, message) -> Dict[str, Any]:
        """
        Decode one message and run its handler.

        Handler failures that the handler does not report itself, as well as
        undecodable messages, become an untagged error response.
        """
        try:
            request = parse_request(message)
            return await HANDLERS[request.kind](ctx, request)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Error: {e}")
            return build_error(str(e))

    async def _process_message(self, websocket: ServerConnection, ctx: ConnectionContext, message):
        """Process a single WebSocket message in its own task."""
        response = await self.dispatch(ctx, message)
        await self._send_response(websocket, response, ctx)

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    async def handle_client(self, websocket: ServerConnection):
        """
        Handle one WebSocket client connection.

        Each incoming message is processed in a separate task, so a slow git
        command does not hold up other requests. Tasks still running when the
        client disconnects are left to finish; their replies are dropped.
        """
        connection_id = uuid.uuid4().hex[:8]
        ctx = ConnectionContext(
            workspace_dir=self.settings.workspace_dir,
            git=self.git,
            watcher=ChangeWatcher(self.settings.workspace_dir),
            connection_id=connection_id,
            remote=str(websocket.remote_address),
        )
        loop = asyncio.get_running_loop()

        try:
            self.active_connections.add(websocket)
            logger.info(f"Client connected: {connection_id} ({ctx.remote})")
            try:
                await loop.run_in_executor(None, ctx.watcher.start)
            except OSError as e:
                # Keep serving requests without change notifications
                logger.error(f"Change watcher failed to start: {e}")

            async for message in websocket:
                self._spawn(self._process_message(websocket, ctx, message))

        except websockets.exceptions.ConnectionClosed:
            pass  # Client disconnected

        finally:
            try:
                await loop.run_in_executor(None, ctx.watcher.close)
            finally:
                self.active_connections.discard(websocket)
                logger.info(f"Client disconnected: {connection_id}")

    async def start(self):
        """Start the WebSocket server (non-blocking)."""
        try:
            self.server = await websockets.serve(
                self.handle_client,
                self.settings.host,
                self.settings.port,
                ping_interval=self.settings.ping_interval,
                ping_timeout=self.settings.ping_timeout,
            )
        except Exception as e:
            logger.error(f"Server error: {e}")
            raise
        logger.info(f"WebSocket server running on port {self.port}")

    async def close(self):
        """Stop accepting connections and close the open ones."""
        if self.server:
            self.server.close()
            await self.server.wait_closed()

    async def wait_closed(self):
        """Wait for server to close (for graceful shutdown)."""
        if self.server:
            await self.server.wait_closed()


def create_server(settings: Optional[BridgeSettings] = None) -> DevBridgeServer:
    """
    Create a dev bridge server instance.

    Args:
        settings: Server settings (default: loaded from the environment)

    Returns:
        DevBridgeServer: Server instance ready to be started

    Example:
        >>> server = create_server(get_bridge_settings().override(port=0))
        >>> await server.start()
    """
    return DevBridgeServer(settings or get_bridge_settings())
