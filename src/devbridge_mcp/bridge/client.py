"""WebSocket client for communicating with the dev bridge server."""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import websockets

from devbridge_mcp.config import get_bridge_config
from devbridge_mcp.formatting import is_bridge_connectivity_error

logger = logging.getLogger("devbridge-mcp.bridge")


class DevBridgeClient:
    """Async request/response client for the dev bridge WebSocket protocol.

    Bridge responses carry no request id, only the request ``kind``, so at
    most one request is in flight per connection and the next frame received
    is taken as its response.
    """

    def __init__(
        self,
        url: str,
        reconnect_interval_s: float,
        max_retries: int,
        request_timeout_s: float,
        auto_reconnect: bool,
    ) -> None:
        self.url = url
        self.reconnect_interval_s = reconnect_interval_s
        self.max_retries = max_retries
        self.request_timeout_s = request_timeout_s
        self.auto_reconnect = auto_reconnect

        self._websocket: Any | None = None
        self._lock = asyncio.Lock()
        self._request_lock = asyncio.Lock()

    @property
    def connected(self) -> bool:
        return self._websocket is not None

    async def connect(self) -> None:
        async with self._lock:
            if self._websocket is not None:
                return
            self._websocket = await websockets.connect(self.url, compression=None)
            logger.info("Connected to dev bridge at %s", self.url)

    async def disconnect(self) -> None:
        async with self._lock:
            websocket = self._websocket
            self._websocket = None

        if websocket is not None:
            try:
                await websocket.close()
            except Exception as exc:
                logger.debug("Bridge close failed: %s", exc)

    async def _ensure_connected(self) -> None:
        if self.connected:
            return
        await self.connect()

    async def _send_request(self, message: Dict[str, Any], timeout_s: float) -> Dict[str, Any]:
        async with self._request_lock:
            await self._ensure_connected()
            assert self._websocket is not None

            await self._websocket.send(json.dumps(message))
            try:
                raw_message = await asyncio.wait_for(self._websocket.recv(), timeout=timeout_s)
            except asyncio.TimeoutError as exc:
                raise TimeoutError(f"Bridge request timed out after {timeout_s:.1f}s") from exc
            except websockets.exceptions.ConnectionClosed as exc:
                raise ConnectionError("Bridge connection closed") from exc

        payload = json.loads(raw_message)
        kind = payload.get("kind")
        if kind is not None and kind != message["kind"]:
            raise ConnectionError(f"Unexpected {kind} response to {message['kind']} request")
        return payload

    async def _request_with_retry(
        self,
        message: Dict[str, Any],
        timeout_s: Optional[float] = None,
    ) -> Dict[str, Any]:
        timeout = timeout_s if timeout_s is not None else self.request_timeout_s
        attempts = self.max_retries + 1
        last_error: Exception | None = None
        operation_name = message["kind"]

        for attempt in range(1, attempts + 1):
            try:
                return await self._send_request(message, timeout)
            except Exception as exc:
                last_error = exc
                await self.disconnect()
                # A timed-out request may already have been applied by the bridge
                retryable = is_bridge_connectivity_error(exc) and not isinstance(exc, TimeoutError)
                if not (self.auto_reconnect and retryable) or attempt >= attempts:
                    break
                await asyncio.sleep(self.reconnect_interval_s)

        assert last_error is not None
        raise ConnectionError(f"{operation_name} failed: {last_error}") from last_error

    async def read_file(self, path: str) -> Dict[str, Any]:
        return await self._request_with_retry({"kind": "read", "path": path})

    async def write_file(self, path: str, content: str) -> Dict[str, Any]:
        return await self._request_with_retry({"kind": "write", "path": path, "content": content})

    async def create_file(self, path: str, content: str = "") -> Dict[str, Any]:
        return await self._request_with_retry({"kind": "create", "path": path, "content": content})

    async def delete_file(self, path: str) -> Dict[str, Any]:
        return await self._request_with_retry({"kind": "delete", "path": path})

    async def list_files(self, path: str) -> Dict[str, Any]:
        return await self._request_with_retry({"kind": "list", "path": path})

    async def git_status(self) -> Dict[str, Any]:
        return await self._request_with_retry({"kind": "git-status"})

    async def git_diff(self, file: Optional[str] = None) -> Dict[str, Any]:
        message: Dict[str, Any] = {"kind": "git-diff"}
        if file:
            message["file"] = file
        return await self._request_with_retry(message)

    async def git_commit(self, message: Optional[str] = None) -> Dict[str, Any]:
        request: Dict[str, Any] = {"kind": "git-commit"}
        if message:
            request["message"] = message
        return await self._request_with_retry(request, timeout_s=max(self.request_timeout_s, 60.0))

    async def git_push(self) -> Dict[str, Any]:
        return await self._request_with_retry({"kind": "git-push"}, timeout_s=max(self.request_timeout_s, 120.0))


_client: DevBridgeClient | None = None
_client_lock = asyncio.Lock()


async def get_bridge_client() -> DevBridgeClient:
    """Return the global bridge client instance with lazy initialization."""
    global _client
    async with _client_lock:
        if _client is None:
            config = get_bridge_config()
            _client = DevBridgeClient(
                url=config.url,
                reconnect_interval_s=config.reconnect_interval_s,
                max_retries=config.max_retries,
                request_timeout_s=config.request_timeout_s,
                auto_reconnect=config.auto_reconnect,
            )
        await _client.connect()
        return _client


async def close_bridge_client() -> None:
    """Close global bridge client connection."""
    global _client
    async with _client_lock:
        if _client is None:
            return
        client = _client
        _client = None
    await client.disconnect()
