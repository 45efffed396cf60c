"""End-to-end tests against a live bridge server over WebSocket."""

import asyncio
import json

import pytest
import websockets

from conftest import git, requires_git, ws_request
from devbridge import server as server_module
from devbridge.config import BridgeSettings
from devbridge.protocol import RequestKind
from devbridge.server import HANDLERS, DevBridgeServer
from devbridge.watcher import ChangeWatcher


def test_every_kind_has_a_handler():
    assert set(HANDLERS) == set(RequestKind)


# ── file operations ──────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_nested_file(bridge_url, workspace):
    async with websockets.connect(bridge_url) as ws:
        response = await ws_request(ws, {"kind": "create", "path": "a/b/c.txt", "content": "hi"})

    assert response == {"kind": "create", "path": "a/b/c.txt", "success": True}
    assert (workspace / "a" / "b").is_dir()
    assert (workspace / "a" / "b" / "c.txt").read_text(encoding="utf-8") == "hi"


@pytest.mark.asyncio
async def test_write_read_round_trip(bridge_url):
    content = "export const x = 1;\n// ünïcode\r\n"
    async with websockets.connect(bridge_url) as ws:
        written = await ws_request(ws, {"kind": "write", "path": "x.ts", "content": content})
        read = await ws_request(ws, {"kind": "read", "path": "x.ts"})

    assert written == {"kind": "write", "path": "x.ts", "success": True}
    assert read == {"kind": "read", "path": "x.ts", "content": content, "success": True}


@pytest.mark.asyncio
async def test_delete_missing_file_keeps_connection_open(bridge_url, workspace):
    async with websockets.connect(bridge_url) as ws:
        failed = await ws_request(ws, {"kind": "delete", "path": "ghost.txt"})
        created = await ws_request(ws, {"kind": "create", "path": "real.txt"})

    assert failed["success"] is False
    assert failed["error"]
    assert "kind" not in failed
    assert created["success"] is True
    assert (workspace / "real.txt").exists()


@pytest.mark.asyncio
async def test_list_skips_node_modules(bridge_url, workspace):
    (workspace / "src").mkdir()
    (workspace / "src" / "main.ts").write_text("")
    nested = workspace / "src" / "node_modules" / "lib" / "node_modules" / "deep"
    nested.mkdir(parents=True)
    (nested / "index.js").write_text("")

    async with websockets.connect(bridge_url) as ws:
        response = await ws_request(ws, {"kind": "list", "path": "src"})

    assert response["success"] is True
    assert [entry["name"] for entry in response["files"]] == ["main.ts"]


# ── malformed requests ───────────────────────────────────────────────


@pytest.mark.asyncio
async def test_malformed_json_yields_one_untagged_error(bridge_url):
    async with websockets.connect(bridge_url) as ws:
        await ws.send("{not json")
        error = await ws.recv()
        # No second reply is queued for the malformed message
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(ws.recv(), timeout=0.3)

        follow_up = await ws_request(ws, {"kind": "create", "path": "after.txt", "content": "ok"})

    error = json.loads(error)
    assert error["success"] is False
    assert error["error"]
    assert set(error) == {"success", "error"}
    assert follow_up["success"] is True


@pytest.mark.asyncio
async def test_unknown_kind_is_rejected(bridge_url):
    async with websockets.connect(bridge_url) as ws:
        response = await ws_request(ws, {"kind": "rename", "path": "a.txt"})

    assert response == {"error": "Unknown request kind: rename", "success": False}


@pytest.mark.asyncio
async def test_missing_path_is_untagged_error(bridge_url):
    async with websockets.connect(bridge_url) as ws:
        response = await ws_request(ws, {"kind": "read"})

    assert response == {"error": "path required", "success": False}


# ── connections ──────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_ping_is_answered(bridge_url):
    async with websockets.connect(bridge_url, ping_interval=None) as ws:
        pong_waiter = await ws.ping()
        latency = await asyncio.wait_for(pong_waiter, timeout=5)

    assert latency >= 0


async def _wait_for_disconnects(server):
    for _ in range(100):
        if not server.active_connections:
            return
        await asyncio.sleep(0.05)


@pytest.mark.asyncio
async def test_each_connection_gets_its_own_watcher(bridge, bridge_url, workspace, monkeypatch):
    watchers = []

    class RecordingWatcher(ChangeWatcher):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            watchers.append(self)

    monkeypatch.setattr(server_module, "ChangeWatcher", RecordingWatcher)
    (workspace / "src").mkdir()

    async with websockets.connect(bridge_url) as first, websockets.connect(bridge_url) as second:
        await ws_request(first, {"kind": "list", "path": "src"})
        await ws_request(second, {"kind": "list", "path": "src"})
        assert len(bridge.active_connections) == 2
        assert len(watchers) == 2
        assert watchers[0] is not watchers[1]
        assert all(watcher.running for watcher in watchers)

    await _wait_for_disconnects(bridge)
    assert not bridge.active_connections
    assert not any(watcher.running for watcher in watchers)


@pytest.mark.asyncio
async def test_failed_watcher_start_releases_connection(bridge, bridge_url, monkeypatch):
    closed = []

    class BrokenWatcher(ChangeWatcher):
        def start(self):
            raise RuntimeError("inotify exploded")

        def close(self):
            closed.append(self)
            super().close()

    monkeypatch.setattr(server_module, "ChangeWatcher", BrokenWatcher)

    async with websockets.connect(bridge_url) as ws:
        with pytest.raises(websockets.exceptions.ConnectionClosed):
            await asyncio.wait_for(ws.recv(), timeout=5)

    await _wait_for_disconnects(bridge)
    assert not bridge.active_connections
    assert len(closed) == 1


@pytest.mark.asyncio
async def test_server_reports_bound_port(workspace, tmp_path):
    settings = BridgeSettings(
        host="127.0.0.1",
        port=0,
        workspace_dir=str(workspace),
        ping_interval=None,
        ping_timeout=None,
        log_file=str(tmp_path / "bridge.log"),
    )
    server = DevBridgeServer(settings)
    assert server.port is None
    await server.start()
    try:
        assert server.port and server.port > 0
    finally:
        await server.close()


# ── git operations ───────────────────────────────────────────────────


@requires_git
@pytest.mark.asyncio
async def test_commit_with_clean_tree_fails(bridge_url, repo):
    async with websockets.connect(bridge_url) as ws:
        response = await ws_request(ws, {"kind": "git-commit", "message": "fix"})

    assert response["kind"] == "git-commit"
    assert response["success"] is False
    assert "nothing to commit" in response["error"]


@requires_git
@pytest.mark.asyncio
async def test_edit_status_commit_cycle(bridge_url, repo):
    async with websockets.connect(bridge_url) as ws:
        await ws_request(ws, {"kind": "create", "path": "src/app.ts", "content": "a"})
        await ws_request(ws, {"kind": "create", "path": "package-lock.json", "content": "{}"})

        status = await ws_request(ws, {"kind": "git-status"})
        commit = await ws_request(ws, {"kind": "git-commit", "message": "add app"})
        after = await ws_request(ws, {"kind": "git-status"})

    assert status["success"] is True
    assert status["changes"] == [{"file": "src/", "status": "??", "type": "untracked"}]
    assert commit["success"] is True
    assert after["changes"] == []
    # The lock file is hidden from status but still committed by add -A
    assert "package-lock.json" in git(repo, "ls-files")
