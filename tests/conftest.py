"""Shared fixtures: a live bridge on an ephemeral port and an isolated git setup."""

import json
import os
import shutil
import subprocess

import pytest

from devbridge.config import BridgeSettings
from devbridge.server import create_server


requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not found")


async def ws_request(websocket, payload):
    """Send one request (dict or raw text) and return the decoded response."""
    raw = payload if isinstance(payload, str) else json.dumps(payload)
    await websocket.send(raw)
    return json.loads(await websocket.recv())


@pytest.fixture()
def workspace(tmp_path):
    path = tmp_path / "project"
    path.mkdir()
    return path


@pytest.fixture()
async def bridge(workspace, tmp_path):
    """Start a real bridge server serving ``workspace``."""
    settings = BridgeSettings(
        host="127.0.0.1",
        port=0,
        workspace_dir=str(workspace),
        ping_interval=None,
        ping_timeout=None,
        log_file=str(tmp_path / "bridge.log"),
    )
    server = create_server(settings)
    await server.start()

    yield server

    await server.close()


@pytest.fixture()
def bridge_url(bridge):
    return f"ws://127.0.0.1:{bridge.port}"


@pytest.fixture()
def git_env(monkeypatch, tmp_path):
    """Make git deterministic: fixed identity, no user/system config, no parent repos."""
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Dev Bridge")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "devbridge@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Dev Bridge")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "devbridge@example.com")
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", os.devnull)
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))


def git(cwd, *args):
    """Run a git command for test setup, failing loudly."""
    return subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        check=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    ).stdout


@pytest.fixture()
def repo(workspace, git_env):
    """Initialise ``workspace`` as an empty git repository."""
    git(workspace, "init", "-q")
    return workspace
