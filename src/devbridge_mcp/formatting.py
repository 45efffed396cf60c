"""Error rendering helpers for MCP tool outputs."""

from __future__ import annotations

from typing import Any

from devbridge_mcp.config import get_bridge_config
from devbridge_mcp.contracts import build_error


def is_bridge_connectivity_error(exc: Exception) -> bool:
    """Best-effort detection for bridge connectivity failures."""
    if isinstance(exc, (ConnectionError, TimeoutError, OSError)):
        return True

    lowered = str(exc).strip().lower()
    return (
        "connect call failed" in lowered
        or "connection refused" in lowered
        or "connection lost" in lowered
        or "connection closed" in lowered
        or "[errno 61]" in lowered
        or "[errno 111]" in lowered
    )


def _summarize_bridge_error(exc: Exception) -> str:
    text = str(exc).strip()
    lowered = text.lower()

    if (
        "connect call failed" in lowered
        or "connection refused" in lowered
        or "[errno 61]" in lowered
        or "[errno 111]" in lowered
    ):
        return "cannot connect to bridge service"
    if "timed out" in lowered:
        return "bridge request timed out"
    if "connection closed" in lowered or "connection lost" in lowered:
        return "bridge connection closed"
    if not text:
        return "unknown bridge error"
    return text.splitlines()[0]


def build_bridge_error(exc: Exception, *, path: str | None = None) -> dict[str, Any]:
    """Build a unified error envelope for bridge connectivity failures."""
    cfg = get_bridge_config()
    reason = _summarize_bridge_error(exc)
    details: dict[str, Any] = {
        "bridge_url": cfg.url,
        "reason": reason,
        "action": "start the bridge with `devbridge` in the project directory, then retry",
    }
    if path:
        details["path"] = path
    return build_error("bridge_unavailable", "Dev bridge unavailable", details)
