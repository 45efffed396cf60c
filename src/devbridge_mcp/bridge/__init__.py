"""Bridge client utilities."""

from devbridge_mcp.bridge.client import DevBridgeClient, close_bridge_client, get_bridge_client

__all__ = ["DevBridgeClient", "get_bridge_client", "close_bridge_client"]
