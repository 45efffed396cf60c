"""Dev Bridge MCP - editor bridge file and git tools exposed over MCP."""

__version__ = "0.1.0"
