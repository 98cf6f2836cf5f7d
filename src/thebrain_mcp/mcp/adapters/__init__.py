"""
MCP Adapters Package
====================
Adapters translating MCP tool calls into calls against the TheBrain HTTP API.
"""

from .api_adapter import TheBrainAPIAdapter, build_session

__all__ = ["TheBrainAPIAdapter", "build_session"]
