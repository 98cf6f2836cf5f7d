"""
thebrain-mcp - Model Context Protocol bridge for TheBrain
=========================================================

Exposes thoughts stored in a TheBrain knowledge graph to MCP clients
(AI agents, IDE extensions) over line-delimited JSON-RPC on stdio.

Main Packages:
    - core: configuration, exception taxonomy, logging setup
    - mcp: JSON-RPC protocol helpers, the MCP router, the HTTP API adapter
    - cli: command-line interface (serve, health, search, get, links, list)

Quick Start:
    from thebrain_mcp.core.config import load_config
    from thebrain_mcp.mcp.server import build_server

    server = build_server(load_config())
    server.serve()
"""

__version__ = "1.0.0"
