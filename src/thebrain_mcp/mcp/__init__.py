"""
thebrain-mcp MCP (Model Context Protocol) Module
================================================
JSON-RPC router and HTTP adapter exposing TheBrain thoughts to AI agents.

Available Tools:
    - search_thoughts: Search thoughts by text query
    - get_thought: Retrieve a thought by ID
    - create_thought: Create a thought, optionally under a parent
    - update_thought: Change fields of an existing thought
    - delete_thought: Remove a thought

Resources:
    - thought://thought/<id>: a thought rendered as markdown

Transport:
    Line-delimited JSON-RPC 2.0 over stdin/stdout only.

Usage:
    from thebrain_mcp.mcp.server import build_server

    build_server().serve()
"""
