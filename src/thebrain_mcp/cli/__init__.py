"""
thebrain-mcp CLI - Command Line Interface

Provides terminal commands for:
- Running the MCP server on stdio
- Checking API health
- Searching, showing and listing thoughts
"""

from .main import cli

__all__ = ["cli"]
