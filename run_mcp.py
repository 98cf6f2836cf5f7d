#!/usr/bin/env python3
"""Run the thebrain-mcp stdio server from a source checkout."""
import os
import sys

# Make src/ importable without an editable install
current_dir = os.path.dirname(os.path.abspath(__file__))
src_dir = os.path.join(current_dir, "src")
if src_dir not in sys.path:
    sys.path.insert(0, src_dir)

from thebrain_mcp.mcp.server import main

if __name__ == "__main__":
    main()
