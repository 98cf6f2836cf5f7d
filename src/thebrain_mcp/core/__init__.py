"""
Core Package
============
Configuration, exception taxonomy and logging shared by the MCP layer and CLI.
"""
