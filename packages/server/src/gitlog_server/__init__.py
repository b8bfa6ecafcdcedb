"""MCP transport and command line for gitlogmcp."""
