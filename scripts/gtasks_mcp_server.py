#!/usr/bin/env python3
"""
Google Tasks MCP Server - Entry Point

Thin wrapper around gtasks_mcp.server for running from a source checkout.

Usage:
    # one-time interactive OAuth grant
    python scripts/gtasks_mcp_server.py auth

    # stdio mode (what MCP clients launch)
    python scripts/gtasks_mcp_server.py
"""

import sys
from pathlib import Path

# Repo root on path so gtasks_mcp is importable without installation
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from gtasks_mcp.server import main  # noqa: E402

if __name__ == "__main__":
    main()
