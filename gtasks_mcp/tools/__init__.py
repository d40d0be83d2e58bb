"""MCP tool modules for the Google Tasks gateway."""

from gtasks_mcp.tools.specs import TOOL_SPECS, build_tools
from gtasks_mcp.tools.task_tools import TaskTools, ToolName

__all__ = [
    "TOOL_SPECS",
    "TaskTools",
    "ToolName",
    "build_tools",
]
