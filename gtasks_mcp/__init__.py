"""Google Tasks MCP server - tasks as resources, task actions as tools."""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from gtasks_mcp.server import TaskGateway


def __getattr__(name: str) -> Any:
    if name == "TaskGateway":
        from gtasks_mcp.server import TaskGateway

        return TaskGateway
    raise AttributeError(f"module 'gtasks_mcp' has no attribute '{name}'")


__all__ = ["TaskGateway"]
