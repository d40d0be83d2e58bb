"""Helper functions for the task tools."""

from typing import Any

from gtasks_mcp.errors import InvalidToolInput
from gtasks_mcp.resources import task_uri
from gtasks_mcp.types import TaskDict


def require_string(arguments: dict[str, Any], name: str) -> str:
    """Return a required, non-empty string argument."""
    value = arguments.get(name)
    if value is None:
        raise InvalidToolInput(f"Missing required argument: {name}")
    if not isinstance(value, str) or not value.strip():
        raise InvalidToolInput(f"Argument '{name}' must be a non-empty string")
    return value


def optional_string(arguments: dict[str, Any], name: str) -> str | None:
    value = arguments.get(name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidToolInput(f"Argument '{name}' must be a string")
    return value


def format_task(task: TaskDict) -> str:
    """Format a task as a single summary block for tool output."""
    task_id = task.get("id", "")
    return (
        f"{task.get('title') or 'No title'}\n"
        f" (Due: {task.get('due') or 'Not set'})"
        f" - Notes: {task.get('notes') or 'No notes'}"
        f" - ID: {task_id}"
        f" - Status: {task.get('status') or 'Unknown'}"
        f" - URI: {task_uri(task_id)}"
        f" - Hidden: {bool(task.get('hidden'))}"
        f" - Parent: {task.get('parent') or 'None'}"
        f" - Deleted?: {bool(task.get('deleted'))}"
        f" - Completed Date: {task.get('completed') or 'Not completed'}"
        f" - Position: {task.get('position') or 'Unknown'}"
        f" - Updated Date: {task.get('updated') or 'Unknown'}"
        f" - ETag: {task.get('etag') or 'Unknown'}"
    )


def format_task_list(tasks: list[TaskDict]) -> str:
    return "\n".join(format_task(task) for task in tasks)
