"""Tool declarations advertised through ``tools/list``."""

from typing import Any, cast

from mcp.types import Tool

_TASK_LIST_ID = {"type": "string", "description": "Task list ID"}

_TOOL_SPECS: list[dict[str, Any]] = [
    {
        "name": "search",
        "description": "Search for a task in Google Tasks",
        "input_schema": {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search query"},
                "taskListId": _TASK_LIST_ID,
            },
            "required": ["query"],
        },
        "annotations": {
            "title": "Search Tasks",
            "readOnlyHint": True,
            "destructiveHint": False,
            "idempotentHint": True,
            "openWorldHint": True,
        },
    },
    {
        "name": "list",
        "description": "List all tasks in Google Tasks",
        "input_schema": {
            "type": "object",
            "properties": {
                "cursor": {"type": "string", "description": "Cursor for pagination"},
                "taskListId": _TASK_LIST_ID,
            },
        },
        "annotations": {
            "title": "List Tasks",
            "readOnlyHint": True,
            "destructiveHint": False,
            "idempotentHint": True,
            "openWorldHint": True,
        },
    },
    {
        "name": "create",
        "description": "Create a new task in Google Tasks",
        "input_schema": {
            "type": "object",
            "properties": {
                "taskListId": _TASK_LIST_ID,
                "title": {"type": "string", "description": "Task title"},
                "notes": {"type": "string", "description": "Task notes"},
                "due": {"type": "string", "description": "Due date"},
            },
            "required": ["title"],
        },
        "annotations": {
            "title": "Create Task",
            "readOnlyHint": False,
            "destructiveHint": False,
            "idempotentHint": False,
            "openWorldHint": True,
        },
    },
    {
        "name": "clear",
        "description": "Clear completed tasks from a Google Tasks task list",
        "input_schema": {
            "type": "object",
            "properties": {"taskListId": _TASK_LIST_ID},
            "required": ["taskListId"],
        },
        "annotations": {
            "title": "Clear Completed Tasks",
            "readOnlyHint": False,
            "destructiveHint": True,
            "idempotentHint": True,
            "openWorldHint": True,
        },
    },
    {
        "name": "delete",
        "description": "Delete a task in Google Tasks",
        "input_schema": {
            "type": "object",
            "properties": {
                "taskListId": _TASK_LIST_ID,
                "id": {"type": "string", "description": "Task id"},
            },
            "required": ["id", "taskListId"],
        },
        "annotations": {
            "title": "Delete Task",
            "readOnlyHint": False,
            "destructiveHint": True,
            "idempotentHint": True,
            "openWorldHint": True,
        },
    },
    {
        "name": "update",
        "description": "Update a task in Google Tasks",
        "input_schema": {
            "type": "object",
            "properties": {
                "taskListId": _TASK_LIST_ID,
                "id": {"type": "string", "description": "Task ID"},
                "uri": {"type": "string", "description": "Task URI"},
                "title": {"type": "string", "description": "Task title"},
                "notes": {"type": "string", "description": "Task notes"},
                "status": {
                    "type": "string",
                    "enum": ["needsAction", "completed"],
                    "description": "Task status (needsAction or completed)",
                },
                "due": {"type": "string", "description": "Due date"},
            },
            "required": ["id", "uri"],
        },
        "annotations": {
            "title": "Update Task",
            "readOnlyHint": False,
            "destructiveHint": False,
            "idempotentHint": True,
            "openWorldHint": True,
        },
    },
]

TOOL_SPECS: list[dict[str, Any]] = _TOOL_SPECS


def _make_tool(
    name: str,
    description: str,
    input_schema: dict[str, Any],
    annotations: dict[str, Any] | None = None,
) -> Tool:
    kwargs: dict[str, Any] = {
        "name": name,
        "description": description,
        "inputSchema": input_schema,
    }
    if annotations is not None:
        try:
            return Tool(**kwargs, annotations=annotations)
        except TypeError:
            return Tool(**kwargs)
    return Tool(**kwargs)


def build_tools() -> list[Tool]:
    """Build the MCP tool descriptors for every task tool."""
    return [
        _make_tool(
            name=str(spec["name"]),
            description=str(spec["description"]),
            input_schema=cast(dict[str, Any], spec["input_schema"]),
            annotations=cast(dict[str, Any] | None, spec.get("annotations")),
        )
        for spec in _TOOL_SPECS
    ]
