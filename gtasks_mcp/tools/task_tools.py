"""Task actions exposed as MCP tools."""

from __future__ import annotations

from enum import Enum
from typing import Any, cast

from googleapiclient.errors import HttpError

from gtasks_mcp.errors import InvalidToolInput, ResourceNotFound, TaskNotFound, UnknownTool
from gtasks_mcp.resources import TaskResources, task_id_from_uri
from gtasks_mcp.task_service import (
    TasksService,
    is_not_found,
    iter_task_pages,
    resolve_task_list_id,
)
from gtasks_mcp.tools.helpers import format_task_list, optional_string, require_string
from gtasks_mcp.types import TaskDict, TaskPatchDict, TaskStatus


class ToolName(str, Enum):
    SEARCH = "search"
    LIST = "list"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    CLEAR = "clear"


class TaskTools:
    """The six task tools: search, list, create, update, delete and clear."""

    def __init__(self, service: TasksService, resources: TaskResources) -> None:
        """Initialize task tools.

        Args:
            service: Authenticated Google Tasks API client
            resources: Resource catalog sharing the same client, used for paging
        """
        self.service = service
        self.resources = resources

    def call(self, name: str, arguments: dict[str, Any]) -> str:
        """Validate ``arguments`` and run the tool called ``name``."""
        try:
            tool = ToolName(name)
        except ValueError:
            raise UnknownTool(f"Unknown tool: {name}") from None

        match tool:
            case ToolName.SEARCH:
                return self.search(
                    require_string(arguments, "query"),
                    optional_string(arguments, "taskListId"),
                )
            case ToolName.LIST:
                return self.list(
                    optional_string(arguments, "cursor"),
                    optional_string(arguments, "taskListId"),
                )
            case ToolName.CREATE:
                return self.create(
                    require_string(arguments, "title"),
                    task_list_id=optional_string(arguments, "taskListId"),
                    notes=optional_string(arguments, "notes"),
                    due=optional_string(arguments, "due"),
                )
            case ToolName.UPDATE:
                return self.update(
                    require_string(arguments, "id"),
                    require_string(arguments, "uri"),
                    task_list_id=optional_string(arguments, "taskListId"),
                    title=optional_string(arguments, "title"),
                    notes=optional_string(arguments, "notes"),
                    status=optional_string(arguments, "status"),
                    due=optional_string(arguments, "due"),
                )
            case ToolName.DELETE:
                return self.delete(
                    require_string(arguments, "id"),
                    require_string(arguments, "taskListId"),
                )
            case ToolName.CLEAR:
                return self.clear(require_string(arguments, "taskListId"))

    def search(self, query: str, task_list_id: str | None = None) -> str:
        """Case-insensitive match of ``query`` against titles and notes."""
        list_id = resolve_task_list_id(self.service, task_list_id)
        needle = query.casefold()
        matches: list[TaskDict] = []
        for response in iter_task_pages(self.service, list_id, self.resources.page_size):
            for task in cast(list[TaskDict], response.get("items") or []):
                haystack = f"{task.get('title') or ''}\n{task.get('notes') or ''}".casefold()
                if needle in haystack:
                    matches.append(task)
        return f"Found {len(matches)} tasks:\n{format_task_list(matches)}"

    def list(self, cursor: str | None = None, task_list_id: str | None = None) -> str:
        page = self.resources.list(cursor, task_list_id)
        text = f"Found {len(page.tasks)} tasks:\n{format_task_list(page.tasks)}"
        if page.next_cursor:
            text += f"\nNext cursor: {page.next_cursor}"
        return text

    def create(
        self,
        title: str,
        task_list_id: str | None = None,
        notes: str | None = None,
        due: str | None = None,
    ) -> str:
        list_id = resolve_task_list_id(self.service, task_list_id)
        body: TaskPatchDict = {"title": title}
        if notes is not None:
            body["notes"] = notes
        if due is not None:
            body["due"] = due
        task = self.service.tasks().insert(tasklist=list_id, body=body).execute()
        return f"Task created: {task.get('title', title)}"

    def update(
        self,
        task_id: str,
        uri: str,
        task_list_id: str | None = None,
        title: str | None = None,
        notes: str | None = None,
        status: str | None = None,
        due: str | None = None,
    ) -> str:
        """Patch only the fields that were supplied."""
        try:
            uri_task_id = task_id_from_uri(uri)
        except ResourceNotFound as e:
            raise InvalidToolInput(f"Invalid task URI: {uri}") from e
        if uri_task_id != task_id:
            raise InvalidToolInput(f"Task URI {uri} does not refer to task {task_id}")

        body: TaskPatchDict = {}
        if title is not None:
            body["title"] = title
        if notes is not None:
            body["notes"] = notes
        if status is not None:
            try:
                body["status"] = TaskStatus(status).value
            except ValueError:
                raise InvalidToolInput(
                    f"Invalid status: {status}. Expected 'needsAction' or 'completed'"
                ) from None
        if due is not None:
            body["due"] = due

        list_id = resolve_task_list_id(self.service, task_list_id)
        try:
            task = (
                self.service.tasks().patch(tasklist=list_id, task=task_id, body=body).execute()
            )
        except HttpError as e:
            if is_not_found(e):
                raise TaskNotFound(f"Task not found: {task_id}") from e
            raise
        return f"Task updated: {task.get('title', task_id)}"

    def delete(self, task_id: str, task_list_id: str) -> str:
        try:
            self.service.tasks().delete(tasklist=task_list_id, task=task_id).execute()
        except HttpError as e:
            if is_not_found(e):
                raise TaskNotFound(f"Task not found: {task_id}") from e
            raise
        return f"Task {task_id} deleted"

    def clear(self, task_list_id: str) -> str:
        self.service.tasks().clear(tasklist=task_list_id).execute()
        return f"Tasks from tasklist {task_list_id} cleared"
