"""Tasks exposed as MCP resources under the ``gtasks:///`` scheme."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import cast

from googleapiclient.errors import HttpError

from gtasks_mcp.constants import DEFAULT_PAGE_SIZE, RESOURCE_URI_PREFIX
from gtasks_mcp.errors import ResourceNotFound
from gtasks_mcp.pagination import decode_cursor, encode_cursor
from gtasks_mcp.task_service import (
    TasksService,
    is_not_found,
    list_task_lists,
    resolve_task_list_id,
)
from gtasks_mcp.types import TaskDict, TaskLinkDict

_log = logging.getLogger("gtasks_mcp.resources")


def task_uri(task_id: str) -> str:
    return f"{RESOURCE_URI_PREFIX}{task_id}"


def task_id_from_uri(uri: str) -> str:
    """Strip the fixed ``gtasks:///`` prefix from a resource URI."""
    if not uri.startswith(RESOURCE_URI_PREFIX):
        raise ResourceNotFound(f"Unknown resource URI: {uri}")
    task_id = uri.removeprefix(RESOURCE_URI_PREFIX)
    if not task_id:
        raise ResourceNotFound(f"Invalid resource URI: {uri}")
    return task_id


def _field(value: object, placeholder: str) -> str:
    if value is None or value is False or value == "":
        return placeholder
    if value is True:
        return "true"
    return str(value)


def _links(links: list[TaskLinkDict] | None) -> str:
    if not links:
        return "Unknown"
    rendered = []
    for link in links:
        url = link.get("link", "")
        description = link.get("description")
        rendered.append(f"{description} ({url})" if description else url)
    return ", ".join(rendered)


def render_task_document(task: TaskDict) -> str:
    """Render a task as the fixed fifteen-line text document."""
    return "\n".join(
        [
            f"Title: {_field(task.get('title'), 'No title')}",
            f"Status: {_field(task.get('status'), 'Unknown')}",
            f"Due: {_field(task.get('due'), 'Not set')}",
            f"Notes: {_field(task.get('notes'), 'No notes')}",
            f"Hidden: {_field(task.get('hidden'), 'Unknown')}",
            f"Parent: {_field(task.get('parent'), 'Unknown')}",
            f"Deleted?: {_field(task.get('deleted'), 'Unknown')}",
            f"Completed Date: {_field(task.get('completed'), 'Unknown')}",
            f"Position: {_field(task.get('position'), 'Unknown')}",
            f"ETag: {_field(task.get('etag'), 'Unknown')}",
            f"Links: {_links(task.get('links'))}",
            f"Kind: {_field(task.get('kind'), 'Unknown')}",
            f"Status: {_field(task.get('status'), 'Unknown')}",
            # The API exposes no creation time; the last update stands in for it.
            f"Created: {_field(task.get('updated'), 'Unknown')}",
            f"Updated: {_field(task.get('updated'), 'Unknown')}",
        ]
    )


@dataclass
class TaskPage:
    tasks: list[TaskDict] = field(default_factory=list)
    next_cursor: str | None = None


class TaskResources:
    """List and read tasks as resources."""

    def __init__(self, service: TasksService, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self.service = service
        self.page_size = page_size

    def list(self, cursor: str | None = None, task_list_id: str | None = None) -> TaskPage:
        """Return one page of tasks from the resolved list, in service order."""
        list_id = resolve_task_list_id(self.service, task_list_id)
        page_token = decode_cursor(cursor)

        params: dict[str, object] = {"tasklist": list_id, "maxResults": self.page_size}
        if page_token:
            params["pageToken"] = page_token
        response = self.service.tasks().list(**params).execute()

        next_token = response.get("nextPageToken")
        if next_token and next_token == page_token:
            _log.warning(
                "pagination_loop task_list=%s page_token=%s",
                list_id,
                page_token,
                extra={"task_list": list_id},
            )
            next_token = None

        return TaskPage(
            tasks=cast(list[TaskDict], response.get("items") or []),
            next_cursor=encode_cursor(next_token),
        )

    def read(self, uri: str, task_list_id: str | None = None) -> TaskDict:
        """Fetch the task named by ``uri``.

        The given (or default) list is searched first, then the account's
        remaining lists.

        Raises:
            ResourceNotFound: no list holds the task.
        """
        task_id = task_id_from_uri(uri)
        candidates = [task_list["id"] for task_list in list_task_lists(self.service)]
        if task_list_id:
            candidates = [task_list_id] + [c for c in candidates if c != task_list_id]

        for list_id in candidates:
            try:
                return cast(
                    TaskDict, self.service.tasks().get(tasklist=list_id, task=task_id).execute()
                )
            except HttpError as e:
                if not is_not_found(e):
                    raise
        raise ResourceNotFound(f"Task not found: {task_id}")

    def read_text(self, uri: str) -> str:
        return render_task_document(self.read(uri))
