"""Google Tasks API client construction and shared lookups."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime, timezone
from typing import Any, cast

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from gtasks_mcp.constants import MAX_TASK_LISTS, TASKS_SCOPE
from gtasks_mcp.credentials import CredentialRecord, OAuthAppConfig
from gtasks_mcp.errors import TaskListNotFound
from gtasks_mcp.types import TaskListDict

# googleapiclient builds resource classes at runtime, so the client is untyped.
TasksService = Any


def build_credentials(record: CredentialRecord, app_config: OAuthAppConfig) -> Credentials:
    """Turn a persisted record into google-auth user credentials."""
    expiry: datetime | None = None
    if record.expiry_date is not None:
        # google-auth compares against naive UTC datetimes.
        expiry = datetime.fromtimestamp(record.expiry_date / 1000, tz=timezone.utc).replace(
            tzinfo=None
        )
    return Credentials(
        token=record.access_token,
        refresh_token=record.refresh_token,
        token_uri=app_config.token_uri,
        client_id=app_config.client_id,
        client_secret=app_config.client_secret,
        scopes=record.scopes or [TASKS_SCOPE],
        expiry=expiry,
    )


def build_tasks_service(credentials: Credentials) -> TasksService:
    return build("tasks", "v1", credentials=credentials, cache_discovery=False)


def is_not_found(error: Exception) -> bool:
    """True for API errors meaning the addressed task or list does not exist."""
    if not isinstance(error, HttpError):
        return False
    return getattr(error.resp, "status", None) == 404


def list_task_lists(service: TasksService) -> list[TaskListDict]:
    response = service.tasklists().list(maxResults=MAX_TASK_LISTS).execute()
    return cast(list[TaskListDict], response.get("items") or [])


def resolve_task_list_id(service: TasksService, task_list_id: str | None = None) -> str:
    """Return ``task_list_id`` or, when absent, the account's first task list."""
    if task_list_id:
        return task_list_id
    task_lists = list_task_lists(service)
    if not task_lists:
        raise TaskListNotFound("No task lists found for this account")
    return task_lists[0]["id"]


def iter_task_pages(
    service: TasksService, task_list_id: str, page_size: int
) -> Iterator[dict[str, Any]]:
    """Yield every raw ``tasks.list`` response for a list, following page tokens."""
    page_token: str | None = None
    seen_tokens: set[str] = set()
    while True:
        params: dict[str, Any] = {"tasklist": task_list_id, "maxResults": page_size}
        if page_token:
            params["pageToken"] = page_token
        response = service.tasks().list(**params).execute()
        yield response
        page_token = response.get("nextPageToken")
        if not page_token or page_token in seen_tokens:
            return
        seen_tokens.add(page_token)
