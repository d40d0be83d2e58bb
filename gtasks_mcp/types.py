"""TypedDict definitions for Google Tasks payloads."""

from enum import Enum
from typing import TypedDict


class TaskStatus(str, Enum):
    NEEDS_ACTION = "needsAction"
    COMPLETED = "completed"


class TaskLinkDict(TypedDict, total=False):
    type: str
    description: str
    link: str


class TaskDict(TypedDict, total=False):
    """Task resource as returned by the Google Tasks API."""

    kind: str
    id: str
    etag: str
    title: str
    updated: str
    selfLink: str
    parent: str
    position: str
    notes: str
    status: str
    due: str
    completed: str
    deleted: bool
    hidden: bool
    links: list[TaskLinkDict]


class TaskListDict(TypedDict, total=False):
    kind: str
    id: str
    etag: str
    title: str
    updated: str
    selfLink: str


class TaskPatchDict(TypedDict, total=False):
    """Fields accepted by ``tasks.insert`` / ``tasks.patch``."""

    title: str
    notes: str
    status: str
    due: str
