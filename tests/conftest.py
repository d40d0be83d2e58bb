import pytest

from fake_tasks import FakeTasksService
from gtasks_mcp.resources import TaskResources
from gtasks_mcp.tools import TaskTools


@pytest.fixture
def service() -> FakeTasksService:
    return FakeTasksService({"list-1": "My Tasks", "list-2": "Work"})


@pytest.fixture
def resources(service: FakeTasksService) -> TaskResources:
    return TaskResources(service, page_size=2)


@pytest.fixture
def tools(service: FakeTasksService, resources: TaskResources) -> TaskTools:
    return TaskTools(service, resources)
