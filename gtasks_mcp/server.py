"""Google Tasks MCP server: handler wiring and process entry point."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Any

from mcp import types
from mcp.server import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server

from gtasks_mcp.auth import AuthFlowRunner
from gtasks_mcp.config import GatewaySettings
from gtasks_mcp.constants import (
    DEFAULT_PAGE_SIZE,
    RESOURCE_MIME_TYPE,
    SERVER_NAME,
    SERVER_VERSION,
)
from gtasks_mcp.credentials import CredentialStore, load_oauth_app_config
from gtasks_mcp.errors import GatewayError
from gtasks_mcp.resources import TaskPage, TaskResources, task_uri
from gtasks_mcp.task_service import TasksService, build_credentials, build_tasks_service
from gtasks_mcp.tools import TaskTools, build_tools

_gateway_log = logging.getLogger("gtasks_mcp.server")


class TaskGateway:
    """Authenticated Google Tasks capability shared by every MCP handler.

    Built once at startup; the API client is never replaced afterwards.
    """

    def __init__(self, service: TasksService, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self.service = service
        self.resources = TaskResources(service, page_size=page_size)
        self.tools = TaskTools(service, self.resources)

    def list_resources(self, cursor: str | None = None) -> TaskPage:
        return self.resources.list(cursor)

    def read_resource(self, uri: str) -> str:
        return self.resources.read_text(uri)

    def list_tools(self) -> list[types.Tool]:
        return build_tools()

    def call_tool(self, name: str, arguments: dict[str, Any]) -> str:
        _gateway_log.info("tool_call tool=%s", name, extra={"tool": name})
        try:
            return self.tools.call(name, arguments)
        except Exception as e:
            _gateway_log.warning(
                "tool_error tool=%s error=%s",
                name,
                str(e),
                extra={"tool": name, "error": str(e), "error_type": type(e).__name__},
            )
            raise


def build_server(gateway: TaskGateway) -> Server:
    """Create an MCP server whose handlers all delegate to ``gateway``."""
    server: Server = Server(SERVER_NAME, version=SERVER_VERSION)

    # Registered directly so the request's cursor reaches the catalog.
    async def handle_list_resources(request: types.ListResourcesRequest) -> types.ServerResult:
        params = getattr(request, "params", None)
        cursor = getattr(params, "cursor", None) if params is not None else None
        page = gateway.list_resources(cursor)
        return types.ServerResult(
            types.ListResourcesResult(
                resources=[
                    types.Resource(
                        uri=task_uri(task["id"]),
                        name=task.get("title") or task["id"],
                        mimeType=RESOURCE_MIME_TYPE,
                    )
                    for task in page.tasks
                ],
                nextCursor=page.next_cursor,
            )
        )

    server.request_handlers[types.ListResourcesRequest] = handle_list_resources

    @server.read_resource()
    async def handle_read_resource(uri: Any) -> list[ReadResourceContents]:
        """Read one task as a plain-text document."""
        text = gateway.read_resource(str(uri))
        return [ReadResourceContents(content=text, mime_type=RESOURCE_MIME_TYPE)]

    @server.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        return gateway.list_tools()

    @server.call_tool()
    async def handle_call_tool(
        name: str, arguments: dict[str, Any] | None
    ) -> list[types.TextContent]:
        """Run a task tool; raised errors become MCP error results."""
        text = gateway.call_tool(name, arguments or {})
        return [types.TextContent(type="text", text=text)]

    return server


def load_gateway(settings: GatewaySettings) -> TaskGateway:
    """Authenticate the API client from persisted credentials.

    Raises:
        MissingCredentials: no token record has been saved yet.
        MalformedCredentials: the token record is unreadable.
        OAuthConfigError: the client secrets file is missing or invalid.
    """
    record = CredentialStore(settings.credentials_path).load()
    app_config = load_oauth_app_config(settings.oauth_keys_path)
    service = build_tasks_service(build_credentials(record, app_config))
    return TaskGateway(service, page_size=settings.page_size)


def run_auth(settings: GatewaySettings) -> None:
    """Run the interactive OAuth flow and persist the resulting tokens."""
    print("Launching auth flow…", file=sys.stderr)
    runner = AuthFlowRunner(
        load_oauth_app_config(settings.oauth_keys_path),
        CredentialStore(settings.credentials_path),
        timeout=settings.auth_timeout,
    )
    runner.run()


async def main_stdio(gateway: TaskGateway) -> None:
    """Serve the MCP protocol over stdin/stdout until the client disconnects."""
    server = build_server(gateway)
    async with stdio_server() as (read_stream, write_stream):
        initialization_options = server.create_initialization_options()
        await server.run(read_stream, write_stream, initialization_options)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Google Tasks MCP Server")
    parser.add_argument(
        "mode",
        nargs="?",
        default="serve",
        help="'auth' runs the OAuth flow and exits; anything else serves over stdio",
    )
    args = parser.parse_args(argv)

    try:
        settings = GatewaySettings.from_env()
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    # stdout carries the protocol in server mode, so logs always go to stderr.
    logging.basicConfig(
        level=settings.log_level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    if args.mode == "auth":
        try:
            run_auth(settings)
        except GatewayError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            sys.exit(1)
        return

    try:
        gateway = load_gateway(settings)
    except GatewayError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
    asyncio.run(main_stdio(gateway))


if __name__ == "__main__":
    main()
