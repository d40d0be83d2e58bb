"""Interactive OAuth2 authorization-code grant for the Google Tasks scope."""

from __future__ import annotations

import logging
import secrets
import sys
import threading
import time
import webbrowser
from collections.abc import Callable, Mapping
from enum import Enum
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any
from urllib.parse import parse_qs, urlparse

from google_auth_oauthlib.flow import Flow

from gtasks_mcp.constants import (
    DEFAULT_AUTH_TIMEOUT_SECONDS,
    TASKS_SCOPE,
    TOKEN_REQUEST_TIMEOUT_SECONDS,
)
from gtasks_mcp.credentials import CredentialRecord, CredentialStore, OAuthAppConfig
from gtasks_mcp.errors import AuthFlowTimeout, OAuthExchangeFailure

_log = logging.getLogger("gtasks_mcp.auth")

SUCCESS_MESSAGE = "Authentication successful! You can close this tab."
FAILURE_MESSAGE = "Authentication failed."
NO_CODE_MESSAGE = "No authorization code received."
FINISHED_MESSAGE = "Authorization already completed. You can close this tab."


class AuthFlowState(str, Enum):
    IDLE = "idle"
    AWAITING_CALLBACK = "awaiting_callback"
    EXCHANGING = "exchanging"
    PERSISTED = "persisted"
    FAILED = "failed"


_TERMINAL_STATES = frozenset({AuthFlowState.PERSISTED, AuthFlowState.FAILED})


def build_flow(app_config: OAuthAppConfig, redirect_uri: str) -> Flow:
    return Flow.from_client_config(
        app_config.client_config(),
        scopes=[TASKS_SCOPE],
        redirect_uri=redirect_uri,
    )


def record_from_token(token: Mapping[str, Any]) -> CredentialRecord:
    """Map a token endpoint response onto the persisted record shape."""
    access_token = token.get("access_token")
    if not isinstance(access_token, str) or not access_token:
        raise ValueError("Token response did not include an access_token")

    scope = token.get("scope")
    if isinstance(scope, (list, tuple)):
        scope = " ".join(scope)

    expiry_date: int | None = None
    expires_at = token.get("expires_at")
    expires_in = token.get("expires_in")
    if isinstance(expires_at, (int, float)):
        expiry_date = int(expires_at * 1000)
    elif isinstance(expires_in, (int, float)):
        expiry_date = int((time.time() + expires_in) * 1000)

    return CredentialRecord(
        access_token=access_token,
        refresh_token=token.get("refresh_token"),
        scope=scope,
        token_type=token.get("token_type"),
        expiry_date=expiry_date,
    )


def exchange_code(flow: Flow, code: str) -> CredentialRecord:
    """Exchange an authorization code for a token pair at the token endpoint."""
    token = flow.fetch_token(code=code, timeout=TOKEN_REQUEST_TIMEOUT_SECONDS)
    return record_from_token(token)


class AuthFlowRunner:
    """Drives one authorization-code grant through a local callback listener.

    The listener binds an OS-chosen port on ``bind_host`` (IPv4 loopback by
    default) and the redirect URI names that same address, so the browser
    never has to resolve ``localhost``. Requests are answered until the first
    callback carrying our ``state`` together with a ``code`` (or an ``error``)
    arrives. Anything else, such as favicon fetches, is answered and ignored.
    The wait is bounded by ``timeout`` seconds.
    """

    def __init__(
        self,
        app_config: OAuthAppConfig,
        store: CredentialStore,
        timeout: float = DEFAULT_AUTH_TIMEOUT_SECONDS,
        open_browser: Callable[[str], Any] = webbrowser.open,
        bind_host: str = "127.0.0.1",
    ) -> None:
        self.app_config = app_config
        self.store = store
        self.timeout = timeout
        self.open_browser = open_browser
        self.bind_host = bind_host

        self.state = AuthFlowState.IDLE
        self.redirect_uri: str | None = None
        self._oauth_state = secrets.token_urlsafe(16)
        self._flow: Flow | None = None
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._record: CredentialRecord | None = None
        self._error: Exception | None = None

    def authorization_url(self, redirect_uri: str) -> str:
        """Start a grant against ``redirect_uri`` and return the consent URL."""
        self.redirect_uri = redirect_uri
        self._flow = build_flow(self.app_config, redirect_uri)
        url, _state = self._flow.authorization_url(
            access_type="offline",
            state=self._oauth_state,
        )
        return url

    def run(self) -> CredentialRecord:
        """Run the flow to completion.

        Raises:
            OAuthExchangeFailure: consent was denied or the code exchange failed.
            AuthFlowTimeout: no usable callback arrived within ``timeout``.
        """
        callback_server = HTTPServer((self.bind_host, 0), self._handler_class())
        port = callback_server.server_address[1]
        authorize_url = self.authorization_url(f"http://{self.bind_host}:{port}/")

        listener = threading.Thread(
            target=callback_server.serve_forever,
            kwargs={"poll_interval": 0.1},
            name="gtasks-auth-callback",
            daemon=True,
        )
        self.state = AuthFlowState.AWAITING_CALLBACK
        listener.start()
        try:
            print(f"\nOpen this URL in your browser:\n{authorize_url}\n", file=sys.stderr)
            try:
                self.open_browser(authorize_url)
            except Exception:  # noqa: BLE001 - the printed URL is the fallback
                _log.debug("browser_open_failed url=%s", authorize_url)
            print(f"Waiting for callback on port {port}...", file=sys.stderr)

            if not self._done.wait(self.timeout):
                with self._lock:
                    if not self._done.is_set():
                        self.state = AuthFlowState.FAILED
                        self._error = AuthFlowTimeout(
                            f"No authorization callback received within {self.timeout:g} seconds"
                        )
                        self._done.set()
        finally:
            callback_server.shutdown()
            callback_server.server_close()
            listener.join(timeout=5)

        if self._error is not None:
            raise self._error
        assert self._record is not None
        return self._record

    def handle_callback(self, path: str) -> tuple[int, str]:
        """Process one inbound request on the callback listener.

        Returns the HTTP status and plain-text body to send to the browser.
        """
        with self._lock:
            if self.state in _TERMINAL_STATES:
                return 200, FINISHED_MESSAGE

            params = parse_qs(urlparse(path).query)
            state_values = params.get("state")
            if not state_values:
                return 400, NO_CODE_MESSAGE
            if state_values[0] != self._oauth_state:
                _log.warning("auth_callback_state_mismatch")
                return 400, NO_CODE_MESSAGE

            error_values = params.get("error")
            if error_values:
                self.state = AuthFlowState.FAILED
                self._error = OAuthExchangeFailure(f"Authorization denied: {error_values[0]}")
                self._done.set()
                return 400, FAILURE_MESSAGE

            code_values = params.get("code")
            if not code_values or not code_values[0]:
                return 400, NO_CODE_MESSAGE

            self.state = AuthFlowState.EXCHANGING
            assert self._flow is not None
            try:
                record = exchange_code(self._flow, code_values[0])
                self.store.save(record)
            except Exception as e:
                _log.warning("auth_exchange_failed error=%s", e, extra={"error": str(e)})
                self.state = AuthFlowState.FAILED
                failure = OAuthExchangeFailure(f"Token exchange failed: {e}")
                failure.__cause__ = e
                self._error = failure
                self._done.set()
                return 500, FAILURE_MESSAGE

            self.state = AuthFlowState.PERSISTED
            self._record = record
            self._done.set()
            print("Credentials saved. You can now run the server.", file=sys.stderr)
            return 200, SUCCESS_MESSAGE

    def _handler_class(self) -> type[BaseHTTPRequestHandler]:
        runner = self

        class _CallbackHandler(BaseHTTPRequestHandler):
            def do_GET(self) -> None:  # noqa: N802
                status, body = runner.handle_callback(self.path)
                encoded = body.encode("utf-8")
                self.send_response(status)
                self.send_header("Content-Type", "text/plain; charset=utf-8")
                self.send_header("Content-Length", str(len(encoded)))
                self.end_headers()
                self.wfile.write(encoded)

            def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
                _log.debug("auth_callback " + format, *args)

        return _CallbackHandler
