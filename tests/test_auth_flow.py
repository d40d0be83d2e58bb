"""Tests for the interactive OAuth authorization-code flow."""

import threading
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs, urlparse

import pytest
import requests
from google_auth_oauthlib.flow import Flow

from gtasks_mcp.auth import (
    FAILURE_MESSAGE,
    NO_CODE_MESSAGE,
    SUCCESS_MESSAGE,
    AuthFlowRunner,
    AuthFlowState,
    record_from_token,
)
from gtasks_mcp.credentials import CredentialStore, OAuthAppConfig
from gtasks_mcp.errors import AuthFlowTimeout, OAuthExchangeFailure

_APP_CONFIG = OAuthAppConfig(
    client_id="client-id",
    client_secret="client-secret",
    token_uri="https://oauth.example.test/token",
)

_TASKS_SCOPE = "https://www.googleapis.com/auth/tasks"


class _Browser:
    """Simulated browser: follows the authorization URL back to the listener."""

    def __init__(self, callbacks: list[dict[str, str] | None]) -> None:
        self.callbacks = callbacks
        self.responses: list[tuple[int, str]] = []
        self.opened_url: str | None = None
        self._thread: threading.Thread | None = None

    def __call__(self, url: str) -> bool:
        self.opened_url = url
        query = parse_qs(urlparse(url).query)
        redirect_uri = query["redirect_uri"][0]
        state = query["state"][0]

        def visit() -> None:
            with requests.Session() as session:
                # Loopback only; ignore any proxy settings from the environment.
                session.trust_env = False
                for params in self.callbacks:
                    callback_params = {"state": state, **params} if params is not None else None
                    response = session.get(redirect_uri, params=callback_params, timeout=5)
                    self.responses.append((response.status_code, response.text))

        self._thread = threading.Thread(target=visit, daemon=True)
        self._thread.start()
        return True

    def join(self) -> None:
        if self._thread is not None:
            self._thread.join(timeout=5)


def _patch_token_endpoint(
    monkeypatch: pytest.MonkeyPatch,
    seen: list[dict[str, Any]],
    token: dict[str, Any] | None = None,
    error: Exception | None = None,
) -> None:
    def fake_fetch_token(self: Flow, **kwargs: Any) -> dict[str, Any]:
        seen.append({"redirect_uri": self.redirect_uri, **kwargs})
        if error is not None:
            raise error
        assert token is not None
        return token

    monkeypatch.setattr(Flow, "fetch_token", fake_fetch_token)


class TestAuthorizationUrl:
    def test_requests_offline_access_for_tasks_scope(self, tmp_path: Path) -> None:
        runner = AuthFlowRunner(_APP_CONFIG, CredentialStore(tmp_path / "creds.json"))

        url = runner.authorization_url("http://127.0.0.1:8765/")
        query = parse_qs(urlparse(url).query)

        assert url.startswith(_APP_CONFIG.auth_uri)
        assert query["access_type"] == ["offline"]
        assert query["scope"] == [_TASKS_SCOPE]
        assert query["redirect_uri"] == ["http://127.0.0.1:8765/"]
        assert query["response_type"] == ["code"]
        assert query["client_id"] == ["client-id"]
        assert len(query["state"][0]) >= 16


class TestRecordFromToken:
    def test_maps_scope_list_and_absolute_expiry(self) -> None:
        record = record_from_token(
            {
                "access_token": "ya29.access",
                "refresh_token": "1//refresh",
                "scope": [_TASKS_SCOPE],
                "token_type": "Bearer",
                "expires_in": 3599,
                "expires_at": 1_767_225_600.5,
            }
        )

        assert record.scope == _TASKS_SCOPE
        assert record.expiry_date == 1_767_225_600_500
        assert record.refresh_token == "1//refresh"

    def test_missing_access_token_is_rejected(self) -> None:
        with pytest.raises(ValueError, match="access_token"):
            record_from_token({"token_type": "Bearer"})


class TestAuthFlowRunner:
    def test_successful_grant_persists_tokens(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        seen: list[dict[str, Any]] = []
        _patch_token_endpoint(
            monkeypatch,
            seen,
            token={
                "access_token": "ya29.access",
                "refresh_token": "1//refresh",
                "scope": [_TASKS_SCOPE],
                "token_type": "Bearer",
                "expires_in": 3599,
                "expires_at": 1_767_225_600.0,
            },
        )
        store = CredentialStore(tmp_path / "creds.json")
        browser = _Browser([{"code": "auth-code"}])
        runner = AuthFlowRunner(_APP_CONFIG, store, timeout=10, open_browser=browser)

        record = runner.run()
        browser.join()

        assert runner.state is AuthFlowState.PERSISTED
        assert record.access_token == "ya29.access"
        assert record.scope == _TASKS_SCOPE
        assert record.expiry_date == 1_767_225_600_000
        assert store.load() == record
        assert browser.responses == [(200, SUCCESS_MESSAGE)]
        assert seen[0]["code"] == "auth-code"
        assert seen[0]["redirect_uri"] == runner.redirect_uri

    def test_redirect_uri_names_the_bound_address(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _patch_token_endpoint(monkeypatch, [], token={"access_token": "ya29.access"})
        browser = _Browser([{"code": "auth-code"}])
        runner = AuthFlowRunner(
            _APP_CONFIG, CredentialStore(tmp_path / "creds.json"), timeout=10, open_browser=browser
        )

        runner.run()
        browser.join()

        assert runner.redirect_uri is not None
        assert runner.redirect_uri.startswith("http://127.0.0.1:")
        assert "localhost" not in (browser.opened_url or "")

    def test_callback_without_code_keeps_waiting(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _patch_token_endpoint(monkeypatch, [], token={"access_token": "ya29.access"})
        store = CredentialStore(tmp_path / "creds.json")
        browser = _Browser([None, {"code": "auth-code"}])
        runner = AuthFlowRunner(_APP_CONFIG, store, timeout=10, open_browser=browser)

        runner.run()
        browser.join()

        assert browser.responses == [(400, NO_CODE_MESSAGE), (200, SUCCESS_MESSAGE)]
        assert store.exists()

    def test_exchange_failure_fails_flow(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _patch_token_endpoint(monkeypatch, [], error=ValueError("invalid_grant"))
        store = CredentialStore(tmp_path / "creds.json")
        browser = _Browser([{"code": "stale"}])
        runner = AuthFlowRunner(_APP_CONFIG, store, timeout=10, open_browser=browser)

        with pytest.raises(OAuthExchangeFailure) as excinfo:
            runner.run()
        browser.join()

        assert isinstance(excinfo.value.__cause__, ValueError)
        assert runner.state is AuthFlowState.FAILED
        assert browser.responses == [(500, FAILURE_MESSAGE)]
        assert not store.exists()

    def test_denied_consent_fails_flow(self, tmp_path: Path) -> None:
        store = CredentialStore(tmp_path / "creds.json")
        browser = _Browser([{"error": "access_denied"}])
        runner = AuthFlowRunner(_APP_CONFIG, store, timeout=10, open_browser=browser)

        with pytest.raises(OAuthExchangeFailure):
            runner.run()
        browser.join()

        assert not store.exists()

    def test_times_out_without_callback(self, tmp_path: Path) -> None:
        store = CredentialStore(tmp_path / "creds.json")
        runner = AuthFlowRunner(_APP_CONFIG, store, timeout=0.2, open_browser=lambda _url: False)

        with pytest.raises(AuthFlowTimeout):
            runner.run()

        assert runner.state is AuthFlowState.FAILED
        assert not store.exists()

    def test_browser_failure_is_ignored(self, tmp_path: Path) -> None:
        def broken_browser(_url: str) -> bool:
            raise OSError("no display")

        runner = AuthFlowRunner(
            _APP_CONFIG,
            CredentialStore(tmp_path / "creds.json"),
            timeout=0.2,
            open_browser=broken_browser,
        )

        with pytest.raises(AuthFlowTimeout):
            runner.run()


class TestHandleCallback:
    def _awaiting_runner(self, tmp_path: Path) -> AuthFlowRunner:
        runner = AuthFlowRunner(_APP_CONFIG, CredentialStore(tmp_path / "creds.json"))
        runner.authorization_url("http://127.0.0.1:1/")
        runner.state = AuthFlowState.AWAITING_CALLBACK
        return runner

    def test_mismatched_state_is_ignored(self, tmp_path: Path) -> None:
        runner = self._awaiting_runner(tmp_path)

        status, body = runner.handle_callback("/?code=abc&state=forged")

        assert (status, body) == (400, NO_CODE_MESSAGE)
        assert runner.state is AuthFlowState.AWAITING_CALLBACK

    def test_code_without_state_is_not_exchanged(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        seen: list[dict[str, Any]] = []
        _patch_token_endpoint(monkeypatch, seen, token={"access_token": "ya29.access"})
        runner = self._awaiting_runner(tmp_path)

        status, body = runner.handle_callback("/?code=abc")

        assert (status, body) == (400, NO_CODE_MESSAGE)
        assert runner.state is AuthFlowState.AWAITING_CALLBACK
        assert seen == []
        assert not runner.store.exists()

    def test_callbacks_after_completion_are_ignored(self, tmp_path: Path) -> None:
        runner = AuthFlowRunner(_APP_CONFIG, CredentialStore(tmp_path / "creds.json"))
        runner.state = AuthFlowState.PERSISTED

        status, _body = runner.handle_callback("/?code=again")

        assert status == 200
        assert runner.state is AuthFlowState.PERSISTED
