"""Persisted OAuth token record and OAuth client configuration."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from gtasks_mcp.constants import GOOGLE_AUTH_URI, GOOGLE_TOKEN_URI
from gtasks_mcp.errors import MalformedCredentials, MissingCredentials, OAuthConfigError

_log = logging.getLogger("gtasks_mcp.credentials")


@dataclass(frozen=True)
class CredentialRecord:
    """OAuth token pair as written by the auth flow.

    ``expiry_date`` is an absolute expiry in epoch milliseconds.
    """

    access_token: str
    refresh_token: str | None = None
    scope: str | None = None
    token_type: str | None = None
    expiry_date: int | None = None

    @classmethod
    def from_dict(cls, payload: object) -> CredentialRecord:
        if not isinstance(payload, dict):
            raise MalformedCredentials("Credential record must be a JSON object")

        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise MalformedCredentials("Credential record has no access_token")

        for key in ("refresh_token", "scope", "token_type"):
            value = payload.get(key)
            if value is not None and not isinstance(value, str):
                raise MalformedCredentials(f"Credential field '{key}' must be a string")

        expiry_date = payload.get("expiry_date")
        if expiry_date is not None and (
            isinstance(expiry_date, bool) or not isinstance(expiry_date, (int, float))
        ):
            raise MalformedCredentials("Credential field 'expiry_date' must be a number")

        return cls(
            access_token=access_token,
            refresh_token=payload.get("refresh_token"),
            scope=payload.get("scope"),
            token_type=payload.get("token_type"),
            expiry_date=int(expiry_date) if expiry_date is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @property
    def scopes(self) -> list[str]:
        return self.scope.split() if self.scope else []


class CredentialStore:
    """Reads and writes the single persisted credential record."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> CredentialRecord:
        """Load the record.

        Raises:
            MissingCredentials: the file does not exist.
            MalformedCredentials: the file is not the expected JSON shape.
        """
        if not self.exists():
            raise MissingCredentials(
                f"Credentials not found at {self.path}. Please run with 'auth' argument first."
            )
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise MalformedCredentials(f"Cannot parse {self.path}: {e}") from e
        return CredentialRecord.from_dict(payload)

    def save(self, record: CredentialRecord) -> None:
        """Replace the record on disk with ``record``."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".gtasks-", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(record.to_dict(), f)
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        _log.info("credentials_saved path=%s", self.path, extra={"path": str(self.path)})


@dataclass(frozen=True)
class OAuthAppConfig:
    client_id: str
    client_secret: str
    redirect_uris: list[str] = field(default_factory=list)
    auth_uri: str = GOOGLE_AUTH_URI
    token_uri: str = GOOGLE_TOKEN_URI

    def client_config(self) -> dict[str, Any]:
        """Return the ``installed`` client secrets shape google-auth-oauthlib reads."""
        return {
            "installed": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uris": list(self.redirect_uris),
                "auth_uri": self.auth_uri,
                "token_uri": self.token_uri,
            }
        }


def load_oauth_app_config(path: Path) -> OAuthAppConfig:
    """Read the client secrets file downloaded from the Google Cloud console."""
    if not path.is_file():
        raise OAuthConfigError(f"OAuth client secrets file not found: {path}")
    try:
        keys = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise OAuthConfigError(f"Cannot parse {path}: {e}") from e

    section = None
    if isinstance(keys, dict):
        section = keys.get("installed") or keys.get("web")
    if not isinstance(section, dict):
        raise OAuthConfigError(f"{path} has neither an 'installed' nor a 'web' section")

    client_id = section.get("client_id")
    client_secret = section.get("client_secret")
    if not isinstance(client_id, str) or not isinstance(client_secret, str):
        raise OAuthConfigError(f"{path} is missing client_id or client_secret")

    redirect_uris = section.get("redirect_uris") or []
    return OAuthAppConfig(
        client_id=client_id,
        client_secret=client_secret,
        redirect_uris=[uri for uri in redirect_uris if isinstance(uri, str)],
        auth_uri=section.get("auth_uri") or GOOGLE_AUTH_URI,
        token_uri=section.get("token_uri") or GOOGLE_TOKEN_URI,
    )
