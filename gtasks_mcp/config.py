"""Environment-driven settings for the Google Tasks MCP gateway."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from gtasks_mcp.constants import (
    CREDENTIALS_FILENAME,
    DEFAULT_AUTH_TIMEOUT_SECONDS,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    OAUTH_KEYS_FILENAME,
)

load_dotenv()

_ROOT_MARKER = "pyproject.toml"


def find_install_root(start: Path | None = None) -> Path:
    """Nearest directory at or above ``start`` that holds pyproject.toml.

    Credential files live there by default. When the package is installed
    without its source tree, the directory above the package is used.
    """
    package_dir = Path(__file__).resolve().parent
    origin = (start or package_dir).resolve()
    for candidate in (origin, *origin.parents):
        if (candidate / _ROOT_MARKER).is_file():
            return candidate
    return package_dir.parent


@dataclass(frozen=True)
class GatewaySettings:
    credentials_path: Path
    oauth_keys_path: Path
    page_size: int = DEFAULT_PAGE_SIZE
    auth_timeout: float = DEFAULT_AUTH_TIMEOUT_SECONDS
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, root: Path | None = None) -> "GatewaySettings":
        """Build settings from ``GTASKS_*`` environment variables.

        Raises:
            ValueError: if a numeric setting is not a number or out of range.
        """
        base = root or find_install_root()
        credentials_path = os.getenv("GTASKS_CREDENTIALS_PATH")
        oauth_keys_path = os.getenv("GTASKS_OAUTH_KEYS_PATH")

        page_size = int(os.getenv("GTASKS_PAGE_SIZE", str(DEFAULT_PAGE_SIZE)))
        if not 1 <= page_size <= MAX_PAGE_SIZE:
            raise ValueError(f"GTASKS_PAGE_SIZE must be between 1 and {MAX_PAGE_SIZE}")

        auth_timeout = float(os.getenv("GTASKS_AUTH_TIMEOUT", str(DEFAULT_AUTH_TIMEOUT_SECONDS)))
        if auth_timeout <= 0:
            raise ValueError("GTASKS_AUTH_TIMEOUT must be positive")

        return cls(
            credentials_path=(
                Path(credentials_path).expanduser()
                if credentials_path
                else base / CREDENTIALS_FILENAME
            ),
            oauth_keys_path=(
                Path(oauth_keys_path).expanduser()
                if oauth_keys_path
                else base / OAUTH_KEYS_FILENAME
            ),
            page_size=page_size,
            auth_timeout=auth_timeout,
            log_level=os.getenv("GTASKS_LOG_LEVEL", "WARNING").upper(),
        )
