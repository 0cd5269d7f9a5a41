"""Configuration management for dropboxer.

Settings come from environment variables, optionally loaded from a ``.env``
file in the working directory.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from dropboxer.exceptions import ConfigError

DEFAULT_API_URL = "https://api.dropboxapi.com/2/files"
DEFAULT_CONTENT_URL = "https://content.dropboxapi.com/2/files"
DEFAULT_TIMEOUT = 10.0

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _get_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def _get_int(name: str, default: int | None) -> int | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {value}")
    return value


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


@dataclass
class Settings:
    """Runtime settings shared by the client, the tree uploader and the CLI.

    Attributes:
        token: Bearer token for the remote API
        api_url: Base URL of the RPC endpoints
        content_url: Base URL of the content (upload) endpoints
        base_folder: Display prefix used in log lines (e.g. the app folder)
        timeout: Per-request timeout in seconds
        verify_tls: Verify TLS certificates of the remote
        max_workers: Cap on concurrent uploads per directory, None for one
            worker per file
        search_pages: Search pages the existence check reads, 0 for all
    """

    token: str | None = None
    api_url: str = DEFAULT_API_URL
    content_url: str = DEFAULT_CONTENT_URL
    base_folder: str = ""
    timeout: float = DEFAULT_TIMEOUT
    verify_tls: bool = True
    max_workers: int | None = None
    search_pages: int = 1

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables (and a .env file)."""
        load_dotenv()

        max_workers = _get_int("DROPBOXER_MAX_WORKERS", None)
        if max_workers == 0:
            max_workers = None

        return cls(
            token=os.getenv("DROPBOXER_TOKEN") or None,
            api_url=os.getenv("DROPBOXER_API_URL", DEFAULT_API_URL).rstrip("/"),
            content_url=os.getenv("DROPBOXER_CONTENT_URL", DEFAULT_CONTENT_URL).rstrip("/"),
            base_folder=os.getenv("DROPBOXER_BASE_FOLDER", ""),
            timeout=_get_float("DROPBOXER_TIMEOUT", DEFAULT_TIMEOUT),
            verify_tls=_get_bool("DROPBOXER_VERIFY_TLS", True),
            max_workers=max_workers,
            search_pages=_get_int("DROPBOXER_SEARCH_PAGES", 1),  # type: ignore[arg-type]
        )

    def validate(self) -> None:
        """Fail fast if required settings are missing."""
        if not self.token:
            raise ConfigError("Missing required setting: DROPBOXER_TOKEN")
