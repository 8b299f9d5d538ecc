"""Settings for Community Hub sync."""

from __future__ import annotations

import os
from typing import Any

import msgspec

from .errors import ConfigurationError
from .logging_config import get_logger
from .storage import SettingsStore

logger = get_logger("config")

SETTINGS_OPTION = "communityhub_sync_settings"
ACCESS_TOKEN_OPTION = "communityhub_sync_access_token"
INSTANCE_URL_OPTION = "communityhub_sync_instance_url"
FIELD_MAPPING_OPTION = "communityhub_sync_field_mapping"

DEFAULT_API_VERSION = "46.0"


class ApiCredentials(msgspec.Struct, kw_only=True, frozen=True):
    """Password-grant credentials, only built when all five are present."""

    login_url: str
    client_id: str
    client_secret: str
    username: str
    password: str


class Settings(msgspec.Struct, kw_only=True):
    """Sync configuration, edited through the host's admin settings."""

    sync_enabled: bool = False
    login_url: str = ""
    client_id: str = ""
    client_secret: str = ""
    username: str = ""
    password: str = ""
    api_version: str = DEFAULT_API_VERSION
    # HTTP client timeout in seconds
    timeout: float = 30.0

    def __post_init__(self) -> None:
        """Strip whitespace picked up from .env files or pasted admin values."""
        self.login_url = self.login_url.strip()
        self.client_id = self.client_id.strip()
        self.client_secret = self.client_secret.strip()
        self.username = self.username.strip()
        self.password = self.password.strip()
        self.api_version = self.api_version.strip() or DEFAULT_API_VERSION

    def credentials(self) -> ApiCredentials | None:
        """Return the API credentials if they are all present, else None."""
        if not (
            self.login_url
            and self.client_id
            and self.client_secret
            and self.username
            and self.password
        ):
            return None
        return ApiCredentials(
            login_url=self.login_url,
            client_id=self.client_id,
            client_secret=self.client_secret,
            username=self.username,
            password=self.password,
        )

    @classmethod
    def load(cls, store: SettingsStore) -> "Settings":
        """Load settings from the store's settings blob.

        Raises:
            ConfigurationError: If the stored blob has the wrong shape
        """
        blob: Any = store.get(SETTINGS_OPTION) or {}
        try:
            return msgspec.convert(blob, type=cls, strict=False)
        except msgspec.ValidationError as e:
            raise ConfigurationError(f"Invalid {SETTINGS_OPTION}: {e}") from e

    def save(self, store: SettingsStore) -> None:
        """Write the settings to the store as a plain blob."""
        store.set(SETTINGS_OPTION, msgspec.to_builtins(self))

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from COMMUNITYHUB_* environment variables.

        String values are stripped, so a trailing newline in a .env file does
        not end up in the login URL or credentials.
        """
        enabled = os.getenv("COMMUNITYHUB_SYNC_ENABLED", "").strip().lower()
        settings = cls(
            sync_enabled=enabled in ("1", "true", "yes", "on"),
            login_url=os.getenv("COMMUNITYHUB_LOGIN_URL", ""),
            client_id=os.getenv("COMMUNITYHUB_CLIENT_ID", ""),
            client_secret=os.getenv("COMMUNITYHUB_CLIENT_SECRET", ""),
            username=os.getenv("COMMUNITYHUB_USERNAME", ""),
            password=os.getenv("COMMUNITYHUB_PASSWORD", ""),
            api_version=os.getenv("COMMUNITYHUB_API_VERSION", DEFAULT_API_VERSION),
            timeout=float(os.getenv("COMMUNITYHUB_TIMEOUT") or "30"),
        )
        logger.debug(
            "Loaded settings from environment: login_url=%s, sync_enabled=%s",
            settings.login_url,
            settings.sync_enabled,
        )
        return settings


def mask_secret(value: str | None) -> str:
    """Mask sensitive values for display."""
    if not value:
        return "(not set)"
    if len(value) <= 8:
        return "****"
    return value[:4] + "****" + value[-4:]
