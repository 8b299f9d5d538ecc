"""Cached credential state (access token and instance URL).

The cache lives in the settings store so that it survives between host
requests. It has no expiry: a stale token is only discovered when the API
answers with INVALID_SESSION_ID.
"""

from __future__ import annotations

from .config import ACCESS_TOKEN_OPTION, INSTANCE_URL_OPTION
from .storage import SettingsStore


class CredentialCache:
    """Access token and instance URL backed by a settings store."""

    def __init__(self, store: SettingsStore) -> None:
        """Initialize the cache on top of a settings store."""
        self._store = store

    @property
    def access_token(self) -> str:
        """Cached access token, or '' if none."""
        return self._store.get(ACCESS_TOKEN_OPTION) or ""

    @property
    def instance_url(self) -> str:
        """Cached instance URL, or '' if none."""
        return self._store.get(INSTANCE_URL_OPTION) or ""

    def store_access_token(self, token: str) -> None:
        """Cache a newly issued access token."""
        self._store.set(ACCESS_TOKEN_OPTION, token)

    def store_instance_url(self, url: str) -> None:
        """Cache the instance URL returned by a token exchange."""
        self._store.set(INSTANCE_URL_OPTION, url)

    def invalidate(self) -> None:
        """Drop the cached token so the next lookup performs an exchange."""
        self._store.set(ACCESS_TOKEN_OPTION, "")
