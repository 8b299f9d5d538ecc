"""Wiring helpers for Community Hub sync.

These build the object graph a host needs from its two stores, so that a
host integration is a few lines:

    from communityhub_sync.helpers import create_account_sync
    from communityhub_sync.sync import register_hooks

    sync = create_account_sync(options, users)
    register_hooks(host_hooks, sync, load_settings(options))
"""

from __future__ import annotations

import httpx

from .client import CommunityHubClient
from .config import SETTINGS_OPTION, Settings
from .credentials import CredentialCache
from .logging_config import get_logger
from .storage import SettingsStore
from .sync import AccountSync
from .users import UserStore

logger = get_logger("helpers")


def load_settings(store: SettingsStore) -> Settings:
    """Load settings from the store, falling back to the environment.

    The environment is only consulted when the store holds no settings blob.
    """
    if store.get(SETTINGS_OPTION) is None:
        logger.debug("No stored settings, using environment settings")
        return Settings.from_env()
    return Settings.load(store)


def create_client(
    store: SettingsStore,
    http_client: httpx.Client | None = None,
) -> CommunityHubClient:
    """Create an API client whose credential cache lives in ``store``."""
    settings = load_settings(store)
    return CommunityHubClient(settings, CredentialCache(store), http_client)


def create_account_sync(
    store: SettingsStore,
    users: UserStore,
    http_client: httpx.Client | None = None,
) -> AccountSync:
    """Create a ready-to-use AccountSync for a host."""
    return AccountSync(create_client(store, http_client), users, store)
