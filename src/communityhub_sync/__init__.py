"""Community Hub (Salesforce) Account sync for OpenID Connect users.

When a host user is created, linked, or logs in through OpenID Connect, the
sync resolves the user's Community Hub Account and copies mapped Account
fields into the user's profile metadata.

Components:
    - TokenManager: OAuth2 password-grant token exchange with a cached token
    - CommunityHubClient: authenticated API lookups, one retry on INVALID_SESSION_ID
    - AccountSync: account resolution, field mapping and host hook callbacks
    - FieldMapping / MappingEditor: the mapping table and its admin form
    - SettingsStore / UserStore: interfaces to the host's storage
"""

from .admin import MappingEditor
from .client import CommunityHubClient
from .config import Settings
from .credentials import CredentialCache
from .errors import (
    AuthenticationError,
    CommunityHubSyncError,
    ConfigurationError,
    RequestBuildError,
)
from .helpers import create_account_sync, create_client, load_settings
from .mapping import FieldMapping
from .storage import (
    JsonFileSettingsStore,
    MemorySettingsStore,
    SettingsStore,
    create_settings_store,
)
from .sync import AccountSync, register_hooks
from .token_manager import TokenManager
from .users import JsonFileUserStore, MemoryUserStore, User, UserStore

__all__ = [
    # Sync
    "AccountSync",
    "register_hooks",
    "create_account_sync",
    # API access
    "CommunityHubClient",
    "TokenManager",
    "CredentialCache",
    "create_client",
    # Configuration
    "Settings",
    "load_settings",
    # Field mapping
    "FieldMapping",
    "MappingEditor",
    # Storage
    "SettingsStore",
    "MemorySettingsStore",
    "JsonFileSettingsStore",
    "create_settings_store",
    "User",
    "UserStore",
    "MemoryUserStore",
    "JsonFileUserStore",
    # Errors
    "CommunityHubSyncError",
    "ConfigurationError",
    "AuthenticationError",
    "RequestBuildError",
]
