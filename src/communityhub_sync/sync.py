"""Copy Community Hub Account fields into host user profiles.

Flow for one user:
    1. resolve_account_id: cached remote_account_id, or query the API with
       the id taken from the user's OpenID subject identity
    2. get_account: fetch the Account record
    3. apply_mapping: write mapped, non-empty Account fields to user metadata

Every failure degrades to "sync skipped"; nothing is raised to the host.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol

from .client import CommunityHubClient
from .config import Settings
from .errors import CommunityHubSyncError
from .logging_config import get_logger
from .mapping import FieldMapping
from .storage import SettingsStore
from .users import REMOTE_ACCOUNT_ID_KEY, User, UserStore

logger = get_logger("sync")

USER_CREATE_HOOK = "openid-connect-generic-user-create"
USER_LINK_HOOK = "openid-connect-generic-user-update"
USER_UPDATE_HOOK = "openid-connect-generic-update-user-using-current-claim"


class HookDispatcher(Protocol):
    """Host event registry, e.g. an ``add_action`` wrapper."""

    def add_action(self, hook_name: str, callback: Callable[..., Any]) -> None:
        """Call callback whenever hook_name fires."""
        ...


class AccountSync:
    """Sync service for one host.

    Args:
        client: Authenticated Community Hub client
        users: Host user store
        store: Settings store holding the field mapping table
    """

    def __init__(
        self,
        client: CommunityHubClient,
        users: UserStore,
        store: SettingsStore,
    ) -> None:
        """Initialize the sync service."""
        self.client = client
        self.users = users
        self.store = store

    def _load_user(self, user: User | int) -> User | None:
        """Return the user as given, or look it up by id."""
        if isinstance(user, User):
            return user
        return self.users.get_user(int(user))

    def resolve_account_id(self, user: User) -> str | None:
        """Return the user's remote Account id, caching it on the user.

        Returns:
            The Account id, or None if it cannot be determined
        """
        cached = user.remote_account_id
        if cached:
            return cached

        remote_user_id = user.remote_user_id()
        if not remote_user_id:
            logger.debug("User %d has no subject identity, skipping lookup", user.id)
            return None

        account_id = self.client.query_account_id(remote_user_id)
        if not account_id:
            return None

        user.meta[REMOTE_ACCOUNT_ID_KEY] = account_id
        self.users.update_meta(user.id, REMOTE_ACCOUNT_ID_KEY, account_id)
        logger.info("Linked user %d to account %s", user.id, account_id)
        return account_id

    def apply_mapping(self, user: User, account: dict[str, Any]) -> bool:
        """Write mapped Account fields into the user's metadata.

        Remote fields that are missing or empty leave the local field as is.
        """
        mapping = FieldMapping(self.store)
        updated = 0
        for local_key in mapping.keys():
            remote_key = mapping.remote_key(local_key)
            if not remote_key:
                continue
            remote_value = account.get(remote_key)
            if not remote_value:
                continue
            user.meta[local_key] = remote_value
            self.users.update_meta(user.id, local_key, remote_value)
            updated += 1

        logger.info(
            "Applied field mapping for user %d: %d of %d fields updated",
            user.id,
            updated,
            len(mapping),
        )
        return True

    def sync_user_data(self, user: User | int) -> bool:
        """Sync one user (object or id) from their Community Hub Account.

        Returns:
            True if the account was fetched and the mapping applied
        """
        loaded = self._load_user(user)
        if loaded is None:
            logger.warning("Cannot sync: user %s not found", user)
            return False

        account_id = self.resolve_account_id(loaded)
        if not account_id:
            logger.info("Cannot sync user %d: no account id", loaded.id)
            return False

        account = self.client.get_account(account_id)
        if account is None:
            logger.info(
                "Cannot sync user %d: account %s not fetched", loaded.id, account_id
            )
            return False

        return self.apply_mapping(loaded, account)

    def _handle(self, user: User | int) -> None:
        """Run a sync for a hook callback, logging instead of raising."""
        try:
            self.sync_user_data(user)
        except (CommunityHubSyncError, KeyError) as e:
            logger.error("Sync for user %s aborted: %s", user, e)

    def on_user_create(self, user: User, user_claim: Any = None) -> None:
        """Hook callback: a new user was created from an OpenID login."""
        self._handle(user)

    def on_existing_user_link(self, user_id: int) -> None:
        """Hook callback: an existing user was linked to a remote account."""
        self._handle(user_id)

    def on_user_update(self, user: User, user_claim: Any = None) -> None:
        """Hook callback: a user logged in and was updated from the current claim."""
        self._handle(user)


def register_hooks(
    dispatcher: HookDispatcher,
    sync: AccountSync,
    settings: Settings,
) -> bool:
    """Register the sync callbacks with the host, if sync is enabled.

    Returns:
        True if the callbacks were registered
    """
    if not settings.sync_enabled:
        logger.debug("Community Hub sync disabled, no hooks registered")
        return False

    dispatcher.add_action(USER_CREATE_HOOK, sync.on_user_create)
    dispatcher.add_action(USER_LINK_HOOK, sync.on_existing_user_link)
    dispatcher.add_action(USER_UPDATE_HOOK, sync.on_user_update)
    logger.info("Registered Community Hub sync hooks")
    return True
