"""Host user records and the user store interface."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol

import msgspec

REMOTE_ACCOUNT_ID_KEY = "remote_account_id"
SUBJECT_IDENTITY_KEY = "openid-connect-generic-subject-identity"


class User(msgspec.Struct, kw_only=True):
    """A host user: numeric id plus profile metadata."""

    id: int
    meta: dict[str, Any] = {}

    def get(self, key: str) -> str:
        """Get a metadata value as a string, or '' if unset or empty."""
        value = self.meta.get(key)
        return str(value) if value else ""

    @property
    def remote_account_id(self) -> str:
        """Cached remote Account id, or ''."""
        return self.get(REMOTE_ACCOUNT_ID_KEY)

    @property
    def subject_identity(self) -> str:
        """OpenID subject identity stored at login, or ''."""
        return self.get(SUBJECT_IDENTITY_KEY)

    def remote_user_id(self) -> str:
        """Last '/'-delimited segment of the OpenID subject identity."""
        return self.subject_identity.split("/")[-1]


class UserStore(Protocol):
    """Host user storage."""

    def get_user(self, user_id: int) -> User | None:
        """Get a user by id, or None if unknown."""
        ...

    def update_meta(self, user_id: int, key: str, value: Any) -> None:
        """Set one metadata value on a user.

        Raises:
            KeyError: If the user does not exist
        """
        ...


class MemoryUserStore:
    """User store held in a dict, keyed by user id."""

    def __init__(self, users: list[User] | None = None) -> None:
        """Initialize the store with optional users."""
        self._users: dict[int, User] = {user.id: user for user in users or []}

    def add(self, user: User) -> None:
        """Add or replace a user."""
        self._users[user.id] = user

    def get_user(self, user_id: int) -> User | None:
        """Get a user by id, or None if unknown."""
        return self._users.get(user_id)

    def update_meta(self, user_id: int, key: str, value: Any) -> None:
        """Set one metadata value on a stored user."""
        user = self._users.get(user_id)
        if user is None:
            raise KeyError(f"Unknown user id {user_id}")
        user.meta[key] = value


class JsonFileUserStore:
    """User store persisted as ``{"<id>": {<meta>}}`` in a JSON file."""

    def __init__(self, path: str | Path) -> None:
        """Initialize the store for a JSON users file."""
        self.path = Path(path)

    def _load(self) -> dict[str, dict[str, Any]]:
        """Read the users file; a missing file holds no users."""
        if not self.path.exists():
            return {}
        return msgspec.json.decode(
            self.path.read_bytes(), type=dict[str, dict[str, Any]]
        )

    def get_user(self, user_id: int) -> User | None:
        """Get a user by id from the file, or None if unknown."""
        meta = self._load().get(str(user_id))
        if meta is None:
            return None
        return User(id=user_id, meta=meta)

    def update_meta(self, user_id: int, key: str, value: Any) -> None:
        """Set one metadata value and rewrite the file.

        Raises:
            KeyError: If the user is not in the file
        """
        data = self._load()
        if str(user_id) not in data:
            raise KeyError(f"Unknown user id {user_id}")
        data[str(user_id)][key] = value
        self.path.write_bytes(msgspec.json.format(msgspec.json.encode(data)))
