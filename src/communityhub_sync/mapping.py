"""Field mapping table: local profile field -> remote Account field."""

from __future__ import annotations

from typing import Any, Iterator

from .config import FIELD_MAPPING_OPTION
from .storage import SettingsStore

REMOTE_KEY = "remote"


class FieldMapping:
    """Ordered mapping stored as ``{local_key: {"remote": remote_key}}``.

    Loaded from the settings store on construction; call save() to persist
    changes.
    """

    def __init__(
        self,
        store: SettingsStore,
        option_name: str = FIELD_MAPPING_OPTION,
    ) -> None:
        """Load the table from the settings store."""
        self._store = store
        self.option_name = option_name
        stored = store.get(option_name) or {}
        self._mapping: dict[str, dict[str, Any]] = {
            str(key): dict(value)
            for key, value in (stored.items() if isinstance(stored, dict) else ())
            if isinstance(value, dict)
        }

    def get(self, key: str) -> dict[str, Any] | None:
        """Get the mapping entry for a local key, or None."""
        return self._mapping.get(key)

    def set(self, key: str, value: dict[str, Any]) -> None:
        """Set the entry for a local key, e.g. ``{"remote": "FirstName"}``."""
        self._mapping[key] = value

    def has(self, key: str) -> bool:
        """Check whether a local key is mapped."""
        return key in self._mapping

    def remove(self, key: str) -> None:
        """Remove a local key; unknown keys are ignored."""
        self._mapping.pop(key, None)

    def remote_key(self, key: str) -> str:
        """Return the remote field mapped to a local key, or ''."""
        value = self._mapping.get(key) or {}
        return value.get(REMOTE_KEY) or ""

    def keys(self) -> list[str]:
        """Local keys in insertion order."""
        return list(self._mapping)

    def items(self) -> Iterator[tuple[str, dict[str, Any]]]:
        """Iterate over a snapshot of (local key, entry) pairs."""
        return iter(list(self._mapping.items()))

    def replace(self, mapping: dict[str, dict[str, Any]]) -> None:
        """Replace the whole table (not saved until save() is called)."""
        self._mapping = dict(mapping)

    def as_dict(self) -> dict[str, dict[str, Any]]:
        """Return a copy of the table in its stored form."""
        return {key: dict(value) for key, value in self._mapping.items()}

    def save(self) -> None:
        """Persist the table to the settings store."""
        self._store.set(self.option_name, self.as_dict())

    def __len__(self) -> int:
        """Number of mapped local keys."""
        return len(self._mapping)
