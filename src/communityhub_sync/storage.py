"""Settings store backends.

The host application owns option storage; this module only defines the
interface the sync code needs (get/set of named blobs) plus two backends:

- MemorySettingsStore: in-process dict (tests, embedding)
- JsonFileSettingsStore: one JSON document on disk (command line tool)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Protocol

import msgspec

from .logging_config import get_logger

logger = get_logger("storage")


class SettingsStore(Protocol):
    """Named configuration blobs, e.g. a host's options table."""

    def get(self, name: str, default: Any = None) -> Any:
        """Get a named value, or default if it is not set."""
        ...

    def set(self, name: str, value: Any) -> None:
        """Set a named value."""
        ...


class MemorySettingsStore:
    """Settings store held in a dict."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        """Initialize the store, optionally with existing values."""
        self._options: dict[str, Any] = dict(initial or {})

    def get(self, name: str, default: Any = None) -> Any:
        """Get a named value, or default if it is not set."""
        return self._options.get(name, default)

    def set(self, name: str, value: Any) -> None:
        """Set a named value."""
        self._options[name] = value


class JsonFileSettingsStore:
    """Settings store persisted as a single JSON object.

    The file is re-read on every access so that edits made by another
    process (or by hand) are picked up.
    """

    def __init__(self, path: str | Path) -> None:
        """Initialize the store for a JSON file (created on first write)."""
        self.path = Path(path)

    def _load(self) -> dict[str, Any]:
        """Read the settings file; a missing file is an empty store."""
        if not self.path.exists():
            return {}
        data = msgspec.json.decode(self.path.read_bytes())
        if not isinstance(data, dict):
            raise ValueError(f"Settings file {self.path} must contain a JSON object")
        return data

    def _dump(self, data: dict[str, Any]) -> None:
        """Write the settings file, creating parent directories."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_bytes(msgspec.json.format(msgspec.json.encode(data)))

    def get(self, name: str, default: Any = None) -> Any:
        """Get a named value from the file, or default if it is not set."""
        return self._load().get(name, default)

    def set(self, name: str, value: Any) -> None:
        """Set a named value and rewrite the file."""
        data = self._load()
        data[name] = value
        self._dump(data)


def create_settings_store(path: str | None = None) -> SettingsStore:
    """Create a settings store.

    Uses a JSON file when a path is given (or COMMUNITYHUB_SETTINGS_FILE is
    set), otherwise an in-memory store.
    """
    path = path or os.getenv("COMMUNITYHUB_SETTINGS_FILE")
    if path:
        logger.debug("Using JSON file settings store: %s", path)
        return JsonFileSettingsStore(path)

    logger.debug("Using in-memory settings store")
    return MemorySettingsStore()
