"""Key-value store backing the ``get`` and ``set`` builtins.

Also holds runtime settings such as the ``leader`` override read by the bot.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from threading import Lock
from typing import TYPE_CHECKING, Dict, Optional, Protocol, Union

if TYPE_CHECKING:
    from pipebot.lib.config_parser import StoreConfig

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when a store lookup or update fails."""
    pass


class KeyValueStore(Protocol):
    """Protocol for key-value stores."""

    def get(self, key: str) -> str:
        """Return the value for ``key``.

        Raises:
            StoreError: If the key is missing or the store fails
        """
        ...

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``.

        Raises:
            StoreError: If the store fails
        """
        ...


class MemoryStore:
    """Process-local store, lost on exit."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = Lock()

    def get(self, key: str) -> str:
        with self._lock:
            if key not in self._data:
                raise StoreError(f"no such key: {key}")
            return self._data[key]

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value


class JsonFileStore:
    """Store persisted as a single JSON object on disk."""

    def __init__(self, path: Union[str, Path]):
        """Initialize store.

        Args:
            path: JSON file to load from and save to
        """
        self.path = Path(path)
        self._data: Dict[str, str] = {}
        self._lock = Lock()
        self._load()

    def _load(self) -> None:
        """Load existing values from disk."""
        if not self.path.exists():
            return
        try:
            with open(self.path) as f:
                data = json.load(f)
            self._data = {str(k): str(v) for k, v in data.items()}
            logger.debug(f"Loaded {len(self._data)} key(s) from {self.path}")
        except (OSError, ValueError, AttributeError) as e:
            logger.warning(f"Failed to load store file {self.path}: {e}")

    def get(self, key: str) -> str:
        with self._lock:
            if key not in self._data:
                raise StoreError(f"no such key: {key}")
            return self._data[key]

    def set(self, key: str, value: str) -> None:
        with self._lock:
            updated = dict(self._data)
            updated[key] = value
            try:
                with open(self.path, 'w') as f:
                    json.dump(updated, f, indent=2, sort_keys=True)
            except OSError as e:
                raise StoreError(f"failed to write {self.path}: {e}") from e
            self._data = updated


def create_store(config: StoreConfig) -> KeyValueStore:
    """Create the store described by the configuration.

    Args:
        config: Store configuration

    Returns:
        Store instance
    """
    if config.backend == "json":
        logger.info(f"Using JSON store: {config.path}")
        return JsonFileStore(config.path)
    return MemoryStore()
