"""Key/value backends for locally persisted identity state."""

import json
import os
import tempfile
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


class KeyValueStore(ABC):
    """Durable key/value storage. Values must be JSON-compatible."""

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the stored value or None."""
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store a value under a key."""
        ...

    @abstractmethod
    def clear(self, keys: Iterable[str]) -> None:
        """Remove the given keys. Missing keys are ignored."""
        ...


class MemoryStore(KeyValueStore):
    """In-process store. Nothing survives a restart."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Any | None:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def clear(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """Store backed by a single JSON document on disk."""

    def __init__(self, path: Path | str):
        """
        Initialize the store.

        Args:
            path: Location of the JSON document; parent directories are created
        """
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._data = self._load()

    def _load(self) -> dict[str, Any]:
        """Read the document, treating a missing or corrupt file as empty."""
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("identity_store_load_failed", path=str(self.path), error=str(e))
            return {}
        if not isinstance(data, dict):
            logger.warning("identity_store_not_a_mapping", path=str(self.path))
            return {}
        return data

    def _flush(self) -> None:
        """Write the document atomically (temp file, then replace)."""
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2, sort_keys=True)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> Any | None:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._flush()

    def clear(self, keys: Iterable[str]) -> None:
        removed = [key for key in keys if self._data.pop(key, None) is not None]
        if removed:
            self._flush()
