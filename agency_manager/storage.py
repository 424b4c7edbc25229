"""Local durable key-value storage backed by JSON files."""

import json
from pathlib import Path
from typing import Any

import structlog

from agency_manager.errors import StorageError

logger = structlog.get_logger()

AUTH_KEY = "auth"


class LocalStorage:
    """Key-value store keeping one JSON file per key.

    Keys are namespaced, so ``set("talents", [...])`` writes
    ``<directory>/<namespace>_talents.json``.
    """

    def __init__(self, directory: str | Path, namespace: str = "agency") -> None:
        self.directory = Path(directory)
        self.namespace = namespace
        self.directory.mkdir(parents=True, exist_ok=True)
        logger.debug("Local storage initialized", directory=str(self.directory), namespace=namespace)

    def _path(self, key: str) -> Path:
        return self.directory / f"{self.namespace}_{key}.json"

    def get(self, key: str, default: Any = None) -> Any:
        """Read the value stored under key, or default when the key was never written."""
        path = self._path(key)
        if not path.exists():
            return default
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to read local snapshot", key=key, error=str(e))
            raise StorageError(f"Failed to read {path}: {e}") from e

    def set(self, key: str, value: Any) -> None:
        path = self._path(key)
        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(value, f, ensure_ascii=False, indent=2)
        except (OSError, TypeError) as e:
            logger.error("Failed to write local snapshot", key=key, error=str(e))
            raise StorageError(f"Failed to write {path}: {e}") from e
        logger.debug("Local snapshot written", key=key)

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def keys(self) -> list[str]:
        prefix = f"{self.namespace}_"
        return sorted(path.stem[len(prefix) :] for path in self.directory.glob(f"{prefix}*.json"))
