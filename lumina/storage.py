"""
On-device key/value storage.

A single JSON document mapping string keys to string values, kept at
``storage.path`` (default ``~/.lumina/storage.json``) with owner-only
permissions.  A missing or unreadable file reads as empty.
"""

from __future__ import annotations

import os
from pathlib import Path

import orjson

from lumina.errors import StorageError
from lumina.logging import get_logger

log = get_logger("lumina.storage")


class KeyValueStore:
    """Persistent string→string map backed by one JSON file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = orjson.loads(self.path.read_bytes())
        except (orjson.JSONDecodeError, OSError) as exc:
            log.warning("storage_unreadable", path=str(self.path), error=str(exc))
            return {}
        if not isinstance(data, dict):
            log.warning("storage_not_a_mapping", path=str(self.path))
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _dump(self, data: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp.write_bytes(orjson.dumps(data, option=orjson.OPT_INDENT_2))
            os.chmod(tmp, 0o600)
            os.replace(tmp, self.path)
        except OSError as exc:
            raise StorageError(f"Cannot write {self.path}: {exc}") from exc

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def __contains__(self, key: object) -> bool:
        return key in self._load()
