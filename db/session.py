"""Key-value stores that hold the engine's persisted state as JSON."""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from threading import RLock
from typing import Any, Dict, Optional

from services.errors import StorageError

HISTORY_KEY = "sentiment_analysis_history"
STATS_KEY = "dashboard_stats"


class KeyValueStore:
    """Named JSON records. Subclasses move raw strings in and out."""

    def get(self, key: str, default: Any = None) -> Any:
        raw = self._read(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Could not decode '{key}': {e}", key=key, operation="read") from e

    def set(self, key: str, value: Any) -> None:
        try:
            raw = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Could not encode '{key}': {e}", key=key, operation="write") from e
        self._write(key, raw)

    def delete(self, key: str) -> None:
        self._remove(key)

    def _read(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def _write(self, key: str, raw: str) -> None:
        raise NotImplementedError

    def _remove(self, key: str) -> None:
        raise NotImplementedError


class InMemoryKeyValueStore(KeyValueStore):
    """Keeps serialized strings in process memory."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = RLock()

    def _read(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def _write(self, key: str, raw: str) -> None:
        with self._lock:
            self._data[key] = raw

    def _remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def raw(self, key: str) -> Optional[str]:
        """Serialized value as stored, for inspection."""
        return self._read(key)


class FileKeyValueStore(KeyValueStore):
    """One ``<key>.json`` file per record inside ``directory``."""

    _SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")

    def __init__(self, directory: str | os.PathLike[str]):
        self.directory = Path(directory)
        self._lock = RLock()

    def _path(self, key: str) -> Path:
        if not self._SAFE_KEY.match(key):
            raise StorageError(f"Invalid store key: {key!r}", key=key)
        return self.directory / f"{key}.json"

    def _read(self, key: str) -> Optional[str]:
        path = self._path(key)
        with self._lock:
            try:
                return path.read_text(encoding="utf-8")
            except FileNotFoundError:
                return None
            except UnicodeDecodeError as e:
                raise StorageError(f"Could not decode '{key}': {e}", key=key, operation="read") from e
            except OSError as e:
                raise StorageError(f"Could not read '{key}': {e}", key=key, operation="read") from e

    def _write(self, key: str, raw: str) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        with self._lock:
            try:
                self.directory.mkdir(parents=True, exist_ok=True)
                tmp_path.write_text(raw, encoding="utf-8")
                os.replace(tmp_path, path)
            except OSError as e:
                raise StorageError(f"Could not write '{key}': {e}", key=key, operation="write") from e

    def _remove(self, key: str) -> None:
        path = self._path(key)
        with self._lock:
            try:
                path.unlink()
            except FileNotFoundError:
                pass
            except OSError as e:
                raise StorageError(f"Could not delete '{key}': {e}", key=key, operation="delete") from e


def create_store(config: Any) -> KeyValueStore:
    """Build the backend selected by ``config.STORE_BACKEND``."""
    if getattr(config, "STORE_BACKEND", "memory") == "file":
        return FileKeyValueStore(config.STORE_PATH)
    return InMemoryKeyValueStore()
