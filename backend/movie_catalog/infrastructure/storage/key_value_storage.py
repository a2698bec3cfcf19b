from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional

from movie_catalog.application.ports.key_value_storage_port import KeyValueStoragePort
from movie_catalog.config.settings import WATCHLIST_STORAGE_BACKEND, WATCHLIST_STORAGE_PATH
from movie_catalog.domain.catalog import PersistenceError

logger = logging.getLogger(__name__)


class InMemoryKeyValueStorage(KeyValueStoragePort):
    """In-memory key/value storage for dev/tests."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileKeyValueStorage(KeyValueStoragePort):
    """Key/value storage backed by a single JSON object file.

    Values are strings, like browser local storage. Every write rewrites the
    whole file through a temp file + rename so a crash never leaves half a
    document behind.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as file:
                data = json.load(file)
        except (OSError, ValueError, RecursionError) as exc:
            raise PersistenceError(f"failed to read storage file {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise PersistenceError(f"storage file {self.path} does not hold a JSON object")
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, data: Dict[str, str]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as file:
                json.dump(data, file, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            raise PersistenceError(f"failed to write storage file {self.path}: {exc}") from exc

    def get_item(self, key: str) -> Optional[str]:
        try:
            return self._read_all().get(key)
        except PersistenceError as exc:
            exc.key = key
            raise

    def set_item(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except PersistenceError:
            # An unreadable file must not block new writes; start over.
            logger.warning("storage file %s unreadable, rewriting it", self.path)
            data = {}
        data[key] = str(value)
        try:
            self._write_all(data)
        except PersistenceError as exc:
            exc.key = key
            raise

    def remove_item(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)


def build_key_value_storage(
    backend: str = WATCHLIST_STORAGE_BACKEND,
    path: Path = WATCHLIST_STORAGE_PATH,
) -> KeyValueStoragePort:
    backend = (backend or "file").strip().lower()
    if backend in {"memory", "in-memory", "in_memory"}:
        return InMemoryKeyValueStorage()
    if backend == "file":
        return JsonFileKeyValueStorage(path)
    raise ValueError(f"Unsupported WATCHLIST_STORAGE_BACKEND='{backend}' (expected memory|file)")
