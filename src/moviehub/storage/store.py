"""Key-value persistence for the watched list."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from pydantic import TypeAdapter, ValidationError

from moviehub.models import WatchedItem

logger = logging.getLogger(__name__)

WATCHED_KEY = "watched"

_ITEMS_ADAPTER = TypeAdapter(list[WatchedItem])


class KeyValueBackend(Protocol):
    """String-to-string storage, one namespace per profile."""

    def get_item(self, key: str) -> str | None:
        """Return the stored value or ``None`` if the key is absent."""

    def set_item(self, key: str, value: str) -> None:
        """Overwrite the value stored under ``key``."""

    def remove_item(self, key: str) -> None:
        """Delete ``key``; absent keys are ignored."""


class MemoryBackend:
    """In-process backend, used for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self.data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove_item(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileBackend:
    """Stores every profile's entries in one JSON document on disk.

    The document maps profile name to an object of string values. Writes
    replace the file atomically so a crash never leaves a half-written blob.
    """

    def __init__(self, path: Path, *, profile: str = "default") -> None:
        self._path = path
        self._profile = profile

    @property
    def path(self) -> Path:
        return self._path

    def get_item(self, key: str) -> str | None:
        value = self._read_profile().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        document = self._read_document()
        profile = document.get(self._profile)
        if not isinstance(profile, dict):
            profile = {}
        profile[key] = value
        document[self._profile] = profile
        self._write_document(document)

    def remove_item(self, key: str) -> None:
        document = self._read_document()
        profile = document.get(self._profile)
        if not isinstance(profile, dict) or key not in profile:
            return
        del profile[key]
        self._write_document(document)

    def _read_profile(self) -> dict[str, object]:
        profile = self._read_document().get(self._profile)
        return profile if isinstance(profile, dict) else {}

    def _read_document(self) -> dict[str, object]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                document = json.load(handle)
        except (OSError, ValueError) as exc:
            logger.warning(f"[STORE] Ignoring unreadable storage file {self._path}: {exc}")
            return {}
        return document if isinstance(document, dict) else {}

    def _write_document(self, document: dict[str, object]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=".moviehub-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(document, handle, indent=2)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class PersistentListStore:
    """Reads and writes whole watched lists under a named slot."""

    def __init__(self, backend: KeyValueBackend) -> None:
        self._backend = backend

    def load(self, key: str = WATCHED_KEY) -> list[WatchedItem]:
        raw = self._backend.get_item(key)
        if not raw:
            return []
        try:
            return _ITEMS_ADAPTER.validate_json(raw)
        except ValidationError as exc:
            logger.warning(
                f"[STORE] Stored value for {key!r} is malformed, starting empty "
                f"({exc.error_count()} errors)"
            )
            return []

    def save(self, key: str, items: Iterable[WatchedItem]) -> None:
        payload = _ITEMS_ADAPTER.dump_json(list(items), by_alias=True)
        self._backend.set_item(key, payload.decode("utf-8"))


__all__ = [
    "JsonFileBackend",
    "KeyValueBackend",
    "MemoryBackend",
    "PersistentListStore",
    "WATCHED_KEY",
]
