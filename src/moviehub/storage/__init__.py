from .store import (
    WATCHED_KEY,
    JsonFileBackend,
    KeyValueBackend,
    MemoryBackend,
    PersistentListStore,
)

__all__ = [
    "JsonFileBackend",
    "KeyValueBackend",
    "MemoryBackend",
    "PersistentListStore",
    "WATCHED_KEY",
]
