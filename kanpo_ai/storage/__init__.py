"""Kanpo AI — ローカル永続化"""
from .store import KeyValueStore, MemoryStore, JsonFileStore, ScopedStore, StorageError
from .persistence import FormPersistence

__all__ = [
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
    "ScopedStore",
    "StorageError",
    "FormPersistence",
]
