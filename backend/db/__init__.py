"""Key-value persistence for runtime configuration and counters."""

from db.base import KVStore, KVStoreError
from db.memory import InMemoryKVStore

__all__ = ["KVStore", "KVStoreError", "InMemoryKVStore"]
