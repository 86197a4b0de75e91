"""Local persistence for install identity and account state."""

from usertrack.storage.backends import JsonFileStore, KeyValueStore, MemoryStore
from usertrack.storage.identity import ACCOUNT_KEYS, IdentityKey, IdentityStore

__all__ = [
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
    "IdentityKey",
    "IdentityStore",
    "ACCOUNT_KEYS",
]
