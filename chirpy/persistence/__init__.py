"""
Persistence module - single-file JSON data storage

Provides:
- JSONStore: Locked, atomic access to one JSON document
- ReadWriteLock: Shared/exclusive lock used by JSONStore
- ChirpDatabase: Chirps, users and revocations over a JSONStore
"""

from .rwlock import ReadWriteLock
from .json_store import JSONStore, StoreIOError, StoreFormatError
from .database import ChirpDatabase, Chirp, User, Revocation, empty_snapshot

__all__ = [
    "ReadWriteLock",
    "JSONStore",
    "StoreIOError",
    "StoreFormatError",
    "ChirpDatabase",
    "Chirp",
    "User",
    "Revocation",
    "empty_snapshot",
]
