"""
JSON Store - Single-file JSON snapshot storage

Module: persistence.json_store
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - Whole-file load/replace of one JSON document
  - Readers-writer locking shared by every caller in the process
  - Transactions holding the write lock across load, mutate and write
  - Atomic writes (temp file + fsync + rename)

ARCHITECTURE:
JSONStore provides:
  - load(): shared lock, read and parse
  - replace(): exclusive lock, atomic overwrite
  - read(): context manager yielding a snapshot under the shared lock
  - transaction(): context manager yielding a snapshot under the exclusive
    lock, written back only if the block exits cleanly
  - ensure_initialized(): idempotent creation of the default document

SECURITY NOTES:
- File permissions set to 0600
- A failed write never truncates the previous file
"""

import json
import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, Optional, Tuple

from ..core.constants import DB_FILE_MODE
from ..core.errors import ChirpyError
from .rwlock import ReadWriteLock


# One lock per file, shared by every JSONStore opened on that path
_LOCKS: Dict[str, ReadWriteLock] = {}
_LOCKS_GUARD = threading.Lock()


def _lock_for(file_path: Path) -> ReadWriteLock:
    key = str(file_path.resolve())
    with _LOCKS_GUARD:
        lock = _LOCKS.get(key)
        if lock is None:
            lock = _LOCKS[key] = ReadWriteLock()
        return lock


class StoreIOError(ChirpyError):
    """Backing file could not be read or written"""
    status = 500


class StoreFormatError(StoreIOError):
    """Backing file does not hold a JSON object"""
    pass


class JSONStore:
    """
    Single JSON document on disk, guarded by one readers-writer lock.

    Every read-modify-write must go through transaction() so that no other
    reader or writer can observe or interleave with it.
    """

    def __init__(
        self,
        file_path: str,
        default_factory: Optional[Callable[[], Dict[str, Any]]] = None,
    ):
        """
        Initialize JSON store

        Args:
            file_path: Path to JSON file
            default_factory: Builds the document written by ensure_initialized()
        """
        self.logger = logging.getLogger("persistence.json_store")
        self.file_path = Path(file_path)
        self.default_factory = default_factory or dict
        self._lock = _lock_for(self.file_path)

    @property
    def temp_path(self) -> Path:
        return self.file_path.with_name(self.file_path.name + ".tmp")

    def ensure_initialized(self) -> bool:
        """
        Write the default document if the file does not exist

        Returns:
            True if the file was created, False if it already existed

        Raises:
            StoreIOError: If the directory or file cannot be created
        """
        with self._lock.write_locked():
            if self.file_path.exists():
                return False
            try:
                self.file_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StoreIOError(f"Failed to create {self.file_path.parent}: {e}") from e
            self._write_atomic(self.default_factory())
            self.logger.info(f"Created new store: {self.file_path}")
            return True

    def load(self) -> Dict[str, Any]:
        """
        Load data from JSON file under the shared lock

        Returns:
            Parsed JSON data

        Raises:
            StoreIOError: If file is missing or cannot be read
            StoreFormatError: If JSON is invalid
        """
        with self._lock.read_locked():
            return self._read_file()

    def replace(self, data: Dict[str, Any]) -> None:
        """
        Overwrite the file under the exclusive lock (atomic write)

        Args:
            data: Whole document to save

        Raises:
            StoreIOError: If write fails
        """
        with self._lock.write_locked():
            self._write_atomic(data)

    @contextmanager
    def read(self) -> Iterator[Dict[str, Any]]:
        """Yield the current document while holding the shared lock"""
        with self._lock.read_locked():
            yield self._read_file()

    @contextmanager
    def transaction(self) -> Iterator[Dict[str, Any]]:
        """
        Yield the current document while holding the exclusive lock

        The (possibly mutated) document is written back when the block
        exits normally and its serialized form differs from the file. If
        the block raises, nothing is written and the exception propagates.
        """
        with self._lock.write_locked():
            text, data = self._read_text()
            yield data
            payload = self._serialize(data)
            if payload != text:
                self._write_payload(payload)

    def _read_file(self) -> Dict[str, Any]:
        return self._read_text()[1]

    def _read_text(self) -> Tuple[str, Dict[str, Any]]:
        """
        Read the raw file text and its parsed document

        Raises:
            StoreIOError: If file is missing or cannot be read
            StoreFormatError: If JSON is invalid or not an object
        """
        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                text = f.read()
        except FileNotFoundError as e:
            raise StoreIOError(
                f"Store {self.file_path} does not exist, call ensure_initialized() first"
            ) from e
        except (OSError, UnicodeDecodeError) as e:
            raise StoreIOError(f"Failed to read {self.file_path}: {e}") from e

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise StoreFormatError(f"Invalid JSON in {self.file_path}: {e}") from e

        if not isinstance(data, dict):
            raise StoreFormatError(
                f"Expected a JSON object in {self.file_path}, got {type(data).__name__}"
            )
        return text, data

    def _serialize(self, data: Dict[str, Any]) -> str:
        try:
            return json.dumps(data, indent=2)
        except (TypeError, ValueError) as e:
            raise StoreIOError(f"Failed to serialize {self.file_path}: {e}") from e

    def _write_atomic(self, data: Dict[str, Any]) -> None:
        self._write_payload(self._serialize(data))

    def _write_payload(self, payload: str) -> None:
        """
        Atomic write: write to temp file, fsync, then rename

        Raises:
            StoreIOError: If write fails
        """
        temp_path = self.temp_path
        try:
            fd = os.open(temp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, DB_FILE_MODE)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self.file_path)
            os.chmod(self.file_path, DB_FILE_MODE)
        except OSError as e:
            try:
                temp_path.unlink()
            except FileNotFoundError:
                pass
            except OSError as cleanup_error:
                self.logger.warning(f"Could not remove {temp_path}: {cleanup_error}")
            raise StoreIOError(f"Failed to write {self.file_path}: {e}") from e
