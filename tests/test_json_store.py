"""
JSONStore and ReadWriteLock tests

Tests:
- File creation, load and replace
- Atomic write leaves no temp file and keeps the old file on failure
- Transactions write back only on success
- Lock exclusion between readers and writers
"""

import json
import os
import shutil
import tempfile
import threading
import unittest
from unittest.mock import patch

from chirpy.persistence import JSONStore, ReadWriteLock, StoreIOError, StoreFormatError


class TestJSONStore(unittest.TestCase):
    """Test suite for JSONStore"""

    def setUp(self):
        """Setup before each test"""
        self.test_dir = tempfile.mkdtemp()
        self.store_path = os.path.join(self.test_dir, "nested", "db.json")
        self.store = JSONStore(self.store_path, lambda: {"items": {}})

    def tearDown(self):
        """Cleanup after each test"""
        if os.path.exists(self.test_dir):
            shutil.rmtree(self.test_dir)

    def test_ensure_initialized_creates_file(self):
        """Test first call creates the default document and directory"""
        self.assertTrue(self.store.ensure_initialized())
        self.assertTrue(os.path.exists(self.store_path))
        self.assertEqual(self.store.load(), {"items": {}})

    def test_ensure_initialized_is_idempotent(self):
        """Test second call leaves existing data alone"""
        self.store.ensure_initialized()
        self.store.replace({"items": {"a": 1}})

        self.assertFalse(self.store.ensure_initialized())
        self.assertEqual(self.store.load(), {"items": {"a": 1}})

    def test_load_missing_file_raises(self):
        """Test loading before initialization is an I/O error"""
        with self.assertRaises(StoreIOError):
            self.store.load()

    def test_replace_and_load(self):
        """Test saving and loading data"""
        self.store.ensure_initialized()
        self.store.replace({"name": "Alice", "age": 30})

        self.assertEqual(self.store.load(), {"name": "Alice", "age": 30})

    def test_atomic_write_leaves_no_temp_file(self):
        """Test temp file is renamed away"""
        self.store.ensure_initialized()
        self.store.replace({"value": 42})

        self.assertFalse(os.path.exists(self.store_path + ".tmp"))

    def test_file_permissions(self):
        """Test file has restrictive permissions"""
        self.store.ensure_initialized()
        mode = os.stat(self.store_path).st_mode & 0o777
        self.assertEqual(mode, 0o600)

    def test_failed_write_keeps_previous_content(self):
        """Test a failing rename does not truncate the existing file"""
        self.store.ensure_initialized()
        self.store.replace({"version": 1})

        with patch("chirpy.persistence.json_store.os.replace", side_effect=OSError("disk full")):
            with self.assertRaises(StoreIOError):
                self.store.replace({"version": 2})

        self.assertEqual(self.store.load(), {"version": 1})
        self.assertFalse(os.path.exists(self.store_path + ".tmp"))

    def test_unserializable_data_raises_store_error(self):
        """Test serialization failure is a StoreIOError and writes nothing"""
        self.store.ensure_initialized()
        with self.assertRaises(StoreIOError):
            self.store.replace({"bad": object()})
        self.assertEqual(self.store.load(), {"items": {}})

    def test_invalid_json_raises_format_error(self):
        """Test invalid JSON raises error"""
        os.makedirs(os.path.dirname(self.store_path), exist_ok=True)
        with open(self.store_path, "w") as f:
            f.write("{invalid json}")

        with self.assertRaises(StoreFormatError):
            self.store.load()

    def test_non_object_document_raises_format_error(self):
        """Test a JSON list at top level is rejected"""
        os.makedirs(os.path.dirname(self.store_path), exist_ok=True)
        with open(self.store_path, "w") as f:
            json.dump([1, 2, 3], f)

        with self.assertRaises(StoreFormatError):
            self.store.load()

    def test_transaction_writes_back(self):
        """Test mutations inside a transaction are persisted"""
        self.store.ensure_initialized()
        with self.store.transaction() as data:
            data["items"]["x"] = 1

        self.assertEqual(self.store.load(), {"items": {"x": 1}})

    def test_transaction_discards_on_error(self):
        """Test an exception inside the block prevents the write"""
        self.store.ensure_initialized()
        with self.assertRaises(RuntimeError):
            with self.store.transaction() as data:
                data["items"]["x"] = 1
                raise RuntimeError("abort")

        self.assertEqual(self.store.load(), {"items": {}})

    def test_lock_released_after_failed_transaction(self):
        """Test a failed transaction does not leave the lock held"""
        self.store.ensure_initialized()
        with self.assertRaises(RuntimeError):
            with self.store.transaction():
                raise RuntimeError("abort")

        with self.store.transaction() as data:
            data["items"]["y"] = 2
        self.assertEqual(self.store.load()["items"], {"y": 2})

    def test_concurrent_transactions_do_not_lose_updates(self):
        """Test read-modify-write increments from many threads all land"""
        self.store.ensure_initialized()
        self.store.replace({"counter": 0})

        def increment():
            for _ in range(10):
                with self.store.transaction() as data:
                    data["counter"] += 1

        threads = [threading.Thread(target=increment) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(self.store.load()["counter"], 80)

    def test_stores_on_same_path_share_lock(self):
        """Test two stores opened on one file use the same lock"""
        other = JSONStore(os.path.join(self.test_dir, "nested", ".", "db.json"))
        unrelated = JSONStore(os.path.join(self.test_dir, "other.json"))

        self.assertIs(other._lock, self.store._lock)
        self.assertIsNot(unrelated._lock, self.store._lock)

    def test_concurrent_transactions_across_stores(self):
        """Test increments through two stores on one file all land"""
        self.store.ensure_initialized()
        self.store.replace({"counter": 0})
        stores = [self.store, JSONStore(self.store_path)]

        def increment(store):
            for _ in range(10):
                with store.transaction() as data:
                    data["counter"] += 1

        threads = [threading.Thread(target=increment, args=(stores[i % 2],)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(self.store.load()["counter"], 80)

    def test_unchanged_transaction_skips_write(self):
        """Test a transaction that mutates nothing does not rewrite the file"""
        self.store.ensure_initialized()
        self.store.replace({"items": {"x": 1}})

        with patch.object(self.store, "_write_payload") as write:
            with self.store.transaction() as data:
                self.assertEqual(data["items"]["x"], 1)
            write.assert_not_called()

            with self.store.transaction() as data:
                data["items"]["x"] = 2
            write.assert_called_once()


class TestReadWriteLock(unittest.TestCase):
    """Test suite for ReadWriteLock"""

    def setUp(self):
        self.lock = ReadWriteLock()

    def test_readers_share(self):
        """Test two readers can hold the lock together"""
        self.lock.acquire_read()
        acquired = threading.Event()

        def reader():
            with self.lock.read_locked():
                acquired.set()

        t = threading.Thread(target=reader)
        t.start()
        self.assertTrue(acquired.wait(timeout=2))
        t.join()
        self.lock.release_read()

    def test_writer_waits_for_reader(self):
        """Test a writer blocks until the reader releases"""
        self.lock.acquire_read()
        acquired = threading.Event()

        def writer():
            with self.lock.write_locked():
                acquired.set()

        t = threading.Thread(target=writer)
        t.start()
        self.assertFalse(acquired.wait(timeout=0.2))

        self.lock.release_read()
        self.assertTrue(acquired.wait(timeout=2))
        t.join()

    def test_reader_waits_for_writer(self):
        """Test a reader blocks while the writer holds the lock"""
        self.lock.acquire_write()
        acquired = threading.Event()

        def reader():
            with self.lock.read_locked():
                acquired.set()

        t = threading.Thread(target=reader)
        t.start()
        self.assertFalse(acquired.wait(timeout=0.2))

        self.lock.release_write()
        self.assertTrue(acquired.wait(timeout=2))
        t.join()

    def test_release_without_acquire_raises(self):
        """Test unbalanced releases are programming errors"""
        with self.assertRaises(RuntimeError):
            self.lock.release_read()
        with self.assertRaises(RuntimeError):
            self.lock.release_write()


if __name__ == "__main__":
    unittest.main()
