"""
Module: test_local_storage.py
Description: Unit tests for file and memory key/value storage.
"""

import pytest

from actionlog.storage.local import FileStorage, MemoryStorage, StorageError


class TestFileStorage:
    """Test cases for FileStorage."""

    def test_missing_key_returns_none(self, tmp_path):
        assert FileStorage(str(tmp_path)).get_item("cyb_log_queue") is None

    def test_set_then_get(self, tmp_path):
        storage = FileStorage(str(tmp_path / "queue"))

        storage.set_item("cyb_log_queue", '[{"action": "page_visit"}]')

        assert storage.get_item("cyb_log_queue") == '[{"action": "page_visit"}]'
        assert (tmp_path / "queue" / "cyb_log_queue.json").exists()

    def test_set_replaces_whole_value(self, tmp_path):
        storage = FileStorage(str(tmp_path))

        storage.set_item("cyb_log_queue", "[1, 2, 3]")
        storage.set_item("cyb_log_queue", "[]")

        assert storage.get_item("cyb_log_queue") == "[]"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["cyb_log_queue.json"]

    def test_survives_new_instance(self, tmp_path):
        FileStorage(str(tmp_path)).set_item("cyb_log_queue", "[]")

        assert FileStorage(str(tmp_path)).get_item("cyb_log_queue") == "[]"

    def test_remove_item(self, tmp_path):
        storage = FileStorage(str(tmp_path))
        storage.set_item("cyb_log_queue", "[]")

        storage.remove_item("cyb_log_queue")
        storage.remove_item("cyb_log_queue")

        assert storage.get_item("cyb_log_queue") is None

    def test_unwritable_directory_raises_storage_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        with pytest.raises(StorageError):
            FileStorage(str(blocker)).set_item("cyb_log_queue", "[]")

    def test_rejects_path_like_keys(self, tmp_path):
        storage = FileStorage(str(tmp_path))

        for key in ["", "../escape", "a/b"]:
            with pytest.raises(ValueError):
                storage.set_item(key, "[]")

    def test_rejects_empty_directory(self):
        with pytest.raises(ValueError):
            FileStorage("")


class TestMemoryStorage:
    """Test cases for MemoryStorage."""

    def test_round_trip_and_remove(self):
        storage = MemoryStorage()

        storage.set_item("cyb_log_queue", "[]")
        assert storage.get_item("cyb_log_queue") == "[]"

        storage.remove_item("cyb_log_queue")
        assert storage.get_item("cyb_log_queue") is None

    def test_non_string_values_rejected(self):
        with pytest.raises(StorageError):
            MemoryStorage().set_item("cyb_log_queue", [])
