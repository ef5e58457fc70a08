"""Tests for shared/storage.py."""

import json

from shared.storage import JsonFileStorage, KeyValueStore, MemoryStorage


class TestMemoryStorage:
    def test_set_get_remove(self):
        storage = MemoryStorage()
        storage.set_item("token", "abc")
        assert storage.get_item("token") == "abc"
        storage.remove_item("token")
        assert storage.get_item("token") is None

    def test_remove_missing_key(self):
        """Removing a missing key should be a no-op."""
        MemoryStorage().remove_item("nothing")

    def test_satisfies_protocol(self):
        assert isinstance(MemoryStorage(), KeyValueStore)


class TestJsonFileStorage:
    def test_persists_across_instances(self, tmp_path):
        """Values written by one instance should be read by the next."""
        path = tmp_path / "store" / "storage.json"
        JsonFileStorage(path).set_item("token", "abc")

        assert JsonFileStorage(path).get_item("token") == "abc"
        assert json.loads(path.read_text()) == {"token": "abc"}

    def test_remove_persists(self, tmp_path):
        path = tmp_path / "storage.json"
        storage = JsonFileStorage(path)
        storage.set_item("token", "abc")
        storage.remove_item("token")

        assert JsonFileStorage(path).get_item("token") is None

    def test_unreadable_file_is_ignored(self, tmp_path):
        """A corrupt file should start an empty store, not crash."""
        path = tmp_path / "storage.json"
        path.write_text("{not json")

        storage = JsonFileStorage(path)
        assert storage.get_item("token") is None

    def test_non_object_file_is_ignored(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text("[1, 2]")

        assert JsonFileStorage(path).get_item("0") is None

    def test_no_temp_file_left_behind(self, tmp_path):
        path = tmp_path / "storage.json"
        JsonFileStorage(path).set_item("a", "b")

        assert [p.name for p in tmp_path.iterdir()] == ["storage.json"]

    def test_sees_writes_from_another_instance(self, tmp_path):
        """An open store should read values another process wrote later."""
        path = tmp_path / "storage.json"
        server = JsonFileStorage(path)
        assert server.get_item("token") is None

        JsonFileStorage(path).set_item("token", "abc")

        assert server.get_item("token") == "abc"

    def test_write_keeps_keys_written_elsewhere(self, tmp_path):
        """A write should not replace the file with a stale snapshot."""
        path = tmp_path / "storage.json"
        server = JsonFileStorage(path)
        server.set_item("token", "old")

        JsonFileStorage(path).set_item("registrationData", "{}")
        server.remove_item("token")

        assert json.loads(path.read_text()) == {"registrationData": "{}"}
