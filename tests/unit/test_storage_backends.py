"""
Module 03 - Keyed Store Backend Tests
Tests for orchestrator/storage/backends.py
"""
import pytest

from core.config.runtime import StorageConfig
from orchestrator.storage.backends import (
    FileStore,
    InvalidKeyError,
    KeyValueStore,
    MemoryStore,
    StorageError,
    create_store,
    validate_key,
)


@pytest.fixture(params=["memory", "file"])
def store(request, tmp_path) -> KeyValueStore:
    if request.param == "memory":
        return MemoryStore()
    return FileStore(tmp_path / "kv")


class TestKeyValueContract:
    """Behavior shared by every backend."""

    def test_missing_key_is_none(self, store):
        assert store.get("absent") is None
        assert not store.contains("absent")

    def test_set_then_get(self, store):
        store.set("airdrop_tree_1", '{"a":1}')
        assert store.get("airdrop_tree_1") == '{"a":1}'
        assert store.contains("airdrop_tree_1")

    def test_set_replaces(self, store):
        store.set("k", "old")
        store.set("k", "new")
        assert store.get("k") == "new"

    def test_delete(self, store):
        store.set("k", "v")
        assert store.delete("k") is True
        assert store.get("k") is None
        assert store.delete("k") is False

    def test_keys_sorted(self, store):
        store.set("b", "2")
        store.set("a", "1")
        assert store.keys() == ["a", "b"]

    @pytest.mark.parametrize("key", ["", "../escape", "a/b", "..", "has space"])
    def test_invalid_keys_rejected(self, store, key):
        with pytest.raises(InvalidKeyError):
            store.set(key, "v")


class TestFileStore:
    """File-specific behavior."""

    def test_one_json_file_per_key(self, tmp_path):
        store = FileStore(tmp_path)
        store.set("airdrop_tree_7", "{}")
        assert (tmp_path / "airdrop_tree_7.json").read_text() == "{}"

    def test_no_temp_files_left_behind(self, tmp_path):
        store = FileStore(tmp_path)
        store.set("k", "first")
        store.set("k", "second")
        assert sorted(p.name for p in tmp_path.iterdir()) == ["k.json"]

    def test_failed_write_removes_temp_file(self, tmp_path, monkeypatch):
        store = FileStore(tmp_path)
        store.set("k", "first")

        def _fail_replace(src, dst):
            raise OSError("read-only file system")

        monkeypatch.setattr("orchestrator.storage.backends.os.replace", _fail_replace)
        with pytest.raises(StorageError, match="read-only"):
            store.set("k", "second")

        assert sorted(p.name for p in tmp_path.iterdir()) == ["k.json"]
        assert store.get("k") == "first"

    def test_creates_directory(self, tmp_path):
        store = FileStore(tmp_path / "nested" / "dir")
        store.set("k", "v")
        assert store.get("k") == "v"

    def test_keys_on_missing_directory(self, tmp_path):
        assert FileStore(tmp_path / "nope").keys() == []


class TestCreateStore:
    """Tests for backend selection."""

    def test_memory(self):
        assert isinstance(create_store(StorageConfig(backend="memory")), MemoryStore)

    def test_file(self, tmp_path):
        store = create_store(StorageConfig(backend="file", directory=str(tmp_path)))
        assert isinstance(store, FileStore)
        assert store.directory == tmp_path

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown storage backend"):
            create_store(StorageConfig(backend="redis"))

    def test_validate_key_passthrough(self):
        assert validate_key("airdrop_tree_42") == "airdrop_tree_42"
