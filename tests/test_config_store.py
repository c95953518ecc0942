"""Tests for durable config persistence."""

import json
from pathlib import Path

import pytest

from clinic_access.access.types import AccessConfig, AccessTier, TierCredentials
from clinic_access.exceptions import StorageUnavailableError
from clinic_access.storage import DEFAULT_CONFIG_NAMESPACE, ConfigStore, FileStorage, MemoryStorage


class TestConfigStore:
    """Tests for ConfigStore."""

    def test_load_without_record_returns_defaults(self, config_store: ConfigStore) -> None:
        assert config_store.exists() is False
        assert config_store.load() == AccessConfig()

    def test_save_writes_namespaced_file(self, config_store: ConfigStore, temp_dir: Path) -> None:
        config_store.save(AccessConfig())
        path = temp_dir / "data" / f"{DEFAULT_CONFIG_NAMESPACE}.json"
        assert path.exists()
        data = json.loads(path.read_text())
        assert data["credentials"]["elevated2"] == "owner456"
        assert data["session_policy"]["expiry_minutes"] == 30

    def test_save_load_is_idempotent(self, config_store: ConfigStore) -> None:
        config = AccessConfig(resource_access={"reports": AccessTier.ELEVATED2, "salaries": AccessTier.ELEVATED3})
        config_store.save(config)
        first = config_store.load()
        config_store.save(first)
        second = config_store.load()
        assert first == second

    def test_save_overwrites_entirely(self, config_store: ConfigStore) -> None:
        config_store.save(AccessConfig(credentials=TierCredentials(elevated1="first")))
        config_store.save(AccessConfig(credentials=TierCredentials(elevated2="second")))
        loaded = config_store.load()
        assert loaded.credentials.elevated1 == "staff123"
        assert loaded.credentials.elevated2 == "second"

    def test_corrupt_record_falls_back_to_defaults(self, config_store: ConfigStore, temp_dir: Path) -> None:
        path = temp_dir / "data" / f"{DEFAULT_CONFIG_NAMESPACE}.json"
        path.parent.mkdir(parents=True)
        path.write_text("{not json")

        assert config_store.load() == AccessConfig()
        assert config_store.exists() is False

    def test_non_object_record_falls_back_to_defaults(self, config_store: ConfigStore, temp_dir: Path) -> None:
        path = temp_dir / "data" / f"{DEFAULT_CONFIG_NAMESPACE}.json"
        path.parent.mkdir(parents=True)
        path.write_text("[1, 2, 3]")

        assert config_store.load() == AccessConfig()

    def test_older_partial_record_is_merged(self, config_store: ConfigStore, temp_dir: Path) -> None:
        path = temp_dir / "data" / f"{DEFAULT_CONFIG_NAMESPACE}.json"
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"resource_access": {"reports": 2}}))

        loaded = config_store.load()
        assert loaded.resource_access["reports"] is AccessTier.ELEVATED2
        assert loaded.session_policy.expiry_minutes == 30

    def test_reset_restores_defaults(self, config_store: ConfigStore) -> None:
        config_store.save(AccessConfig(credentials=TierCredentials(elevated3="")))
        reset = config_store.reset()
        assert reset == AccessConfig()
        assert config_store.load() == AccessConfig()
        assert config_store.exists() is True

    def test_custom_namespace(self) -> None:
        storage = MemoryStorage()
        store = ConfigStore(storage, namespace="branch_two_config")
        store.save(AccessConfig())
        assert storage.keys() == ["branch_two_config"]

    def test_unwritable_directory_raises_on_save(self, temp_dir: Path) -> None:
        blocker = temp_dir / "blocker"
        blocker.write_text("a file, not a directory")
        store = ConfigStore(FileStorage(blocker / "data"))

        with pytest.raises(StorageUnavailableError):
            store.save(AccessConfig())
        assert store.load() == AccessConfig()


class TestFileStorage:
    """Tests for the durable key/value backend."""

    def test_rejects_path_traversal(self, durable_storage: FileStorage) -> None:
        with pytest.raises(StorageUnavailableError):
            durable_storage.set("../escape", {})

    def test_keys_lists_json_documents(self, durable_storage: FileStorage) -> None:
        durable_storage.set("b", {"x": 1})
        durable_storage.set("a", {"y": 2})
        assert durable_storage.keys() == ["a", "b"]
        assert durable_storage.remove("a") is True
        assert durable_storage.remove("a") is False
        assert durable_storage.keys() == ["b"]
