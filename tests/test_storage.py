"""Tests for the JSON file storage adapter and store opening."""

import json

from qsheet.sheet.view import tree_to_dicts
from qsheet.storage import JsonFileStorage, open_store


class TestJsonFileStorage:
    """Tests for JsonFileStorage."""

    def test_missing_file_loads_none(self, tmp_path):
        storage = JsonFileStorage(tmp_path / "missing.json")
        assert not storage.exists()
        assert storage.load() is None

    def test_save_creates_parent_dirs(self, tmp_path, sample_store):
        storage = JsonFileStorage(tmp_path / "nested" / "dir" / "sheet.json")
        storage.save_store(sample_store)
        assert storage.exists()
        data = json.loads(storage.path.read_text(encoding="utf-8"))
        assert data["version"] == 1

    def test_save_leaves_no_temp_files(self, tmp_path, sample_store):
        storage = JsonFileStorage(tmp_path / "sheet.json")
        storage.save_store(sample_store)
        storage.save_store(sample_store)
        assert [p.name for p in tmp_path.iterdir()] == ["sheet.json"]

    def test_undecodable_file_loads_none(self, tmp_path):
        path = tmp_path / "sheet.json"
        path.write_text("{not json", encoding="utf-8")
        assert JsonFileStorage(path).load() is None

    def test_delete(self, tmp_path, sample_store):
        storage = JsonFileStorage(tmp_path / "sheet.json")
        assert storage.delete() is False
        storage.save_store(sample_store)
        assert storage.delete() is True
        assert not storage.exists()


class TestOpenStore:
    """Tests for open_store."""

    def test_round_trip_through_disk(self, tmp_path, offline_config, sample_store):
        storage = JsonFileStorage(tmp_path / "sheet.json")
        storage.save_store(sample_store)

        store, seeded = open_store(storage, offline_config)

        assert seeded is None
        assert tree_to_dicts(store.get_topics()) == tree_to_dicts(sample_store.get_topics())

    def test_empty_storage_seeds_fallback(self, tmp_path, offline_config):
        storage = JsonFileStorage(tmp_path / "sheet.json")

        store, seeded = open_store(storage, offline_config)

        assert seeded is not None
        assert seeded.source == "fallback"
        assert store.graph.topic_count() == 5
        # Seed result is written back
        assert storage.exists()

    def test_corrupted_storage_reseeds(self, tmp_path, offline_config, sample_store):
        storage = JsonFileStorage(tmp_path / "sheet.json")
        document = sample_store.to_persisted()
        del document["state"]["questionsById"]
        storage.save(document)

        store, seeded = open_store(storage, offline_config)

        assert seeded is not None
        assert store.graph.find_topic("t-arrays") is None
        assert store.graph.find_topic("topic-1") is not None

    def test_history_capacity_from_config(self, tmp_path, offline_config):
        offline_config["history"]["capacity"] = 4
        store, _ = open_store(JsonFileStorage(tmp_path / "sheet.json"), offline_config)
        assert store.history.capacity == 4
