"""Tests for storage backends."""

import json

from flashrep.storage import JsonFileStore, KeyValueStore, MemoryStore


class TestJsonFileStore:
    """Tests for the file-per-key JSON store."""

    def test_is_key_value_store(self, tmp_path):
        assert isinstance(JsonFileStore(tmp_path), KeyValueStore)

    def test_creates_data_dir(self, tmp_path):
        JsonFileStore(tmp_path / "nested" / "data")
        assert (tmp_path / "nested" / "data").is_dir()

    def test_get_missing(self, tmp_path):
        assert JsonFileStore(tmp_path).get("flashcards") is None

    def test_set_then_get(self, tmp_path):
        store = JsonFileStore(tmp_path)
        store.set("flashcards", [{"id": "1"}])
        assert store.get("flashcards") == [{"id": "1"}]
        assert (tmp_path / "flashcards.json").exists()

    def test_keys_are_independent(self, tmp_path):
        store = JsonFileStore(tmp_path)
        store.set("flashcards", [1])
        store.set("reviewHistory", [2])
        assert store.get("flashcards") == [1]
        assert store.get("reviewHistory") == [2]

    def test_unparseable_file_is_absent(self, tmp_path):
        (tmp_path / "flashcards.json").write_text("{not json")
        assert JsonFileStore(tmp_path).get("flashcards") is None

    def test_binary_garbage_is_absent(self, tmp_path):
        (tmp_path / "flashcards.json").write_bytes(b"\xff\xfe\x00garbage")
        assert JsonFileStore(tmp_path).get("flashcards") is None

    def test_unicode_preserved(self, tmp_path):
        store = JsonFileStore(tmp_path)
        store.set("flashcards", [{"front": "Adiós"}])
        raw = (tmp_path / "flashcards.json").read_text(encoding="utf-8")
        assert "Adiós" in raw
        assert json.loads(raw) == [{"front": "Adiós"}]


class TestMemoryStore:
    """Tests for the in-memory store."""

    def test_get_missing(self):
        assert MemoryStore().get("x") is None

    def test_set_then_get(self):
        store = MemoryStore()
        store.set("x", {"a": 1})
        assert store.get("x") == {"a": 1}
        assert "x" in store

    def test_initial_data(self):
        store = MemoryStore({"x": [1, 2]})
        assert store.get("x") == [1, 2]

    def test_copies_on_set(self):
        store = MemoryStore()
        blob = [{"a": 1}]
        store.set("x", blob)
        blob[0]["a"] = 2
        assert store.get("x") == [{"a": 1}]

    def test_copies_on_get(self):
        store = MemoryStore({"x": [{"a": 1}]})
        store.get("x")[0]["a"] = 99
        assert store.get("x") == [{"a": 1}]

    def test_counts_writes(self):
        store = MemoryStore()
        store.set("x", 1)
        store.set("x", 2)
        assert store.writes == 2
