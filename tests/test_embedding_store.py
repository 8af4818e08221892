"""
Durable embedding store: persistence, reload and failure handling.
"""

import json

import pytest

from librarian.core.errors import StorageIOError
from librarian.vector.store import EmbeddingStore


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "vectors" / "vector_storage.json"


@pytest.fixture
def store(store_path):
    s = EmbeddingStore(str(store_path))
    s.initialize()
    return s


def test_initialize_creates_directory_and_starts_empty(store, store_path):
    assert store_path.parent.is_dir()
    assert len(store) == 0
    assert store.get(1) is None


def test_put_then_get(store):
    store.put(1, [0.1, 0.2, 0.3], {"title": "Dune", "author": "Frank Herbert"})

    assert store.get(1) == [0.1, 0.2, 0.3]
    assert 1 in store
    meta = store.get_metadata(1)
    assert meta["title"] == "Dune"
    assert "createdAt" in meta
    assert "updatedAt" in meta


def test_persisted_document_format(store, store_path):
    store.put(3, [1.0, 0.0], {"title": "Emma"})

    document = json.loads(store_path.read_text(encoding="utf-8"))

    assert document["embeddings"] == [[3, [1.0, 0.0]]]
    assert document["metadata"][0][0] == 3
    assert document["metadata"][0][1]["title"] == "Emma"
    assert document["version"] == "1.0.0"
    assert "lastUpdated" in document


def test_reload_from_disk(store, store_path):
    store.put(1, [0.5, 0.5], {"title": "Dune"})
    store.put(2, [0.25, 0.75], {"title": "Emma"})

    reloaded = EmbeddingStore(str(store_path))
    reloaded.initialize()

    assert len(reloaded) == 2
    assert reloaded.get(1) == [0.5, 0.5]
    assert reloaded.get(2) == [0.25, 0.75]
    assert reloaded.get_metadata(2)["title"] == "Emma"


def test_overwrite_replaces_metadata_and_keeps_created_at(store):
    store.put(1, [1.0], {"title": "Old", "genre": "Fiction"})
    created = store.get_metadata(1)["createdAt"]

    store.put(1, [2.0], {"title": "New"})

    meta = store.get_metadata(1)
    assert store.get(1) == [2.0]
    assert meta["title"] == "New"
    assert "genre" not in meta
    assert meta["createdAt"] == created
    assert meta["updatedAt"] >= created


def test_remove(store, store_path):
    store.put(1, [1.0], {})
    store.put(2, [2.0], {})

    store.remove(1)

    assert store.get(1) is None
    assert store.get_metadata(1) is None
    reloaded = EmbeddingStore(str(store_path))
    reloaded.initialize()
    assert [r.book_id for r in reloaded.all_records()] == [2]


def test_remove_missing_is_noop(store):
    store.remove(42)
    assert len(store) == 0


def test_clear_all_persists_empty_document(store, store_path):
    store.put(1, [1.0], {})
    store.put(2, [2.0], {})

    store.clear_all()

    assert len(store) == 0
    stats = store.stats()
    assert stats["total_embeddings"] == 0
    assert stats["total_metadata"] == 0
    assert stats["last_updated"] is None
    document = json.loads(store_path.read_text(encoding="utf-8"))
    assert document["embeddings"] == []
    assert document["metadata"] == []


def test_stats(store, store_path):
    store.put(1, [1.0], {})

    stats = store.stats()

    assert stats["total_embeddings"] == 1
    assert stats["total_metadata"] == 1
    assert stats["storage_path"] == str(store_path)
    assert stats["last_updated"] == store.get_metadata(1)["updatedAt"]


def test_corrupt_file_starts_empty(store_path):
    store_path.parent.mkdir(parents=True)
    store_path.write_text("{not json", encoding="utf-8")

    store = EmbeddingStore(str(store_path))
    store.initialize()

    assert len(store) == 0
    # and the next write replaces the corrupt document
    store.put(1, [1.0], {})
    assert json.loads(store_path.read_text(encoding="utf-8"))["embeddings"] == [[1, [1.0]]]


def test_orphan_metadata_dropped_on_load(store_path):
    store_path.parent.mkdir(parents=True)
    store_path.write_text(json.dumps({
        "embeddings": [["1", [1.0, 0.0]]],
        "metadata": [["1", {"title": "Dune"}], [9, {"title": "Ghost"}]],
        "lastUpdated": "2024-01-01T00:00:00+00:00",
        "version": "1.0.0"
    }), encoding="utf-8")

    store = EmbeddingStore(str(store_path))
    store.initialize()

    assert store.get(1) == [1.0, 0.0]
    assert store.get_metadata(1) == {"title": "Dune"}
    assert store.get_metadata(9) is None


def test_write_failure_raises_and_rolls_back(store, store_path, monkeypatch):
    store.put(1, [1.0], {"title": "Dune"})

    def failing_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("librarian.vector.store.os.replace", failing_replace)

    with pytest.raises(StorageIOError):
        store.put(1, [9.0], {"title": "Changed"})
    with pytest.raises(StorageIOError):
        store.put(2, [2.0], {"title": "Emma"})

    assert store.get(1) == [1.0]
    assert store.get_metadata(1)["title"] == "Dune"
    assert store.get(2) is None
    # no temp files left behind
    assert [p.name for p in store_path.parent.iterdir()] == [store_path.name]


def test_non_numeric_vectors_start_empty(store_path):
    store_path.parent.mkdir(parents=True)
    store_path.write_text(json.dumps({
        "embeddings": [[1, ["x"] * 100]],
        "metadata": [[1, {"title": "Dune"}]],
        "lastUpdated": "2024-01-01T00:00:00+00:00",
        "version": "1.0.0"
    }), encoding="utf-8")

    store = EmbeddingStore(str(store_path))
    store.initialize()

    assert len(store) == 0
    assert store.get(1) is None


def test_loaded_vectors_are_floats(store_path):
    store_path.parent.mkdir(parents=True)
    store_path.write_text(json.dumps({"embeddings": [[1, [1, 0]]], "metadata": []}), encoding="utf-8")

    store = EmbeddingStore(str(store_path))
    store.initialize()

    assert store.get(1) == [1.0, 0.0]
    assert all(isinstance(v, float) for v in store.get(1))


def test_remove_write_failure_restores_entry(store, store_path):
    store.put(1, [1.0, 0.0], {"title": "Dune"})

    def failing_persist():
        raise StorageIOError("disk full")

    store._persist = failing_persist

    with pytest.raises(StorageIOError):
        store.remove(1)

    assert store.get(1) == [1.0, 0.0]
    assert store.get_metadata(1)["title"] == "Dune"
    assert json.loads(store_path.read_text(encoding="utf-8"))["embeddings"] == [[1, [1.0, 0.0]]]


def test_clear_all_write_failure_restores_entries(store, store_path):
    store.put(1, [1.0, 0.0], {"title": "Dune"})
    store.put(2, [0.0, 1.0], {"title": "Emma"})

    def failing_persist():
        raise StorageIOError("disk full")

    store._persist = failing_persist

    with pytest.raises(StorageIOError):
        store.clear_all()

    assert len(store) == 2
    assert store.get(2) == [0.0, 1.0]
    assert store.get_metadata(2)["title"] == "Emma"
    assert store.stats()["total_embeddings"] == 2
