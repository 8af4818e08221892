"""
Durable book id -> embedding map.

The whole map is persisted as one JSON document after every mutation:

    {
      "embeddings": [[book_id, [floats...]], ...],
      "metadata":   [[book_id, {...}], ...],
      "lastUpdated": "<iso timestamp>",
      "version": "1.0.0"
    }

Writes go to a temporary file in the same directory which then replaces the
document, so a crash mid-write never leaves a truncated file behind.
"""

import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.config import VECTOR_STORE_VERSION, get_vector_store_path
from ..core.errors import StorageIOError
from .types import EmbeddingRecord
from util.logging import logger


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class EmbeddingStore:
    """JSON-document backed embedding store keyed by catalog book id."""

    def __init__(self, storage_path: Optional[str] = None):
        self.storage_path = Path(storage_path or get_vector_store_path())
        self._embeddings: Dict[int, List[float]] = {}
        self._metadata: Dict[int, Dict[str, Any]] = {}

    def initialize(self) -> None:
        """Create the storage directory and load any persisted document.

        A missing or unreadable document is not an error: the store starts empty.
        """
        self.storage_path.parent.mkdir(parents=True, exist_ok=True)

        self._embeddings = {}
        self._metadata = {}

        try:
            with open(self.storage_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.info(f"No existing vector storage at {self.storage_path}, starting fresh")
            return
        except (OSError, ValueError) as e:
            logger.warning(f"Unreadable vector storage at {self.storage_path}, starting fresh: {e}")
            return

        if not isinstance(data, dict):
            logger.warning(f"Unexpected vector storage format at {self.storage_path}, starting fresh")
            return

        try:
            embeddings = {
                int(book_id): [float(value) for value in vector]
                for book_id, vector in data.get("embeddings") or []
            }
            metadata = {int(book_id): dict(meta or {}) for book_id, meta in data.get("metadata") or []}
        except (TypeError, ValueError) as e:
            logger.warning(f"Malformed vector storage entries, starting fresh: {e}")
            return

        orphaned = set(metadata) - set(embeddings)
        if orphaned:
            logger.warning(f"Dropping metadata without vectors for books {sorted(orphaned)}")

        self._embeddings = embeddings
        self._metadata = {book_id: metadata.get(book_id, {}) for book_id in embeddings}

        logger.log_operation("store.load", "success", {
            "embeddings": len(self._embeddings),
            "path": str(self.storage_path)
        })

    def get(self, book_id: int) -> Optional[List[float]]:
        return self._embeddings.get(book_id)

    def get_metadata(self, book_id: int) -> Optional[Dict[str, Any]]:
        return self._metadata.get(book_id)

    def put(self, book_id: int, vector: List[float], metadata: Dict[str, Any] = None) -> None:
        """Upsert a vector and its metadata, then persist the whole map.

        Metadata is replaced, not merged; createdAt survives an overwrite.

        Raises:
            StorageIOError: the document could not be written. The in-memory
                map is rolled back to its previous state.
        """
        previous_vector = self._embeddings.get(book_id)
        previous_metadata = self._metadata.get(book_id)

        now = _now_iso()
        entry = dict(metadata or {})
        entry["createdAt"] = (previous_metadata or {}).get("createdAt", now)
        entry["updatedAt"] = now

        self._embeddings[book_id] = list(vector)
        self._metadata[book_id] = entry

        try:
            self._persist()
        except StorageIOError:
            if previous_vector is None:
                self._embeddings.pop(book_id, None)
                self._metadata.pop(book_id, None)
            else:
                self._embeddings[book_id] = previous_vector
                self._metadata[book_id] = previous_metadata
            logger.log_embedding_operation("save", book_id, status="failed")
            raise

        logger.log_embedding_operation("save", book_id, {"dimension": len(vector)})

    def remove(self, book_id: int) -> None:
        """Delete a book's entry and persist.

        Raises:
            StorageIOError: the document could not be written. The entry is restored.
        """
        previous_vector = self._embeddings.pop(book_id, None)
        previous_metadata = self._metadata.pop(book_id, None)

        try:
            self._persist()
        except StorageIOError:
            if previous_vector is not None:
                self._embeddings[book_id] = previous_vector
                self._metadata[book_id] = previous_metadata or {}
            logger.log_embedding_operation("remove", book_id, status="failed")
            raise

        logger.log_embedding_operation("remove", book_id)

    def clear_all(self) -> None:
        """Empty the store and persist an empty document.

        Raises:
            StorageIOError: the document could not be written. Every entry is restored.
        """
        previous_embeddings = self._embeddings
        previous_metadata = self._metadata
        self._embeddings = {}
        self._metadata = {}

        try:
            self._persist()
        except StorageIOError:
            self._embeddings = previous_embeddings
            self._metadata = previous_metadata
            logger.log_operation("store.clear", "failed", {"path": str(self.storage_path)})
            raise

        logger.log_operation("store.clear", "success", {"path": str(self.storage_path)})

    def all_records(self) -> List[EmbeddingRecord]:
        return [
            EmbeddingRecord(book_id=book_id, vector=vector, metadata=self._metadata.get(book_id, {}))
            for book_id, vector in self._embeddings.items()
        ]

    def stats(self) -> Dict[str, Any]:
        updated = [m.get("updatedAt") for m in self._metadata.values() if m.get("updatedAt")]
        return {
            "total_embeddings": len(self._embeddings),
            "total_metadata": len(self._metadata),
            "storage_path": str(self.storage_path),
            "last_updated": max(updated) if updated else None
        }

    def __len__(self) -> int:
        return len(self._embeddings)

    def __contains__(self, book_id: int) -> bool:
        return book_id in self._embeddings

    def _persist(self) -> None:
        document = {
            "embeddings": [[book_id, vector] for book_id, vector in self._embeddings.items()],
            "metadata": [[book_id, self._metadata.get(book_id, {})] for book_id in self._embeddings],
            "lastUpdated": _now_iso(),
            "version": VECTOR_STORE_VERSION
        }

        tmp_path = None
        try:
            self.storage_path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile("w", dir=self.storage_path.parent, suffix=".tmp",
                                             delete=False, encoding="utf-8") as tmp_file:
                tmp_path = tmp_file.name
                json.dump(document, tmp_file)
                tmp_file.flush()
                os.fsync(tmp_file.fileno())
            os.replace(tmp_path, self.storage_path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StorageIOError(f"Failed to persist vector storage to {self.storage_path}: {e}") from e
