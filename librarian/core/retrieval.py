"""
Retrieval orchestrator for book recommendations.

Coordinates the catalog, the durable embedding store, the embedding provider
and the in-memory similarity index:

    Uninitialized -> Initializing -> Ready
                                  -> Failed  (next call retries from scratch)

A partial index is never served: initialization either embeds every catalog
book or fails.
"""

import asyncio
from enum import Enum
from typing import Any, Dict, List, Optional

from .errors import EmbeddingServiceError, IndexNotReadyError, InitializationFailedError
from ..vector.embeddings import IEmbeddingProvider
from ..vector.index import SimilarityIndex
from ..vector.store import EmbeddingStore
from ..vector.types import BookRecord, ScoredBook
from util.logging import logger


class IndexState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"


class RetrievalService:
    """
    Process-wide recommendation index.
    Construct once at startup and share; initialize() and refresh() are
    serialized by a lock so concurrent callers never duplicate embedding calls.
    """

    def __init__(self, catalog, store: EmbeddingStore, embedding_provider: IEmbeddingProvider):
        self.catalog = catalog
        self.store = store
        self.embedding_provider = embedding_provider

        self.state = IndexState.UNINITIALIZED
        self.is_initialized = False
        self.uses_real_embeddings = False
        self._index = SimilarityIndex()
        self._store_loaded = False
        self._lock = asyncio.Lock()

    @property
    def books(self) -> List[BookRecord]:
        return self._index.books

    @property
    def embeddings(self) -> List[List[float]]:
        return self._index.embeddings

    @property
    def is_ready(self) -> bool:
        """Ready to serve queries: initialized with a full set of embeddings."""
        return self.is_initialized and self.uses_real_embeddings

    async def initialize(self) -> None:
        """Build the index. No-op when already Ready.

        Raises:
            InitializationFailedError: an embedding could not be generated or
                the store does not hold one vector per catalog book.
            StorageIOError: a generated vector could not be persisted.
        """
        if self.state == IndexState.READY:
            return

        async with self._lock:
            # another caller may have finished while we waited
            if self.state == IndexState.READY:
                return
            await self._build_index()

    async def refresh(self) -> None:
        """Drop every stored vector and rebuild the index from the catalog."""
        async with self._lock:
            logger.log_index_event("refresh", "started")
            self._reset()
            self._load_store()
            self.store.clear_all()
            await self._build_index()
            logger.log_index_event("refresh", "success", {"books": len(self._index)})

    async def search(self, query: str, top_k: int = 5) -> List[ScoredBook]:
        """Top-k catalog books for a free-text query, annotated with similarity.

        Raises:
            IndexNotReadyError: the index holds no books after initialization.
            InitializationFailedError: lazy initialization failed.
            EmbeddingServiceError: the query could not be embedded.
        """
        if not self.is_ready:
            await self.initialize()

        if not self.uses_real_embeddings or len(self._index) == 0:
            raise IndexNotReadyError("Index not properly initialized with embeddings")

        query_vector = await self.embedding_provider.embed_text(query)
        results = self._index.search(query_vector, top_k)

        logger.log_index_event("search", "success", {
            "query": query[:50],
            "top_k": top_k,
            "results": len(results),
            "best": round(results[0].similarity, 4) if results else None
        })
        return results

    async def get_book_by_id(self, book_id: int) -> Optional[BookRecord]:
        """Direct catalog read, bypassing the index."""
        return await self.catalog.get_book_by_id(book_id)

    def status(self) -> Dict[str, Any]:
        return {
            "is_initialized": self.is_initialized,
            "uses_real_embeddings": self.uses_real_embeddings,
            "book_count": len(self._index),
            "embedding_count": len(self._index.embeddings),
            "has_embeddings": len(self._index) > 0,
            "embedding_provider": self.embedding_provider.name,
            "state": self.state.value,
            "store": self.store.stats()
        }

    def _reset(self) -> None:
        self.state = IndexState.UNINITIALIZED
        self.is_initialized = False
        self.uses_real_embeddings = False
        self._index = SimilarityIndex()

    def _load_store(self) -> None:
        if not self._store_loaded:
            self.store.initialize()
            self._store_loaded = True

    async def _build_index(self) -> None:
        self.state = IndexState.INITIALIZING
        logger.log_index_event("initialize", "started", {"provider": self.embedding_provider.name})

        try:
            self._load_store()
            books = await self.catalog.list_all_books()

            if not books:
                logger.log_index_event("initialize", "success", {"books": 0})
                self._index = SimilarityIndex()
                self.is_initialized = True
                self.state = IndexState.READY
                return

            generated = await self._embed_missing(books)

            vectors = [self.store.get(book.id) for book in books]
            embedded_count = sum(1 for vector in vectors if vector is not None)
            if embedded_count != len(books):
                raise InitializationFailedError(
                    f"Only {embedded_count} embeddings available for {len(books)} books"
                )

            self._index = SimilarityIndex(books, vectors)
            self.uses_real_embeddings = True
            self.is_initialized = True
            self.state = IndexState.READY

            logger.log_index_event("initialize", "success", {
                "books": len(books),
                "generated": generated,
                "reused": len(books) - generated,
                "dimension": self.embedding_provider.get_dimension()
            })
        except Exception as e:
            self._reset()
            self.state = IndexState.FAILED
            logger.log_index_event("initialize", "failed", {"error": f"{type(e).__name__}: {e}"})
            raise

    async def _embed_missing(self, books: List[BookRecord]) -> int:
        """Embed books without a usable stored vector, one at a time in catalog order."""
        dimension = self.embedding_provider.get_dimension()
        generated = 0

        for position, book in enumerate(books, start=1):
            existing = self.store.get(book.id)
            if existing is not None and len(existing) == dimension:
                continue

            try:
                vector = await self.embedding_provider.embed_text(book.embedding_text())
            except EmbeddingServiceError as e:
                raise InitializationFailedError(
                    f"Embedding generation failed for book {book.id} ({book.title}) - "
                    "cannot proceed without a complete index"
                ) from e

            if len(vector) != dimension:
                raise InitializationFailedError(
                    f"Invalid embedding for book {book.id}: expected {dimension} values, got {len(vector)}"
                )

            self.store.put(book.id, vector, book.metadata())
            generated += 1
            logger.log_embedding_operation("generate", book.id, {
                "title": book.title,
                "status": book.status.value,
                "position": f"{position}/{len(books)}"
            })

        return generated
