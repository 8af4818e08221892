"""
In-memory similarity index over the loaded catalog snapshot.
"""

from typing import List, Sequence

import numpy as np

from .types import BookRecord, ScoredBook


def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """Cosine similarity in [-1, 1].

    Vectors of unequal length are compared over their overlapping prefix.
    Returns 0.0 when either vector has zero norm.
    """
    if vec_a is None or vec_b is None:
        return 0.0

    length = min(len(vec_a), len(vec_b))
    a = np.asarray(vec_a[:length], dtype=np.float64)
    b = np.asarray(vec_b[:length], dtype=np.float64)

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    return float(np.dot(a, b) / (norm_a * norm_b))


class SimilarityIndex:
    """Parallel arrays books[i] <-> embeddings[i], ranked by cosine similarity."""

    def __init__(self, books: List[BookRecord] = None, embeddings: List[List[float]] = None):
        books = list(books or [])
        embeddings = list(embeddings or [])
        if len(books) != len(embeddings):
            raise ValueError(f"Index needs one embedding per book ({len(books)} books, {len(embeddings)} embeddings)")
        self._books = books
        self._embeddings = embeddings

    @property
    def books(self) -> List[BookRecord]:
        return list(self._books)

    @property
    def embeddings(self) -> List[List[float]]:
        return list(self._embeddings)

    def __len__(self) -> int:
        return len(self._books)

    def search(self, query_vector: Sequence[float], top_k: int = 5) -> List[ScoredBook]:
        """Return up to top_k books by descending similarity, ties in catalog order."""
        if top_k <= 0 or not self._books:
            return []

        scores = [cosine_similarity(query_vector, embedding) for embedding in self._embeddings]

        # sorted() is stable, so equal scores keep catalog order
        ranked = sorted(range(len(scores)), key=lambda i: scores[i], reverse=True)

        return [ScoredBook(book=self._books[i], similarity=scores[i]) for i in ranked[:top_k]]
