"""
Book embedding layer: providers, durable store and similarity index.
Advisory overlay over the SQLite catalog, which stays the source of truth.
"""

from .types import BookRecord, BookStatus, EmbeddingRecord, ScoredBook
from .embeddings import IEmbeddingProvider, HashEmbedding, OpenAIEmbedding, hash_embedding
from .index import SimilarityIndex, cosine_similarity
from .store import EmbeddingStore

__all__ = [
    'BookRecord',
    'BookStatus',
    'EmbeddingRecord',
    'ScoredBook',
    'IEmbeddingProvider',
    'HashEmbedding',
    'OpenAIEmbedding',
    'hash_embedding',
    'SimilarityIndex',
    'cosine_similarity',
    'EmbeddingStore'
]
