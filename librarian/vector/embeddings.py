"""
Embedding providers: text -> fixed-length vector.

Two interchangeable strategies:
- OpenAIEmbedding: remote semantic embeddings (1536 dimensions by default)
- HashEmbedding: deterministic offline bag of hashed words (100 dimensions)
"""

import asyncio
import re
from abc import ABC, abstractmethod
from typing import List, Optional

import numpy as np
import openai
from openai import AsyncOpenAI

from ..core.errors import DimensionMismatchError, EmbeddingServiceError

_TOKEN_PATTERN = re.compile(r"\w+", re.ASCII)
MIN_TOKEN_LENGTH = 3


class IEmbeddingProvider(ABC):
    """Abstract interface for embedding providers."""

    name = "abstract"

    @abstractmethod
    async def embed_text(self, text: str) -> List[float]:
        """Generate embedding vector for given text."""
        pass

    @abstractmethod
    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        pass


def java_string_hash(token: str) -> int:
    """31-multiplier string hash with signed 32-bit wraparound."""
    h = 0
    for ch in token:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


def tokenize(text: str) -> List[str]:
    """Lower-case word tokens, dropping tokens shorter than three characters."""
    return [t for t in _TOKEN_PATTERN.findall((text or "").lower()) if len(t) >= MIN_TOKEN_LENGTH]


def hash_embedding(text: str, dimension: int = 100) -> List[float]:
    """Bag-of-hashed-words vector, L2-normalized. All zeros when no token survives."""
    vector = np.zeros(dimension, dtype=np.float64)
    for token in tokenize(text):
        vector[abs(java_string_hash(token)) % dimension] += 1.0

    norm = np.linalg.norm(vector)
    if norm > 0:
        vector = vector / norm
    return vector.tolist()


class HashEmbedding(IEmbeddingProvider):
    """Deterministic hash-based embedding provider.

    Trades semantic accuracy for zero external dependencies and full
    reproducibility: the same text always yields the same vector, across
    processes and restarts.
    """

    name = "hash"

    def __init__(self, dimension: int = 100):
        self.dimension = dimension

    async def embed_text(self, text: str) -> List[float]:
        return hash_embedding(text, self.dimension)

    def get_dimension(self) -> int:
        return self.dimension


class OpenAIEmbedding(IEmbeddingProvider):
    """Remote semantic embeddings via the OpenAI embeddings API."""

    name = "openai"

    def __init__(self, api_key: Optional[str] = None, model: str = "text-embedding-3-small",
                 dimension: int = 1536, timeout: float = 30.0, client: Optional[AsyncOpenAI] = None):
        self.model = model
        self.dimension = dimension
        self.timeout = timeout
        self._api_key = api_key
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self._api_key, timeout=self.timeout, max_retries=0)
        return self._client

    async def embed_text(self, text: str) -> List[float]:
        """Embed text remotely.

        Raises:
            EmbeddingServiceError: on API error, timeout, or malformed response.
            DimensionMismatchError: when the vector length differs from the configured dimension.
        """
        try:
            response = await asyncio.wait_for(
                self.client.embeddings.create(model=self.model, input=text),
                timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            raise EmbeddingServiceError(f"Embedding request timed out after {self.timeout}s") from e
        except openai.OpenAIError as e:
            raise EmbeddingServiceError(f"Embedding request failed: {e}") from e

        try:
            embedding = list(response.data[0].embedding)
        except (AttributeError, IndexError, TypeError) as e:
            raise EmbeddingServiceError("Invalid response format from embeddings API") from e

        if len(embedding) != self.dimension:
            raise DimensionMismatchError(self.dimension, len(embedding))

        return embedding

    def get_dimension(self) -> int:
        return self.dimension
