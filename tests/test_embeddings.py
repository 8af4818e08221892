"""
Embedding providers: deterministic hash fallback and the OpenAI remote strategy.
"""

import asyncio
import math
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from librarian.core.errors import DimensionMismatchError, EmbeddingServiceError
from librarian.vector.embeddings import (
    HashEmbedding,
    IEmbeddingProvider,
    OpenAIEmbedding,
    hash_embedding,
    java_string_hash,
    tokenize
)


def test_java_string_hash_known_values():
    assert java_string_hash("") == 0
    assert java_string_hash("abc") == 96354
    assert java_string_hash("hello") == 99162322


def test_java_string_hash_wraps_to_signed_32_bit():
    # overflows past 2**31 and comes back negative
    assert java_string_hash("polygenelubricants") == -2147483648
    assert java_string_hash("dragon") == -1323778541


def test_tokenize_drops_short_tokens_and_punctuation():
    assert tokenize("The Hobbit, by J.R.R. Tolkien!") == ["the", "hobbit", "tolkien"]
    assert tokenize("") == []
    assert tokenize(None) == []


def test_hash_embedding_is_unit_length():
    vector = hash_embedding("A story of the fabulously wealthy Jay Gatsby", 100)

    assert len(vector) == 100
    assert math.isclose(math.sqrt(sum(v * v for v in vector)), 1.0, rel_tol=1e-9)


def test_hash_embedding_is_deterministic():
    text = "Sherlock Holmes investigates the legend of a hound"
    assert hash_embedding(text) == hash_embedding(text)
    assert HashEmbedding(100).dimension == 100


def test_hash_embedding_all_short_tokens_is_zero_vector():
    vector = hash_embedding("a an of to", 100)
    assert vector == [0.0] * 100


def test_hash_embedding_buckets_by_token_hash():
    vector = hash_embedding("abc", 100)
    assert vector[96354 % 100] == 1.0
    assert sum(vector) == 1.0


def test_hash_embedding_counts_repeated_tokens():
    vector = hash_embedding("dragon dragon castle", 100)
    dragon = vector[abs(java_string_hash("dragon")) % 100]
    castle = vector[abs(java_string_hash("castle")) % 100]
    assert math.isclose(dragon, 2 * castle)


def test_hash_provider_interface():
    provider = HashEmbedding(dimension=64)

    assert isinstance(provider, IEmbeddingProvider)
    assert provider.name == "hash"
    assert provider.get_dimension() == 64

    vector = asyncio.run(provider.embed_text("fantasy adventure with dragons"))
    assert len(vector) == 64


def _openai_client(create):
    client = MagicMock()
    client.embeddings.create = create
    return client


def _embedding_response(vector):
    return SimpleNamespace(data=[SimpleNamespace(embedding=vector)])


class TestOpenAIEmbedding:
    """Remote embeddings with a mocked AsyncOpenAI client."""

    def test_returns_vector(self):
        create = AsyncMock(return_value=_embedding_response([0.1, 0.2, 0.3, 0.4]))
        provider = OpenAIEmbedding(model="text-embedding-3-small", dimension=4, client=_openai_client(create))

        vector = asyncio.run(provider.embed_text("space opera"))

        assert vector == [0.1, 0.2, 0.3, 0.4]
        create.assert_awaited_once_with(model="text-embedding-3-small", input="space opera")
        assert provider.get_dimension() == 4
        assert provider.name == "openai"

    def test_dimension_mismatch(self):
        create = AsyncMock(return_value=_embedding_response([0.1, 0.2, 0.3]))
        provider = OpenAIEmbedding(dimension=4, client=_openai_client(create))

        with pytest.raises(DimensionMismatchError) as exc_info:
            asyncio.run(provider.embed_text("space opera"))

        assert exc_info.value.expected == 4
        assert exc_info.value.actual == 3
        assert isinstance(exc_info.value, EmbeddingServiceError)

    def test_api_error_becomes_embedding_service_error(self):
        request = httpx.Request("POST", "https://api.openai.com/v1/embeddings")
        create = AsyncMock(side_effect=openai.APIConnectionError(request=request))
        provider = OpenAIEmbedding(dimension=4, client=_openai_client(create))

        with pytest.raises(EmbeddingServiceError):
            asyncio.run(provider.embed_text("space opera"))

    def test_malformed_response(self):
        create = AsyncMock(return_value=SimpleNamespace(data=[]))
        provider = OpenAIEmbedding(dimension=4, client=_openai_client(create))

        with pytest.raises(EmbeddingServiceError, match="Invalid response format"):
            asyncio.run(provider.embed_text("space opera"))

    def test_timeout(self):
        async def slow_create(**kwargs):
            await asyncio.sleep(1)
            return _embedding_response([0.0] * 4)

        provider = OpenAIEmbedding(dimension=4, timeout=0.01, client=_openai_client(slow_create))

        with pytest.raises(EmbeddingServiceError, match="timed out"):
            asyncio.run(provider.embed_text("space opera"))
