"""
Provider selection and configuration validation.
"""

from librarian.agents.ollama_agent import OllamaResponder
from librarian.agents.openai_agent import OpenAIResponder
from librarian.core.config import (
    get_chat_provider_name,
    get_embed_provider_name,
    get_embedding_provider,
    get_primary_responder,
    validate_config
)
from librarian.vector.embeddings import HashEmbedding, OpenAIEmbedding


def test_openai_embeddings_with_key(monkeypatch):
    monkeypatch.setenv("EMBED_PROVIDER", "openai")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    provider = get_embedding_provider()

    assert get_embed_provider_name() == "openai"
    assert isinstance(provider, OpenAIEmbedding)
    assert provider.get_dimension() == 1536


def test_hash_embeddings_without_key(monkeypatch):
    monkeypatch.setenv("EMBED_PROVIDER", "openai")
    monkeypatch.setenv("OPENAI_API_KEY", "")

    provider = get_embedding_provider()

    assert get_embed_provider_name() == "hash"
    assert isinstance(provider, HashEmbedding)
    assert provider.get_dimension() == 100


def test_unknown_embed_provider_uses_hash(monkeypatch):
    monkeypatch.setenv("EMBED_PROVIDER", "word2vec")
    assert get_embed_provider_name() == "hash"
    assert "Invalid EMBED_PROVIDER: word2vec" in validate_config()


def test_chat_provider_selection(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    monkeypatch.setenv("CHAT_PROVIDER", "openai")
    assert isinstance(get_primary_responder(), OpenAIResponder)

    monkeypatch.setenv("CHAT_PROVIDER", "ollama")
    assert isinstance(get_primary_responder(), OllamaResponder)

    monkeypatch.setenv("CHAT_PROVIDER", "none")
    assert get_primary_responder() is None


def test_openai_chat_without_key_is_rule_based_only(monkeypatch):
    monkeypatch.setenv("CHAT_PROVIDER", "openai")
    monkeypatch.setenv("OPENAI_API_KEY", "")

    assert get_chat_provider_name() == "none"
    assert get_primary_responder() is None


def test_validate_config_reports_missing_key(monkeypatch):
    monkeypatch.setenv("EMBED_PROVIDER", "openai")
    monkeypatch.setenv("CHAT_PROVIDER", "none")
    monkeypatch.setenv("OPENAI_API_KEY", "")

    issues = validate_config()

    assert any("OPENAI_API_KEY" in issue for issue in issues)


def test_validate_config_clean(monkeypatch):
    monkeypatch.setenv("EMBED_PROVIDER", "hash")
    monkeypatch.setenv("CHAT_PROVIDER", "none")

    assert validate_config() == []
