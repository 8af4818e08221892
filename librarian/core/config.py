"""
Librarian configuration.
Constants are read from the environment at import time; the accessor functions
re-read the environment so behaviour can be switched at runtime.
"""

import os
from pathlib import Path

# Catalog database
DB_PATH = os.getenv("DB_PATH", "./data/library.db")

# Durable embedding document
VECTOR_STORE_PATH = os.getenv("VECTOR_STORE_PATH", "./data/vector_storage.json")
VECTOR_STORE_VERSION = "1.0.0"

# Embedding generation
EMBED_PROVIDER = os.getenv("EMBED_PROVIDER", "openai")  # openai|hash
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_EMBED_MODEL = os.getenv("OPENAI_EMBED_MODEL", "text-embedding-3-small")
EMBED_DIM = int(os.getenv("EMBED_DIM", "1536"))
HASH_EMBED_DIM = int(os.getenv("HASH_EMBED_DIM", "100"))
EMBED_TIMEOUT_SEC = float(os.getenv("EMBED_TIMEOUT_SEC", "30"))

# Response composition
CHAT_PROVIDER = os.getenv("CHAT_PROVIDER", "openai")  # openai|ollama|none
OPENAI_CHAT_MODEL = os.getenv("OPENAI_CHAT_MODEL", "gpt-4o-mini")
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "llama3.1:8b")
OLLAMA_HOST = os.getenv("OLLAMA_HOST")
CHAT_TIMEOUT_SEC = float(os.getenv("CHAT_TIMEOUT_SEC", "30"))
CHAT_TEMPERATURE = float(os.getenv("CHAT_TEMPERATURE", "0.7"))
RECOMMEND_MAX_TOKENS = int(os.getenv("RECOMMEND_MAX_TOKENS", "400"))
GENERAL_MAX_TOKENS = int(os.getenv("GENERAL_MAX_TOKENS", "200"))

# Chat route
SEARCH_TOP_K = int(os.getenv("SEARCH_TOP_K", "5"))
CHAT_RESULT_LIMIT = int(os.getenv("CHAT_RESULT_LIMIT", "3"))
CHAT_API_ENABLED = os.getenv("CHAT_API_ENABLED", "true").lower() == "true"
INIT_ON_STARTUP = os.getenv("INIT_ON_STARTUP", "true").lower() == "true"

DEBUG = os.getenv("DEBUG", "false").lower() == "true"

# Version string
VERSION = "1.0.0"

VALID_EMBED_PROVIDERS = ["openai", "hash"]
VALID_CHAT_PROVIDERS = ["openai", "ollama", "none"]


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def init_on_startup_enabled():
    """Check if the recommendation index should be built when the app starts."""
    return os.getenv("INIT_ON_STARTUP", "true").lower() == "true"


def get_db_path() -> str:
    """Current catalog database path."""
    return os.getenv("DB_PATH", DB_PATH)


def get_vector_store_path() -> str:
    """Current location of the durable embedding document."""
    return os.getenv("VECTOR_STORE_PATH", VECTOR_STORE_PATH)


def ensure_db_directory():
    """Ensure the database directory exists."""
    Path(get_db_path()).parent.mkdir(parents=True, exist_ok=True)


def get_openai_api_key():
    return os.getenv("OPENAI_API_KEY", OPENAI_API_KEY or "") or None


def get_embed_provider_name() -> str:
    """Effective embedding strategy: openai only when a credential is available."""
    name = os.getenv("EMBED_PROVIDER", EMBED_PROVIDER).lower()
    if name == "openai" and not get_openai_api_key():
        return "hash"
    if name not in VALID_EMBED_PROVIDERS:
        return "hash"
    return name


def get_chat_provider_name() -> str:
    name = os.getenv("CHAT_PROVIDER", CHAT_PROVIDER).lower()
    if name == "openai" and not get_openai_api_key():
        return "none"
    if name not in VALID_CHAT_PROVIDERS:
        return "none"
    return name


def get_embedding_provider():
    """Get the configured embedding provider implementation."""
    if get_embed_provider_name() == "openai":
        from librarian.vector.embeddings import OpenAIEmbedding
        return OpenAIEmbedding(
            api_key=get_openai_api_key(),
            model=OPENAI_EMBED_MODEL,
            dimension=EMBED_DIM,
            timeout=EMBED_TIMEOUT_SEC
        )

    from librarian.vector.embeddings import HashEmbedding
    return HashEmbedding(dimension=HASH_EMBED_DIM)


def get_primary_responder():
    """Get the configured remote chat responder, or None for rule-based only."""
    name = get_chat_provider_name()
    if name == "openai":
        from librarian.agents.openai_agent import OpenAIResponder
        return OpenAIResponder(
            api_key=get_openai_api_key(),
            model=OPENAI_CHAT_MODEL,
            timeout=CHAT_TIMEOUT_SEC
        )
    elif name == "ollama":
        from librarian.agents.ollama_agent import OllamaResponder
        return OllamaResponder(
            model=OLLAMA_MODEL,
            host=OLLAMA_HOST,
            timeout=CHAT_TIMEOUT_SEC
        )
    return None


def validate_config():
    """Validate configuration and return any issues."""
    issues = []

    embed_provider = os.getenv("EMBED_PROVIDER", EMBED_PROVIDER).lower()
    if embed_provider not in VALID_EMBED_PROVIDERS:
        issues.append(f"Invalid EMBED_PROVIDER: {embed_provider}")
    elif embed_provider == "openai" and not get_openai_api_key():
        issues.append("EMBED_PROVIDER=openai requires OPENAI_API_KEY; using hash embeddings")

    chat_provider = os.getenv("CHAT_PROVIDER", CHAT_PROVIDER).lower()
    if chat_provider not in VALID_CHAT_PROVIDERS:
        issues.append(f"Invalid CHAT_PROVIDER: {chat_provider}")

    if EMBED_DIM < 1:
        issues.append("EMBED_DIM must be >= 1")

    if HASH_EMBED_DIM < 1:
        issues.append("HASH_EMBED_DIM must be >= 1")

    if EMBED_TIMEOUT_SEC <= 0 or CHAT_TIMEOUT_SEC <= 0:
        issues.append("EMBED_TIMEOUT_SEC and CHAT_TIMEOUT_SEC must be > 0")

    if SEARCH_TOP_K < 1:
        issues.append("SEARCH_TOP_K must be >= 1")

    if CHAT_RESULT_LIMIT < 0:
        issues.append("CHAT_RESULT_LIMIT must be >= 0")

    return issues
