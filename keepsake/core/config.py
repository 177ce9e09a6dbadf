"""
Runtime configuration, read from environment variables.
"""

import os
from pathlib import Path

# Database path configuration
DB_PATH = os.getenv("DB_PATH", "./data/keepsake.db")

DEBUG = os.getenv("DEBUG", "false").lower() == "true"

# Embedding configuration
EMBED_PROVIDER = os.getenv("EMBED_PROVIDER", "sentence-transformers")  # hash|sentence-transformers|ollama
EMBED_MODEL_NAME = os.getenv("EMBED_MODEL_NAME", "all-mpnet-base-v2")
EMBED_DIM = int(os.getenv("EMBED_DIM", "384"))
EMBED_MAX_CHARS = int(os.getenv("EMBED_MAX_CHARS", "8000"))

# Generation configuration
OLLAMA_HOST = os.getenv("OLLAMA_HOST", "http://localhost:11434")
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "llama3.2")
LLM_TIMEOUT_SEC = float(os.getenv("LLM_TIMEOUT_SEC", "120"))
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.2"))

# Retrieval configuration
RAG_DEFAULT_LIMIT = int(os.getenv("RAG_DEFAULT_LIMIT", "5"))
SEARCH_DEFAULT_LIMIT = int(os.getenv("SEARCH_DEFAULT_LIMIT", "20"))
CONTEXT_DOC_CHARS = int(os.getenv("CONTEXT_DOC_CHARS", "1000"))

# Capture configuration
ENRICHMENT_ENABLED = os.getenv("ENRICHMENT_ENABLED", "true").lower() == "true"

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]

VALID_EMBED_PROVIDERS = ["hash", "sentence-transformers", "ollama"]

# Version string
VERSION = "0.3.0"


def get_embedding_provider():
    """Get configured embedding provider implementation."""
    provider = os.getenv("EMBED_PROVIDER", EMBED_PROVIDER)

    if provider == "hash":
        from ..vector.embeddings import DeterministicHashEmbedding
        return DeterministicHashEmbedding(dimension=EMBED_DIM)
    elif provider == "ollama":
        from ..vector.embeddings import OllamaEmbedding
        return OllamaEmbedding(
            model_name=EMBED_MODEL_NAME,
            host=OLLAMA_HOST,
            timeout=LLM_TIMEOUT_SEC
        )
    else:
        from ..vector.embeddings import SentenceTransformerEmbedding
        return SentenceTransformerEmbedding(EMBED_MODEL_NAME)


def get_generation_provider():
    """Get configured text generation provider implementation."""
    from ..rag.generator import OllamaGenerationProvider
    return OllamaGenerationProvider(
        model_name=OLLAMA_MODEL,
        host=OLLAMA_HOST,
        timeout=LLM_TIMEOUT_SEC,
        temperature=LLM_TEMPERATURE
    )


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def enrichment_enabled():
    """Check if AI enrichment of captured content is enabled."""
    return os.getenv("ENRICHMENT_ENABLED", "true").lower() == "true"


def ensure_db_directory(db_path: str = None):
    """Ensure the database directory exists."""
    Path(db_path or DB_PATH).parent.mkdir(parents=True, exist_ok=True)


def validate_config():
    """Validate configuration and return any issues."""
    issues = []

    provider = os.getenv("EMBED_PROVIDER", EMBED_PROVIDER)
    if provider not in VALID_EMBED_PROVIDERS:
        issues.append(f"Invalid EMBED_PROVIDER: {provider}")

    if EMBED_DIM < 1:
        issues.append("EMBED_DIM must be >= 1")

    if EMBED_MAX_CHARS < 1:
        issues.append("EMBED_MAX_CHARS must be >= 1")

    if LLM_TIMEOUT_SEC <= 0:
        issues.append("LLM_TIMEOUT_SEC must be > 0")

    if RAG_DEFAULT_LIMIT < 1 or SEARCH_DEFAULT_LIMIT < 1:
        issues.append("RAG_DEFAULT_LIMIT and SEARCH_DEFAULT_LIMIT must be >= 1")

    if CONTEXT_DOC_CHARS < 1:
        issues.append("CONTEXT_DOC_CHARS must be >= 1")

    return issues
