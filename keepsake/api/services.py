"""
Lazily built service singletons for the API, used as FastAPI dependencies.

Tests replace them through app.dependency_overrides or reset_services().
"""

import threading

from ..core import config
from ..core.capture import CaptureService
from ..core.dao import ContentStore
from ..core.search_service import Retriever
from ..rag.analyzer import ContentAnalyzer
from ..rag.generator import AnswerGenerator
from ..rag.orchestrator import RAGService
from ..vector.embeddings import EmbeddingClient

_store = None
_embedding_client = None
_generation_provider = None
# Sync endpoints run in a threadpool
_lock = threading.Lock()


def get_store() -> ContentStore:
    global _store
    with _lock:
        if _store is None:
            _store = ContentStore(config.DB_PATH)
        return _store


def get_embedding_client() -> EmbeddingClient:
    global _embedding_client
    with _lock:
        if _embedding_client is None:
            _embedding_client = EmbeddingClient(config.get_embedding_provider())
        return _embedding_client


def get_generation_provider():
    global _generation_provider
    with _lock:
        if _generation_provider is None:
            _generation_provider = config.get_generation_provider()
        return _generation_provider


def get_retriever() -> Retriever:
    return Retriever(get_embedding_client(), get_store())


def get_rag_service() -> RAGService:
    return RAGService(
        get_retriever(),
        AnswerGenerator(get_generation_provider()),
        doc_chars=config.CONTEXT_DOC_CHARS
    )


def get_capture_service() -> CaptureService:
    analyzer = ContentAnalyzer(get_generation_provider()) if config.enrichment_enabled() else None
    return CaptureService(get_store(), get_embedding_client(), analyzer)


def reset_services():
    """Drop cached singletons so the next request rebuilds them from config."""
    global _store, _embedding_client, _generation_provider
    with _lock:
        _store = None
        _embedding_client = None
        _generation_provider = None
