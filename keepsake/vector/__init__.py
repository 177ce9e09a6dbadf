"""
Embedding providers and cosine similarity ranking.
"""

from .embeddings import (
    IEmbeddingProvider,
    DeterministicHashEmbedding,
    SentenceTransformerEmbedding,
    OllamaEmbedding,
    EmbeddingClient,
)
from .similarity import cosine_similarity, rank_by_similarity

__all__ = [
    'IEmbeddingProvider',
    'DeterministicHashEmbedding',
    'SentenceTransformerEmbedding',
    'OllamaEmbedding',
    'EmbeddingClient',
    'cosine_similarity',
    'rank_by_similarity'
]
