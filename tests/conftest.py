"""
Shared fixtures: a throwaway SQLite store and controllable fake providers.
"""

from datetime import timedelta

import pytest

from keepsake.core.dao import ContentStore
from keepsake.core.schema import ContentItem, DocumentPayload, Embedding, utcnow
from keepsake.rag.generator import IGenerationProvider
from keepsake.vector.embeddings import IEmbeddingProvider


class StaticEmbeddingProvider(IEmbeddingProvider):
    """Returns preset vectors by text, and a default vector for anything else."""

    def __init__(self, vectors=None, default=None, model="static-test"):
        self.vectors = vectors or {}
        self.default = default if default is not None else [1.0, 0.0]
        self._model = model
        self.calls = []

    @property
    def model_name(self):
        return self._model

    def embed_text(self, text):
        self.calls.append(text)
        return self.vectors.get(text, self.default)

    def get_dimension(self):
        return len(self.default)


class StaticGenerationProvider(IGenerationProvider):
    """Returns a fixed response and records every prompt."""

    def __init__(self, response="A generated answer.", model_name="static-llm"):
        self.response = response
        self.model_name = model_name
        self.prompts = []

    def generate_text(self, prompt, images=None):
        self.prompts.append(prompt)
        return self.response


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "keepsake_test.db")


@pytest.fixture
def store(db_path):
    return ContentStore(db_path)


@pytest.fixture
def make_document():
    """Factory for embedded document items."""
    def _make(title="Doc", vector=(1.0, 0.0), model="static-test", days_ago=0, content="body text", tags=None):
        embedding = Embedding(vector=list(vector), model=model) if vector is not None else None
        return ContentItem(
            title=title,
            description=f"About {title}",
            payload=DocumentPayload(content=content),
            tags=set(tags or []),
            timestamp=utcnow() - timedelta(days=days_ago),
            embedding=embedding,
            embedding_hash="seed" if embedding else None,
        )
    return _make
