"""
Embedding providers and the embedding client used by capture, retrieval and reconcile.
"""

from abc import ABC, abstractmethod
import hashlib
from typing import List

import httpx
import numpy as np
import ollama
from sentence_transformers import SentenceTransformer

from ..core.errors import EmbeddingUnavailable
from ..core.schema import Embedding
from ..util.logging import logger

# Provider failures, including malformed or incomplete responses
UPSTREAM_ERRORS = (
    ollama.ResponseError, httpx.HTTPError, ConnectionError, OSError, RuntimeError,
    ValueError, KeyError, TypeError,
)


class IEmbeddingProvider(ABC):
    """Abstract interface for embedding providers."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Identifier stored alongside every vector this provider produces."""
        pass

    @abstractmethod
    def embed_text(self, text: str) -> List[float]:
        """Generate embedding vector for given text."""
        pass

    @abstractmethod
    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        pass


class DeterministicHashEmbedding(IEmbeddingProvider):
    """Deterministic hash-based embedding provider for testing purposes.

    Identical text always maps to the identical vector, so it can stand in
    for a real model without any downloads.
    """

    def __init__(self, dimension: int = 384):
        self.dimension = dimension

    @property
    def model_name(self) -> str:
        return f"hash-{self.dimension}"

    def embed_text(self, text: str) -> List[float]:
        """Generate deterministic embedding vector using md5 blocks."""
        vector = []
        block = 0
        while len(vector) < self.dimension:
            hex_dig = hashlib.md5(f"{block}:{text}".encode()).hexdigest()
            for i in range(0, len(hex_dig), 8):
                value = int(hex_dig[i:i + 8], 16)
                # Map to [-1, 1]
                vector.append((value / (2**32)) * 2 - 1)
            block += 1

        return vector[:self.dimension]

    def get_dimension(self) -> int:
        return self.dimension


class SentenceTransformerEmbedding(IEmbeddingProvider):
    """Sentence transformers embedding provider using pre-trained models."""

    def __init__(self, model_name: str = "all-mpnet-base-v2"):
        self._model_name = model_name
        self._model = None
        self._dimension = None

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def model(self):
        if self._model is None:
            self._model = SentenceTransformer(self._model_name)
        return self._model

    def embed_text(self, text: str) -> List[float]:
        embedding = self.model.encode(text, convert_to_tensor=False)
        return embedding.tolist()

    def get_dimension(self) -> int:
        if self._dimension is None:
            # Get dimension by encoding a dummy string
            dummy_embedding = self.model.encode("test", convert_to_tensor=False)
            self._dimension = len(dummy_embedding)
        return self._dimension


class OllamaEmbedding(IEmbeddingProvider):
    """Embeddings served by a local ollama instance."""

    def __init__(self, model_name: str = "nomic-embed-text", host: str = None, timeout: float = 120):
        self._model_name = model_name
        self.client = ollama.Client(host=host, timeout=timeout)
        self._dimension = None

    @property
    def model_name(self) -> str:
        return self._model_name

    def embed_text(self, text: str) -> List[float]:
        response = self.client.embed(model=self._model_name, input=text)
        embeddings = response["embeddings"]
        if not embeddings:
            return []
        return list(embeddings[0])

    def get_dimension(self) -> int:
        if self._dimension is None:
            self._dimension = len(self.embed_text("test"))
        return self._dimension


class EmbeddingClient:
    """
    Turns text into an Embedding tagged with the producing model.

    Text is passed to the provider as-is; callers decide what to embed and
    how long it may be.
    """

    def __init__(self, provider: IEmbeddingProvider):
        self.provider = provider

    @property
    def model_name(self) -> str:
        return self.provider.model_name

    def embed(self, text: str) -> Embedding:
        """
        Embed one text.

        Raises:
            EmbeddingUnavailable: If the provider call fails or returns an
                empty, non-numeric or non-finite vector.
        """
        model = self.provider.model_name
        try:
            raw = self.provider.embed_text(text)
        except UPSTREAM_ERRORS as e:
            logger.log_embedding(model, len(text), status="failed", details={"error": str(e)})
            raise EmbeddingUnavailable(f"Embedding provider '{model}' failed: {e}") from e

        vector = self._validate(raw, model, len(text))
        logger.log_embedding(model, len(text), dimension=len(vector))
        return Embedding(vector=vector, model=model)

    def _validate(self, raw, model: str, text_length: int) -> List[float]:
        try:
            array = np.asarray(raw, dtype=np.float64)
        except (TypeError, ValueError) as e:
            logger.log_embedding(model, text_length, status="failed", details={"error": "non-numeric vector"})
            raise EmbeddingUnavailable(f"Embedding provider '{model}' returned non-numeric values") from e

        if array.ndim != 1 or array.size == 0:
            logger.log_embedding(model, text_length, status="failed", details={"error": "malformed vector"})
            raise EmbeddingUnavailable(f"Embedding provider '{model}' returned a malformed vector")

        if not np.all(np.isfinite(array)):
            logger.log_embedding(model, text_length, status="failed", details={"error": "non-finite values"})
            raise EmbeddingUnavailable(f"Embedding provider '{model}' returned non-finite values")

        return [float(v) for v in array]
