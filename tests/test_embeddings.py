"""
Tests for embedding providers and the embedding client.
"""

import math
from unittest.mock import MagicMock, patch

import httpx
import ollama
import pytest

from keepsake.core.errors import EmbeddingUnavailable
from keepsake.vector.embeddings import (
    DeterministicHashEmbedding,
    EmbeddingClient,
    IEmbeddingProvider,
    OllamaEmbedding,
)


def test_hash_embedding_interface():
    embedder = DeterministicHashEmbedding(dimension=384)

    assert isinstance(embedder, IEmbeddingProvider)
    assert embedder.get_dimension() == 384
    assert embedder.model_name == "hash-384"


def test_hash_embedding_is_deterministic_and_full_width():
    embedder = DeterministicHashEmbedding(dimension=384)

    vector1 = embedder.embed_text("Hello, world!")
    vector2 = DeterministicHashEmbedding(dimension=384).embed_text("Hello, world!")

    assert vector1 == vector2
    assert len(vector1) == 384
    # Every slot carries hash material, not padding
    assert sum(1 for v in vector1 if v == 0.0) < 5
    assert all(-1.0 <= v <= 1.0 for v in vector1)


def test_hash_embedding_differs_by_text():
    embedder = DeterministicHashEmbedding(dimension=16)
    assert embedder.embed_text("Hello, world!") != embedder.embed_text("Goodbye, world!")


def test_client_returns_vector_tagged_with_model():
    client = EmbeddingClient(DeterministicHashEmbedding(dimension=8))

    embedding = client.embed("some text")

    assert embedding.model == "hash-8"
    assert embedding.dimension == 8
    assert client.model_name == "hash-8"


def test_client_does_not_truncate_text():
    provider = MagicMock(spec=IEmbeddingProvider)
    provider.model_name = "mock"
    provider.embed_text.return_value = [0.1, 0.2]
    long_text = "x" * 50000

    EmbeddingClient(provider).embed(long_text)

    provider.embed_text.assert_called_once_with(long_text)


@pytest.mark.parametrize("raw", [
    [],
    [[0.1, 0.2], [0.3, 0.4]],
    ["a", "b"],
    [0.1, float("nan")],
    [math.inf, 0.2],
    None,
])
def test_client_rejects_malformed_vectors(raw):
    provider = MagicMock(spec=IEmbeddingProvider)
    provider.model_name = "mock"
    provider.embed_text.return_value = raw

    with pytest.raises(EmbeddingUnavailable):
        EmbeddingClient(provider).embed("text")


@pytest.mark.parametrize("error", [
    ollama.ResponseError("model not found"),
    httpx.ConnectError("connection refused"),
    httpx.ReadTimeout("timed out"),
    ConnectionError("down"),
    ValueError("Expecting value: line 1 column 1 (char 0)"),
    KeyError("embeddings"),
])
def test_client_wraps_provider_errors(error):
    provider = MagicMock(spec=IEmbeddingProvider)
    provider.model_name = "mock"
    provider.embed_text.side_effect = error

    with pytest.raises(EmbeddingUnavailable) as exc_info:
        EmbeddingClient(provider).embed("text")

    assert exc_info.value.__cause__ is error


def test_ollama_embedding_reads_first_vector():
    with patch("keepsake.vector.embeddings.ollama.Client") as client_cls:
        client_cls.return_value.embed.return_value = {"embeddings": [[0.5, -0.5, 0.25]]}
        provider = OllamaEmbedding(model_name="nomic-embed-text", host="http://ollama:11434", timeout=5)

        assert provider.embed_text("hello") == [0.5, -0.5, 0.25]
        assert provider.get_dimension() == 3
        client_cls.assert_called_once_with(host="http://ollama:11434", timeout=5)
        client_cls.return_value.embed.assert_any_call(model="nomic-embed-text", input="hello")


@pytest.mark.parametrize("response", [{}, {"embeddings": None}])
def test_malformed_ollama_response_is_unavailable(response):
    with patch("keepsake.vector.embeddings.ollama.Client") as client_cls:
        client_cls.return_value.embed.return_value = response
        client = EmbeddingClient(OllamaEmbedding(model_name="nomic-embed-text"))

        with pytest.raises(EmbeddingUnavailable):
            client.embed("hello")
