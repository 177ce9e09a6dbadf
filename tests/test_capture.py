"""
Tests for content capture.
"""

from unittest.mock import MagicMock

import pytest

from conftest import StaticEmbeddingProvider, StaticGenerationProvider
from keepsake.core.capture import CaptureService
from keepsake.core.errors import EmbeddingUnavailable, GenerationUnavailable
from keepsake.core.reconcile import content_hash, searchable_text
from keepsake.rag.analyzer import ContentAnalyzer
from keepsake.vector.embeddings import EmbeddingClient


@pytest.fixture
def capture(store):
    return CaptureService(store, EmbeddingClient(StaticEmbeddingProvider()))


def _enriching(store, response):
    analyzer = ContentAnalyzer(StaticGenerationProvider(response=response))
    return CaptureService(store, EmbeddingClient(StaticEmbeddingProvider()), analyzer)


def test_todo_uses_plain_defaults(capture, store):
    text = "Renew passport before the summer trip and book the photo appointment early"

    item = capture.save_todo(text)

    assert item.title == text[:60] + "..."
    assert item.description == f"Todo: {text}"
    assert item.tags == {"todo"}
    assert item.payload.priority == "medium"
    assert store.get(item.id).title == item.title


def test_todo_is_never_enriched(store):
    analyzer = MagicMock()
    service = CaptureService(store, EmbeddingClient(StaticEmbeddingProvider()), analyzer)

    service.save_todo("water plants")

    assert analyzer.method_calls == []


def test_saved_items_are_embedded_with_hash(capture, store):
    item = capture.save_document("Sencha is best brewed at 70C.", source_url="https://tea.example")
    fetched = store.get(item.id)

    assert fetched.embedding_model == "static-test"
    assert fetched.embedding_hash == content_hash(searchable_text(fetched))
    assert fetched.payload.word_count == 6


def test_embedding_failure_aborts_save(store):
    client = MagicMock()
    client.model_name = "mock"
    client.embed.side_effect = EmbeddingUnavailable("down")
    service = CaptureService(store, client)

    with pytest.raises(EmbeddingUnavailable):
        service.save_document("text")

    assert store.count() == 0


def test_document_enrichment(store):
    service = _enriching(store, '{"title": "Tea temps", "description": "Brewing temperatures", "tags": ["tea"]}')

    item = service.save_document("Sencha at 70C", tags=["kitchen"])

    assert item.title == "Tea temps"
    assert item.description == "Brewing temperatures"
    assert item.tags == {"tea", "kitchen"}


def test_enrichment_failure_falls_back_to_defaults(store):
    service = _enriching(store, "not json at all")

    item = service.save_document("Sencha at 70C")

    assert item.title == "Sencha at 70C"
    assert item.description == "Sencha at 70C"
    assert item.id is not None


def test_enrichment_upstream_error_falls_back(store):
    provider = MagicMock()
    provider.model_name = "mock"
    provider.generate_text.side_effect = ConnectionError("refused")
    service = CaptureService(store, EmbeddingClient(StaticEmbeddingProvider()), ContentAnalyzer(provider))

    item = service.save_bookmark("https://example.org", page_title="Example", meta_description="A page")

    assert item.title == "Example"
    assert item.description == "A page"
    assert item.tags == {"bookmark"}


def test_product_enrichment_fills_payload(store):
    service = _enriching(store, '{"title": "Kettle", "description": "Gooseneck kettle", "productName": "Kettle Pro", '
                                '"price": 49.5, "currency": "EUR", "vendor": "Acme", "tags": ["kitchen"]}')

    item = service.save_product("page text", "https://shop.example/kettle", image_url="https://img.example/k.png")

    assert item.payload.product_name == "Kettle Pro"
    assert item.payload.price.amount == 49.5
    assert item.payload.price.currency == "EUR"
    assert item.payload.vendor == "Acme"
    assert item.canonical_url == "https://shop.example/kettle"


def test_photo_enrichment_sets_category_and_text(store):
    service = _enriching(store, '{"title": "Recipe", "description": "Pancakes", "category": "recipe", '
                                '"extractedText": "2 eggs"}')

    item = service.save_photo(image_data="aGVsbG8=")

    assert item.payload.category == "recipe"
    assert item.payload.extracted_text == "2 eggs"


def test_photo_requires_image(capture):
    with pytest.raises(ValueError):
        capture.save_photo()


def test_bookmark_and_youtube_defaults(capture):
    bookmark = capture.save_bookmark("https://example.org/a", scroll_position={"x": 0, "y": 900, "percentage": 40})
    video = capture.save_youtube("abc123", "https://youtube.com/watch?v=abc123", channel_name="Cooking")

    assert bookmark.title == "https://example.org/a"
    assert bookmark.payload.scroll_position.y == 900
    assert video.title == "YouTube video abc123"
    assert video.description == "YouTube video by Cooking"
    assert video.canonical_url == "https://youtube.com/watch?v=abc123"


def test_generation_unavailable_from_analyzer_is_not_raised(store):
    analyzer = MagicMock()
    analyzer.analyze_youtube.side_effect = GenerationUnavailable("timeout")
    service = CaptureService(store, EmbeddingClient(StaticEmbeddingProvider()), analyzer)

    item = service.save_youtube("v1", "https://youtube.com/watch?v=v1", video_title="Knife skills")

    assert item.title == "Knife skills"
