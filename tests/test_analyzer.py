"""
Tests for AI enrichment of captured content.
"""

import pytest

from conftest import StaticGenerationProvider
from keepsake.core.errors import GenerationUnavailable
from keepsake.rag.analyzer import ContentAnalyzer, extract_json


def test_extract_json_from_fenced_block():
    text = 'Here you go:\n```json\n{"title": "T", "tags": ["a"]}\n```\nEnjoy!'
    assert extract_json(text) == {"title": "T", "tags": ["a"]}


def test_extract_json_from_bare_braces():
    assert extract_json('Sure! {"title": "T"} hope that helps') == {"title": "T"}


@pytest.mark.parametrize("text", ["no json here", "```json\n{broken\n```", "[1, 2]"])
def test_extract_json_failures(text):
    with pytest.raises(GenerationUnavailable):
        extract_json(text)


def test_analyze_text_normalizes_fields():
    provider = StaticGenerationProvider(
        response='{"title": " Tea guide ", "description": "How to brew", "tags": ["tea", " ", "brewing"]}'
    )

    result = ContentAnalyzer(provider).analyze_text("Brew sencha at 70C")

    assert result == {"title": "Tea guide", "description": "How to brew", "tags": ["tea", "brewing"]}
    assert 'Text: "Brew sencha at 70C"' in provider.prompts[0]


def test_analyze_image_maps_category_and_text():
    provider = StaticGenerationProvider(
        response='```json\n{"title": "Recipe card", "description": "Pancakes", '
                 '"category": "recipe", "extractedText": "2 eggs"}\n```'
    )
    provider.generate_text = _recording(provider)

    result = ContentAnalyzer(provider).analyze_image("data:image/png;base64,aGVsbG8=")

    assert result["category"] == "recipe"
    assert result["extracted_text"] == "2 eggs"
    assert provider.images == [["aGVsbG8="]]


def test_analyze_product_parses_price():
    provider = StaticGenerationProvider(
        response='{"title": "Kettle", "description": "Gooseneck", "productName": "Kettle Pro", '
                 '"price": "49.99", "currency": "EUR", "vendor": "Acme", "tags": ["kitchen"]}'
    )

    result = ContentAnalyzer(provider).analyze_product("page text", "https://shop.example/kettle")

    assert result["product_name"] == "Kettle Pro"
    assert result["price"] == 49.99
    assert result["currency"] == "EUR"
    assert result["vendor"] == "Acme"


def test_analyze_product_tolerates_missing_price():
    provider = StaticGenerationProvider(response='{"title": "Kettle", "description": "d", "price": "n/a"}')

    result = ContentAnalyzer(provider).analyze_product("page", "https://shop.example/kettle")

    assert result["price"] is None
    assert result["currency"] == "USD"


def test_analyze_webpage_and_youtube_prompts():
    provider = StaticGenerationProvider(response='{"title": "T", "description": "D", "tags": []}')
    analyzer = ContentAnalyzer(provider)

    analyzer.analyze_webpage("Page", None, "https://example.org")
    analyzer.analyze_youtube("Video", "About things", "Channel")

    assert "Meta Description: N/A" in provider.prompts[0]
    assert "Channel: Channel" in provider.prompts[1]


def test_unparsable_response_raises():
    with pytest.raises(GenerationUnavailable):
        ContentAnalyzer(StaticGenerationProvider(response="I cannot help with that")).analyze_text("x")


def _recording(provider):
    provider.images = []
    original = provider.generate_text

    def generate_text(prompt, images=None):
        provider.images.append(images)
        return original(prompt, images=images)

    return generate_text
