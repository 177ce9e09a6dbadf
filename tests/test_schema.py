"""
Tests for the content model.
"""

from datetime import datetime, timedelta, timezone

import pytest

from keepsake.core.schema import (
    ContentItem,
    DocumentPayload,
    Embedding,
    PhotoPayload,
    ProductPayload,
    RetrievalResult,
    Source,
    TodoPayload,
    YouTubePayload,
    payload_from_dict,
)


def test_content_type_follows_payload():
    item = ContentItem(title="t", description="d", payload=YouTubePayload(video_url="https://yt/v"))
    assert item.content_type == "youtube"
    assert item.canonical_url == "https://yt/v"


def test_blank_title_or_description_rejected():
    with pytest.raises(ValueError):
        ContentItem(title=" ", description="d", payload=TodoPayload(content="x"))
    with pytest.raises(ValueError):
        ContentItem(title="t", description="", payload=TodoPayload(content="x"))


def test_unsupported_payload_rejected():
    with pytest.raises(TypeError):
        ContentItem(title="t", description="d", payload={"content": "x"})


def test_tags_are_deduplicated_and_trimmed():
    item = ContentItem(title="t", description="d", payload=TodoPayload(content="x"), tags={"a", " a", "", "b"})
    assert item.tags == {"a", "b"}


def test_naive_timestamp_is_treated_as_utc():
    item = ContentItem(title="t", description="d", payload=TodoPayload(content="x"),
                       timestamp=datetime(2024, 1, 1, 12, 0))
    assert item.timestamp == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    shifted = ContentItem(title="t", description="d", payload=TodoPayload(content="x"),
                          timestamp=datetime(2024, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=2))))
    assert shifted.timestamp == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def test_embedding_requires_vector_and_model():
    with pytest.raises(ValueError):
        Embedding(vector=[], model="m")
    with pytest.raises(ValueError):
        Embedding(vector=[0.1], model="")


def test_hash_cleared_without_embedding():
    item = ContentItem(title="t", description="d", payload=TodoPayload(content="x"), embedding_hash="stale")
    assert item.embedding_hash is None
    assert item.embedding_model is None


def test_payload_defaults():
    assert PhotoPayload(category="selfie").category == "other"
    assert DocumentPayload(content="one two three").word_count == 3
    with pytest.raises(ValueError):
        TodoPayload(priority="urgent")


def test_payload_from_dict_ignores_unknown_keys_and_builds_nested():
    payload = payload_from_dict("product", {"product_name": "Lamp", "price": {"amount": 10, "currency": "USD"},
                                            "sku": "ignored"})
    assert isinstance(payload, ProductPayload)
    assert payload.price.amount == 10

    todo = payload_from_dict("todo", {"content": "x", "due_date": "2024-06-01T00:00:00Z"})
    assert todo.due_date == datetime(2024, 6, 1, tzinfo=timezone.utc)

    with pytest.raises(ValueError):
        payload_from_dict("podcast", {})


@pytest.mark.parametrize("content_type, data", [
    ("product", {"price": 12.5}),
    ("product", {"price": {"amount": "cheap"}}),
    ("bookmark", {"scroll_position": [0, 100]}),
    ("todo", {"content": 123}),
    ("todo", {"content": None}),
    ("todo", {"completed": "yes"}),
    ("youtube", {"view_count": "1.2M"}),
    ("youtube", {"view_count": True}),
])
def test_payload_from_dict_rejects_wrong_field_types(content_type, data):
    with pytest.raises(ValueError):
        payload_from_dict(content_type, data)


def test_payload_from_dict_accepts_ints_for_float_fields():
    bookmark = payload_from_dict("bookmark", {"url": "https://example.org", "scroll_position": {"x": 0, "y": 900, "percentage": 40}})
    assert bookmark.scroll_position.y == 900
    assert payload_from_dict("product", {"price": None, "vendor": None}).price is None


def test_source_from_result():
    item = ContentItem(id="abc", title="Lamp", description="d",
                       payload=ProductPayload(product_url="https://shop/lamp"))
    source = Source.from_result(RetrievalResult(item=item, similarity=0.42))

    assert source.id == "abc"
    assert source.content_type == "product"
    assert source.similarity == 0.42
    assert source.url == "https://shop/lamp"


def test_to_dict_hides_embedding_unless_asked():
    item = ContentItem(title="t", description="d", payload=TodoPayload(content="x"),
                       embedding=Embedding([0.5, 0.5], "m"))

    assert "embedding" not in item.to_dict()
    assert item.to_dict(include_embedding=True)["embedding"] == [0.5, 0.5]
    assert item.to_dict()["todo"]["content"] == "x"
