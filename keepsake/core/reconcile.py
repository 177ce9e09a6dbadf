"""
Embedding reconcile: keep stored embeddings in step with the text they were computed from.

An item is re-embedded when it has no embedding, when its searchable text
hash changed since the embedding was made, or when the active embedding
model differs from the one that produced the stored vector.
"""

import hashlib
from dataclasses import dataclass, field
from typing import List

from . import config
from .errors import EmbeddingUnavailable
from .schema import (
    BookmarkPayload,
    ContentItem,
    DocumentPayload,
    PhotoPayload,
    ProductPayload,
    TodoPayload,
    YouTubePayload,
)
from ..util.logging import logger


@dataclass
class ReconcileReport:
    """Summary of a reconcile sweep."""
    scanned: int = 0
    embedded: int = 0
    unchanged: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)


def searchable_text(item: ContentItem, max_chars: int = None) -> str:
    """Text an item is embedded from: title, description, type fields and tags."""
    parts = [item.title, item.description]
    payload = item.payload

    if isinstance(payload, PhotoPayload):
        parts.append(payload.extracted_text)
    elif isinstance(payload, DocumentPayload):
        parts.append(payload.content)
    elif isinstance(payload, TodoPayload):
        parts.append(payload.content)
    elif isinstance(payload, ProductPayload):
        parts.extend([payload.product_name, payload.vendor])
    elif isinstance(payload, BookmarkPayload):
        parts.extend([payload.page_title, payload.meta_description, payload.url])
    elif isinstance(payload, YouTubePayload):
        parts.append(payload.channel_name)

    parts.extend(sorted(item.tags))
    text = " ".join(str(p).strip() for p in parts if p is not None and str(p).strip())

    limit = max_chars if max_chars is not None else config.EMBED_MAX_CHARS
    return text[:limit]


def content_hash(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def needs_embedding(item: ContentItem, model_name: str, text_hash: str) -> bool:
    if item.embedding is None:
        return True
    if item.embedding_hash != text_hash:
        return True
    return item.embedding_model != model_name


def reconcile_item(item: ContentItem, embedding_client) -> bool:
    """
    Bring one item's embedding up to date, in memory.

    Returns:
        True if the item was re-embedded, False if it was already current.

    Raises:
        EmbeddingUnavailable: The embedding call failed.
    """
    text = searchable_text(item)
    text_hash = content_hash(text)
    if not needs_embedding(item, embedding_client.model_name, text_hash):
        return False

    item.embedding = embedding_client.embed(text)
    item.embedding_hash = text_hash
    return True


def reconcile_all(store, embedding_client) -> ReconcileReport:
    """
    Sweep every stored item and re-embed the stale ones.

    A failing item is counted and logged; the sweep carries on with the rest.
    """
    report = ReconcileReport()

    for item in store.find():
        report.scanned += 1
        try:
            if not reconcile_item(item, embedding_client):
                report.unchanged += 1
                continue
            store.set_embedding(item.id, item.embedding, item.embedding_hash)
            report.embedded += 1
        except EmbeddingUnavailable as e:
            report.failed += 1
            report.errors.append(f"{item.id}: {e}")
            logger.warning(f"Reconcile failed for item '{item.id}': {e}")
        except Exception as e:
            report.failed += 1
            report.errors.append(f"{item.id}: {type(e).__name__}: {e}")
            logger.error(f"Unexpected reconcile error for item '{item.id}': {e}")

    logger.log_reconcile(report.scanned, report.embedded, report.unchanged, report.failed, report.errors)
    return report
