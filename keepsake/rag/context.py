"""
Render retrieved items as the numbered source blocks the answer prompt quotes from.
"""

from typing import List

from ..core import config
from ..core.schema import (
    BookmarkPayload,
    DocumentPayload,
    PhotoPayload,
    ProductPayload,
    RetrievalResult,
    TodoPayload,
    YouTubePayload,
)


def _type_lines(payload, doc_chars: int) -> List[str]:
    lines = []

    if isinstance(payload, DocumentPayload):
        if payload.content:
            lines.append(f"Content: {payload.content[:doc_chars]}")

    elif isinstance(payload, PhotoPayload):
        if payload.extracted_text:
            lines.append(f"Extracted Text: {payload.extracted_text}")

    elif isinstance(payload, ProductPayload):
        if payload.product_name:
            lines.append(f"Product: {payload.product_name}")
        if payload.price is not None and payload.price.amount is not None:
            lines.append(f"Price: {payload.price.amount} {payload.price.currency}")
        if payload.vendor:
            lines.append(f"Vendor: {payload.vendor}")

    elif isinstance(payload, YouTubePayload):
        if payload.channel_name:
            lines.append(f"Channel: {payload.channel_name}")
        if payload.duration:
            lines.append(f"Duration: {payload.duration}")

    elif isinstance(payload, BookmarkPayload):
        if payload.url:
            lines.append(f"URL: {payload.url}")
        if payload.meta_description:
            lines.append(f"Meta: {payload.meta_description}")

    elif isinstance(payload, TodoPayload):
        if payload.content:
            lines.append(f"Todo: {payload.content}")
        lines.append(f"Priority: {payload.priority}")

    return lines


def assemble(results: List[RetrievalResult], doc_chars: int = None) -> str:
    """
    Build the context block for a list of retrieved items, in the order given.

    Each item becomes a "--- Source N: title (type) ---" section. Document
    bodies are cut to doc_chars characters (CONTEXT_DOC_CHARS by default);
    fields the item does not have are left out.
    """
    if doc_chars is None:
        doc_chars = config.CONTEXT_DOC_CHARS

    blocks = []
    for index, result in enumerate(results, start=1):
        item = result.item
        lines = [
            "",
            f"--- Source {index}: {item.title} ({item.content_type}) ---",
            f"Description: {item.description}",
        ]
        lines.extend(_type_lines(item.payload, doc_chars))
        if item.tags:
            lines.append(f"Tags: {', '.join(sorted(item.tags))}")
        lines.append(f"Saved on: {item.timestamp.strftime('%b %d, %Y')}")
        blocks.append("\n".join(lines) + "\n")

    return "".join(blocks)
