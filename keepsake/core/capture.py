"""
Capture: turn raw browser content into enriched, embedded ContentItems.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from .errors import GenerationUnavailable
from .reconcile import reconcile_item
from .schema import (
    BookmarkPayload,
    ContentItem,
    DocumentPayload,
    PhotoPayload,
    Price,
    ProductPayload,
    ScrollPosition,
    TodoPayload,
    YouTubePayload,
)
from ..util.logging import logger

TITLE_CHARS = 60
DESCRIPTION_CHARS = 200


def shorten(text: str, limit: int) -> str:
    text = " ".join((text or "").split())
    return text[:limit] + "..." if len(text) > limit else text


class CaptureService:
    """
    Saves captured content.

    Every item is embedded before it is written; if the embedding call
    fails nothing is saved. The analyzer is optional: without one, or when
    it fails, titles and descriptions come from the captured text itself.
    """

    def __init__(self, store, embedding_client, analyzer=None):
        self.store = store
        self.embedding_client = embedding_client
        self.analyzer = analyzer

    def _enrich(self, method: str, *args) -> Optional[Dict[str, Any]]:
        if self.analyzer is None:
            return None
        try:
            return getattr(self.analyzer, method)(*args)
        except GenerationUnavailable as e:
            logger.warning(f"Enrichment '{method}' failed, using plain-text defaults: {e}")
            return None

    def _persist(self, item: ContentItem) -> ContentItem:
        reconcile_item(item, self.embedding_client)
        return self.store.save(item)

    def _build(self, payload, defaults: Dict[str, Any], analysis: Optional[Dict[str, Any]], tags: Optional[List[str]] = None) -> ContentItem:
        analysis = analysis or {}
        item_tags = set(tags or [])
        item_tags.update(analysis.get("tags") or defaults.get("tags") or [])
        return ContentItem(
            title=analysis.get("title") or defaults["title"],
            description=analysis.get("description") or defaults["description"],
            payload=payload,
            tags=item_tags,
        )

    def save_photo(self, image_data: Optional[str] = None, image_url: Optional[str] = None,
                   width: Optional[int] = None, height: Optional[int] = None,
                   tags: Optional[List[str]] = None) -> ContentItem:
        if not image_data and not image_url:
            raise ValueError("Either image_data or image_url is required")

        analysis = self._enrich("analyze_image", image_data) if image_data else None
        payload = PhotoPayload(
            image_url=image_url,
            image_data=image_data,
            category=(analysis or {}).get("category") or "other",
            width=width,
            height=height,
            extracted_text=(analysis or {}).get("extracted_text"),
        )
        defaults = {
            "title": "Saved photo",
            "description": f"Photo saved from {image_url}" if image_url else "Photo saved from the browser",
            "tags": ["photo"],
        }
        return self._persist(self._build(payload, defaults, analysis, tags))

    def save_document(self, content: str, source_url: Optional[str] = None,
                      selection_context: Optional[str] = None,
                      tags: Optional[List[str]] = None) -> ContentItem:
        if not content or not content.strip():
            raise ValueError("content cannot be empty")

        payload = DocumentPayload(
            content=content,
            source_url=source_url,
            selection_context=selection_context,
        )
        defaults = {
            "title": shorten(content, TITLE_CHARS),
            "description": shorten(content, DESCRIPTION_CHARS),
        }
        return self._persist(self._build(payload, defaults, self._enrich("analyze_text", content), tags))

    def save_todo(self, content: str, priority: str = "medium",
                  due_date: Optional[datetime] = None) -> ContentItem:
        """Todos are saved as typed; they are never sent for enrichment."""
        if not content or not content.strip():
            raise ValueError("content cannot be empty")

        payload = TodoPayload(content=content, priority=priority, due_date=due_date)
        defaults = {
            "title": shorten(content, TITLE_CHARS),
            "description": f"Todo: {content}",
            "tags": ["todo"],
        }
        return self._persist(self._build(payload, defaults, None))

    def save_product(self, page_content: str, product_url: str, image_url: Optional[str] = None,
                     source_url: Optional[str] = None, tags: Optional[List[str]] = None) -> ContentItem:
        if not product_url:
            raise ValueError("product_url is required")

        analysis = self._enrich("analyze_product", page_content or "", product_url) or {}
        price = None
        if analysis.get("price") is not None:
            price = Price(amount=analysis["price"], currency=analysis.get("currency") or "USD")

        payload = ProductPayload(
            product_name=analysis.get("product_name"),
            price=price,
            product_url=product_url,
            source_url=source_url,
            image_url=image_url,
            vendor=analysis.get("vendor"),
        )
        defaults = {
            "title": shorten(page_content, TITLE_CHARS) or product_url,
            "description": shorten(page_content, DESCRIPTION_CHARS) or f"Product saved from {product_url}",
            "tags": ["product"],
        }
        return self._persist(self._build(payload, defaults, analysis, tags))

    def save_bookmark(self, url: str, scroll_position: Optional[Dict[str, float]] = None,
                      page_title: Optional[str] = None, favicon: Optional[str] = None,
                      meta_description: Optional[str] = None,
                      tags: Optional[List[str]] = None) -> ContentItem:
        if not url:
            raise ValueError("url is required")

        payload = BookmarkPayload(
            url=url,
            scroll_position=ScrollPosition(**scroll_position) if scroll_position else None,
            page_title=page_title,
            favicon=favicon,
            meta_description=meta_description,
        )
        defaults = {
            "title": shorten(page_title, TITLE_CHARS) or url,
            "description": meta_description or f"Bookmark: {url}",
            "tags": ["bookmark"],
        }
        analysis = self._enrich("analyze_webpage", page_title or url, meta_description, url)
        return self._persist(self._build(payload, defaults, analysis, tags))

    def save_youtube(self, video_id: str, video_url: str, video_title: Optional[str] = None,
                     video_description: Optional[str] = None, channel_name: Optional[str] = None,
                     thumbnail_url: Optional[str] = None, duration: Optional[str] = None,
                     view_count: Optional[int] = None, tags: Optional[List[str]] = None) -> ContentItem:
        if not video_id or not video_url:
            raise ValueError("video_id and video_url are required")

        payload = YouTubePayload(
            video_id=video_id,
            video_url=video_url,
            channel_name=channel_name,
            thumbnail_url=thumbnail_url,
            duration=duration,
            view_count=view_count,
        )
        defaults = {
            "title": shorten(video_title, TITLE_CHARS) or f"YouTube video {video_id}",
            "description": shorten(video_description, DESCRIPTION_CHARS)
            or (f"YouTube video by {channel_name}" if channel_name else f"YouTube video {video_id}"),
            "tags": ["youtube"],
        }
        analysis = self._enrich("analyze_youtube", video_title or "", video_description or "", channel_name or "")
        return self._persist(self._build(payload, defaults, analysis, tags))
