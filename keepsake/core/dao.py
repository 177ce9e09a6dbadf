"""
Content store: persistence of ContentItems in SQLite.

The retrieval pipeline only needs find(filter); the capture and REST layers
use save/get/update/delete/list_items.
"""

import json
import sqlite3
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from .db import get_db, init_db
from .schema import (
    CONTENT_TYPES,
    ContentItem,
    Embedding,
    as_utc,
    parse_datetime,
    payload_from_dict,
    payload_to_dict,
    utcnow,
)
from ..util.logging import logger

UPDATABLE_FIELDS = {"tags", "is_favorite", "payload"}
SORTABLE_FIELDS = {"timestamp", "title", "access_count"}
_LIKE_CLAUSE = "(title LIKE ? ESCAPE '\\' OR description LIKE ? ESCAPE '\\' OR tags LIKE ? ESCAPE '\\')"

_COLUMNS = (
    "id, content_type, title, description, tags, timestamp, payload, embedding, "
    "embedding_model, embedding_hash, is_favorite, access_count, last_accessed, updated_at"
)


def _ts(value: Optional[datetime]) -> Optional[str]:
    # Fixed precision keeps lexicographic order equal to chronological order
    if value is None:
        return None
    return as_utc(value).isoformat(timespec="microseconds")


@dataclass
class ContentFilter:
    """Structured predicate for ContentStore.find()."""

    content_type: Optional[str] = None
    since: Optional[datetime] = None
    """Inclusive lower bound on timestamp; no upper bound"""
    has_embedding: bool = False

    def to_sql(self) -> Tuple[str, List[Any]]:
        clauses = []
        params: List[Any] = []
        if self.content_type:
            clauses.append("content_type = ?")
            params.append(self.content_type)
        if self.since is not None:
            clauses.append("timestamp >= ?")
            params.append(_ts(self.since))
        if self.has_embedding:
            clauses.append("embedding IS NOT NULL")
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        return where, params


def _row_to_item(row: sqlite3.Row) -> ContentItem:
    embedding = None
    if row["embedding"] is not None:
        embedding = Embedding(vector=json.loads(row["embedding"]), model=row["embedding_model"])

    return ContentItem(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        payload=payload_from_dict(row["content_type"], json.loads(row["payload"])),
        tags=set(json.loads(row["tags"] or "[]")),
        timestamp=parse_datetime(row["timestamp"]),
        embedding=embedding,
        embedding_hash=row["embedding_hash"],
        is_favorite=bool(row["is_favorite"]),
        access_count=row["access_count"] or 0,
        last_accessed=parse_datetime(row["last_accessed"]),
        updated_at=parse_datetime(row["updated_at"]),
    )


class ContentStore:
    """SQLite-backed content store."""

    def __init__(self, db_path: str = None):
        self.db_path = db_path
        init_db(db_path)

    def find(self, filter: Optional[ContentFilter] = None) -> List[ContentItem]:
        """Return every item matching filter, newest first."""
        filter = filter or ContentFilter()
        where, params = filter.to_sql()
        with get_db(self.db_path) as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM content{where} ORDER BY timestamp DESC",
                params
            ).fetchall()
        return [_row_to_item(row) for row in rows]

    def get(self, item_id: str, touch: bool = False) -> Optional[ContentItem]:
        """Get one item; touch=True records the read in its access bookkeeping."""
        if not item_id or not item_id.strip():
            return None

        with get_db(self.db_path) as conn:
            if touch:
                conn.execute(
                    "UPDATE content SET access_count = access_count + 1, last_accessed = ? WHERE id = ?",
                    (_ts(utcnow()), item_id)
                )
                conn.commit()
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM content WHERE id = ?", (item_id,)
            ).fetchone()
        return _row_to_item(row) if row else None

    def save(self, item: ContentItem) -> ContentItem:
        """Insert a new item, assigning its id."""
        if item.id is None:
            item.id = uuid.uuid4().hex
        item.updated_at = utcnow()

        try:
            with get_db(self.db_path) as conn:
                conn.execute(
                    f"INSERT INTO content ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        item.id,
                        item.content_type,
                        item.title,
                        item.description,
                        json.dumps(sorted(item.tags)),
                        _ts(item.timestamp),
                        json.dumps(payload_to_dict(item.payload)),
                        json.dumps(item.embedding.vector) if item.embedding else None,
                        item.embedding_model,
                        item.embedding_hash,
                        item.is_favorite,
                        item.access_count,
                        _ts(item.last_accessed),
                        _ts(item.updated_at),
                    )
                )
                conn.commit()
        except sqlite3.Error as e:
            logger.log_store_operation("save", item.id, item.content_type, status="failed")
            logger.error(f"Database error saving item '{item.id}': {e}")
            raise

        logger.log_store_operation("save", item.id, item.content_type)
        return item

    def update(self, item_id: str, partial: Dict[str, Any]) -> Optional[ContentItem]:
        """Apply a partial update of tags, is_favorite and/or payload fields.

        Payload fields are merged into the existing payload of the item's own
        content type. The embedding is left untouched; see reconcile.

        Returns:
            The updated item, or None if no item has this id.

        Raises:
            ValueError: If partial names a field that cannot be updated.
        """
        unknown = set(partial) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {sorted(unknown)}")

        existing = self.get(item_id)
        if existing is None:
            return None

        if "tags" in partial:
            existing.tags = {t.strip() for t in partial["tags"] or [] if t and t.strip()}
        if "is_favorite" in partial:
            existing.is_favorite = bool(partial["is_favorite"])
        if "payload" in partial:
            merged = payload_to_dict(existing.payload)
            merged.update(partial["payload"] or {})
            existing.payload = payload_from_dict(existing.content_type, merged)
        existing.updated_at = utcnow()

        with get_db(self.db_path) as conn:
            conn.execute(
                "UPDATE content SET tags = ?, is_favorite = ?, payload = ?, updated_at = ? WHERE id = ?",
                (
                    json.dumps(sorted(existing.tags)),
                    existing.is_favorite,
                    json.dumps(payload_to_dict(existing.payload)),
                    _ts(existing.updated_at),
                    item_id,
                )
            )
            conn.commit()

        logger.log_store_operation("update", item_id, existing.content_type)
        return existing

    def set_embedding(self, item_id: str, embedding: Embedding, embedding_hash: str) -> bool:
        """Replace an item's embedding together with its model tag and source hash."""
        with get_db(self.db_path) as conn:
            cursor = conn.execute(
                "UPDATE content SET embedding = ?, embedding_model = ?, embedding_hash = ? WHERE id = ?",
                (json.dumps(embedding.vector), embedding.model, embedding_hash, item_id)
            )
            conn.commit()
            updated = cursor.rowcount > 0

        if updated:
            logger.log_store_operation("set_embedding", item_id)
        return updated

    def delete(self, item_id: str) -> bool:
        """Delete an item immediately. Returns False if it did not exist."""
        with get_db(self.db_path) as conn:
            cursor = conn.execute("DELETE FROM content WHERE id = ?", (item_id,))
            conn.commit()
            deleted = cursor.rowcount > 0

        if deleted:
            logger.log_store_operation("delete", item_id)
        return deleted

    def list_items(
        self,
        content_type: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
        sort_by: str = "timestamp",
        sort_order: str = "desc",
    ) -> Tuple[List[ContentItem], int]:
        """Paginated listing with optional keyword match; embeddings are not required.

        Returns:
            (items on the requested page, total matching items)
        """
        if content_type and content_type not in CONTENT_TYPES:
            raise ValueError(f"content_type must be one of: {list(CONTENT_TYPES)}")
        if sort_by not in SORTABLE_FIELDS:
            raise ValueError(f"sort_by must be one of: {sorted(SORTABLE_FIELDS)}")

        clauses = []
        params: List[Any] = []
        if content_type:
            clauses.append("content_type = ?")
            params.append(content_type)
        for term in _search_terms(search):
            clauses.append(_LIKE_CLAUSE)
            params.extend([_like_pattern(term)] * 3)
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""

        direction = "ASC" if sort_order == "asc" else "DESC"
        page = max(1, page)
        limit = max(1, limit)

        with get_db(self.db_path) as conn:
            total = conn.execute(f"SELECT COUNT(*) FROM content{where}", params).fetchone()[0]
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM content{where} ORDER BY {sort_by} {direction} LIMIT ? OFFSET ?",
                params + [limit, (page - 1) * limit]
            ).fetchall()
        return [_row_to_item(row) for row in rows], total

    def keyword_search(self, query: str, limit: int = 50) -> List[ContentItem]:
        """Items matching any query term, ranked by how often the terms occur.

        Title hits weigh double; ties keep newest first.
        """
        terms = _search_terms(query)
        if not terms or limit <= 0:
            return []

        clause = " OR ".join([_LIKE_CLAUSE] * len(terms))
        params: List[Any] = []
        for term in terms:
            params.extend([_like_pattern(term)] * 3)

        with get_db(self.db_path) as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM content WHERE {clause} ORDER BY timestamp DESC",
                params
            ).fetchall()

        items = [_row_to_item(row) for row in rows]
        scored = [(item, _keyword_score(item, terms)) for item in items]
        scored.sort(key=lambda pair: pair[1], reverse=True)
        return [item for item, _ in scored[:limit]]

    def count(self, content_type: Optional[str] = None) -> int:
        where, params = ContentFilter(content_type=content_type).to_sql()
        with get_db(self.db_path) as conn:
            return conn.execute(f"SELECT COUNT(*) FROM content{where}", params).fetchone()[0]


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _search_terms(query: Optional[str]) -> List[str]:
    if not query:
        return []
    return [term for term in query.lower().split() if term]


def _keyword_score(item: ContentItem, terms: List[str]) -> int:
    title = item.title.lower()
    description = item.description.lower()
    tags = " ".join(item.tags).lower()
    score = 0
    for term in terms:
        score += 2 * title.count(term) + description.count(term) + tags.count(term)
    return score
