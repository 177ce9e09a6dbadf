"""
Retrieval pipeline: embed the query, fetch filtered candidates, rank by cosine similarity.

Candidates are scanned linearly on every call; nothing here keeps an index.
"""

import calendar
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from .dao import ContentFilter
from .errors import InvalidQuery
from .schema import CONTENT_TYPES, RetrievalResult, as_utc, utcnow
from ..util.logging import logger
from ..vector.similarity import rank_by_similarity

DATE_FILTERS = ("today", "week", "month", "year")


def _shift_months(value: datetime, months: int) -> datetime:
    """Move value back by whole calendar months, clamping the day to the target month."""
    month_index = value.year * 12 + (value.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def date_lower_bound(date_filter: Optional[str], now: datetime) -> Optional[datetime]:
    """
    Inclusive lower bound on timestamp for a named date filter.

    today is the last 24 hours and week the last 7 days; month and year
    step back by calendar units.

    Raises:
        InvalidQuery: If date_filter is not one of DATE_FILTERS.
    """
    if not date_filter:
        return None
    if date_filter not in DATE_FILTERS:
        raise InvalidQuery(f"dateFilter must be one of: {list(DATE_FILTERS)}")

    now = as_utc(now)
    if date_filter == "today":
        return now - timedelta(days=1)
    if date_filter == "week":
        return now - timedelta(days=7)
    if date_filter == "month":
        return _shift_months(now, 1)
    return _shift_months(now, 12)


@dataclass
class RetrievalFilter:
    content_type: Optional[str] = None
    date_filter: Optional[str] = None


class Retriever:
    """
    Semantic retrieval over a content store.

    Args:
        embedding_client: EmbeddingClient used for the query text
        store: anything with find(ContentFilter) -> List[ContentItem]
        now: clock returning an aware datetime
    """

    def __init__(self, embedding_client, store, now: Callable[[], datetime] = utcnow):
        self.embedding_client = embedding_client
        self.store = store
        self.now = now

    def build_filter(self, filter: Optional[RetrievalFilter]) -> ContentFilter:
        filter = filter or RetrievalFilter()
        if filter.content_type and filter.content_type not in CONTENT_TYPES:
            raise InvalidQuery(f"contentType must be one of: {list(CONTENT_TYPES)}")

        return ContentFilter(
            content_type=filter.content_type or None,
            since=date_lower_bound(filter.date_filter, self.now()),
            has_embedding=True,
        )

    def retrieve(self, query_text: str, filter: Optional[RetrievalFilter] = None, k: Optional[int] = None) -> List[RetrievalResult]:
        """
        Rank stored items against query_text, best first.

        Returns at most k results; an empty store or filter with no matches
        yields an empty list.

        Raises:
            InvalidQuery: Blank query or unknown filter value.
            EmbeddingUnavailable: The query could not be embedded.
        """
        if not query_text or not query_text.strip():
            raise InvalidQuery("Query cannot be empty")

        store_filter = self.build_filter(filter)
        query = self.embedding_client.embed(query_text)
        items = self.store.find(store_filter)

        candidates = [(item, item.embedding.vector) for item in items if item.embedding is not None]
        mismatched = sum(1 for _, vector in candidates if len(vector) != query.dimension)
        ranked = rank_by_similarity(query.vector, candidates, k)

        details = {"k": k}
        if mismatched:
            details["dimension_mismatch"] = mismatched
            logger.warning(
                f"{mismatched} of {len(candidates)} candidates have a dimension other than "
                f"{query.dimension} ({query.model}); reconcile embeddings to include them"
            )
        logger.log_retrieval(query_text, len(candidates), len(ranked), details)

        return [RetrievalResult(item=item, similarity=score) for item, score in ranked]
