"""
Content model: saved items, their type-specific payloads and retrieval results.

Each ContentItem carries exactly one payload dataclass; the payload class
decides the item's content type, so an item can never hold two variants.
"""

from dataclasses import dataclass, field, fields, asdict
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, List, Optional, Set, Union, get_args, get_origin, get_type_hints

CONTENT_TYPES = ("photo", "document", "todo", "product", "bookmark", "youtube")
PHOTO_CATEGORIES = ("book", "recipe", "document", "screenshot", "other")
TODO_PRIORITIES = ("low", "medium", "high")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Normalize a datetime to an aware UTC value; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    return as_utc(datetime.fromisoformat(str(value).replace("Z", "+00:00")))


@dataclass
class Price:
    amount: Optional[float] = None
    currency: str = "USD"


@dataclass
class ScrollPosition:
    x: float = 0
    y: float = 0
    percentage: float = 0


@dataclass
class PhotoPayload:
    content_type: ClassVar[str] = "photo"

    image_url: Optional[str] = None
    image_data: Optional[str] = None
    """Base64 image body or a file path"""
    category: str = "other"
    width: Optional[int] = None
    height: Optional[int] = None
    extracted_text: Optional[str] = None
    """OCR text pulled out of the image, if any"""

    def __post_init__(self):
        if self.category not in PHOTO_CATEGORIES:
            self.category = "other"


@dataclass
class DocumentPayload:
    content_type: ClassVar[str] = "document"

    content: str = ""
    source_url: Optional[str] = None
    selection_context: Optional[str] = None
    """Text surrounding the selection on the source page"""
    word_count: int = 0

    def __post_init__(self):
        if not self.word_count and self.content:
            self.word_count = len(self.content.split())


@dataclass
class TodoPayload:
    content_type: ClassVar[str] = "todo"

    content: str = ""
    completed: bool = False
    priority: str = "medium"
    due_date: Optional[datetime] = None

    def __post_init__(self):
        if self.priority not in TODO_PRIORITIES:
            raise ValueError(f"priority must be one of: {list(TODO_PRIORITIES)}")


@dataclass
class ProductPayload:
    content_type: ClassVar[str] = "product"

    product_name: Optional[str] = None
    price: Optional[Price] = None
    product_url: Optional[str] = None
    source_url: Optional[str] = None
    image_url: Optional[str] = None
    vendor: Optional[str] = None
    availability: Optional[str] = None


@dataclass
class BookmarkPayload:
    content_type: ClassVar[str] = "bookmark"

    url: str = ""
    scroll_position: Optional[ScrollPosition] = None
    page_title: Optional[str] = None
    favicon: Optional[str] = None
    meta_description: Optional[str] = None


@dataclass
class YouTubePayload:
    content_type: ClassVar[str] = "youtube"

    video_id: Optional[str] = None
    video_url: Optional[str] = None
    channel_name: Optional[str] = None
    thumbnail_url: Optional[str] = None
    duration: Optional[str] = None
    view_count: Optional[int] = None
    upload_date: Optional[datetime] = None


ContentPayload = Union[
    PhotoPayload, DocumentPayload, TodoPayload,
    ProductPayload, BookmarkPayload, YouTubePayload,
]

PAYLOAD_TYPES = {
    cls.content_type: cls
    for cls in (PhotoPayload, DocumentPayload, TodoPayload,
                ProductPayload, BookmarkPayload, YouTubePayload)
}

_NESTED = {"price": Price, "scroll_position": ScrollPosition}
_DATETIME_FIELDS = {"due_date", "upload_date"}
# Accepted runtime types for scalar payload fields
_SCALAR_TYPES = {str: (str,), int: (int,), float: (int, float), bool: (bool,)}


def payload_to_dict(payload: ContentPayload) -> Dict[str, Any]:
    """Serialize a payload to plain JSON-compatible values."""
    data = asdict(payload)
    for name in _DATETIME_FIELDS:
        if isinstance(data.get(name), datetime):
            data[name] = data[name].isoformat()
    return data


def _field_type(cls, name: str):
    """Return (declared type, whether None is allowed) for a dataclass field."""
    hint = get_type_hints(cls)[name]
    if get_origin(hint) is Union:
        args = [a for a in get_args(hint) if a is not type(None)]
        if len(args) == 1:
            return args[0], True
    return hint, False


def _check_scalar(cls, name: str, value: Any) -> None:
    declared, optional = _field_type(cls, name)
    expected = _SCALAR_TYPES.get(declared)
    if expected is None:
        return
    if value is None:
        if not optional:
            raise ValueError(f"{cls.__name__}.{name} cannot be null")
        return
    if isinstance(value, bool) and bool not in expected:
        raise ValueError(f"{cls.__name__}.{name} must be {expected[-1].__name__}, got bool")
    if not isinstance(value, expected):
        raise ValueError(f"{cls.__name__}.{name} must be {expected[-1].__name__}, got {type(value).__name__}")


def _build(cls, data: Dict[str, Any]):
    known = {f.name for f in fields(cls)}
    kwargs = {}
    for name, value in data.items():
        if name not in known:
            continue
        if name in _NESTED:
            nested = _NESTED[name]
            if isinstance(value, dict):
                value = _build(nested, value)
            elif value is not None and not isinstance(value, nested):
                raise ValueError(f"{cls.__name__}.{name} must be an object, got {type(value).__name__}")
        elif name in _DATETIME_FIELDS:
            value = parse_datetime(value)
        else:
            _check_scalar(cls, name, value)
        kwargs[name] = value
    return cls(**kwargs)


def payload_from_dict(content_type: str, data: Optional[Dict[str, Any]]) -> ContentPayload:
    """Build the payload variant for content_type, ignoring unknown keys.

    Raises:
        ValueError: If content_type is unknown or a field has the wrong shape.
    """
    if content_type not in PAYLOAD_TYPES:
        raise ValueError(f"content_type must be one of: {list(CONTENT_TYPES)}")
    return _build(PAYLOAD_TYPES[content_type], data or {})


@dataclass(frozen=True)
class Embedding:
    """An embedding vector together with the model that produced it."""

    vector: List[float]
    model: str

    def __post_init__(self):
        if not self.model:
            raise ValueError("embedding model tag is required")
        if not self.vector:
            raise ValueError("embedding vector must not be empty")

    @property
    def dimension(self) -> int:
        return len(self.vector)


@dataclass
class ContentItem:
    """One saved unit of user content."""

    title: str
    description: str
    payload: ContentPayload
    tags: Set[str] = field(default_factory=set)
    timestamp: datetime = field(default_factory=utcnow)
    id: Optional[str] = None
    embedding: Optional[Embedding] = None
    embedding_hash: Optional[str] = None
    """Hash of the searchable text the current embedding was computed from"""
    is_favorite: bool = False
    access_count: int = 0
    last_accessed: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if type(self.payload) not in PAYLOAD_TYPES.values():
            raise TypeError(f"unsupported payload type: {type(self.payload).__name__}")
        if not self.title or not self.title.strip():
            raise ValueError("title cannot be empty")
        if not self.description or not self.description.strip():
            raise ValueError("description cannot be empty")
        self.tags = {t.strip() for t in self.tags if t and t.strip()}
        self.timestamp = as_utc(self.timestamp)
        if self.embedding is None:
            self.embedding_hash = None

    @property
    def content_type(self) -> str:
        return self.payload.content_type

    @property
    def embedding_model(self) -> Optional[str]:
        return self.embedding.model if self.embedding else None

    @property
    def canonical_url(self) -> Optional[str]:
        """Link back to the original page, where the content type has one."""
        if isinstance(self.payload, BookmarkPayload):
            return self.payload.url or None
        if isinstance(self.payload, ProductPayload):
            return self.payload.product_url
        if isinstance(self.payload, YouTubePayload):
            return self.payload.video_url
        return None

    def to_dict(self, include_embedding: bool = False) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "content_type": self.content_type,
            "title": self.title,
            "description": self.description,
            "tags": sorted(self.tags),
            "timestamp": self.timestamp.isoformat(),
            self.content_type: payload_to_dict(self.payload),
            "embedding_model": self.embedding_model,
            "is_favorite": self.is_favorite,
            "access_count": self.access_count,
            "last_accessed": self.last_accessed.isoformat() if self.last_accessed else None,
        }
        if include_embedding:
            data["embedding"] = list(self.embedding.vector) if self.embedding else None
        return data


@dataclass
class RetrievalResult:
    """A content item scored against a query; never persisted."""

    item: ContentItem
    similarity: float

    def to_dict(self) -> Dict[str, Any]:
        data = self.item.to_dict()
        data["similarity"] = self.similarity
        return data


@dataclass
class Source:
    """A retrieved item cited by an answer."""

    id: str
    title: str
    content_type: str
    similarity: float
    timestamp: datetime
    url: Optional[str] = None

    @classmethod
    def from_result(cls, result: RetrievalResult) -> "Source":
        item = result.item
        return cls(
            id=item.id,
            title=item.title,
            content_type=item.content_type,
            similarity=result.similarity,
            timestamp=item.timestamp,
            url=item.canonical_url,
        )


@dataclass
class AnswerResult:
    answer: str
    sources: List[Source] = field(default_factory=list)
    confidence: str = "low"
