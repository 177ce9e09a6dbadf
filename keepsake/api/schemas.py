"""
Request and response models for the content API.

Request fields accept both the browser extension's camelCase names and
snake_case.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime

from ..core.schema import CONTENT_TYPES, TODO_PRIORITIES


class CaptureRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tags: Optional[List[str]] = None


class PhotoRequest(CaptureRequest):
    image_data: Optional[str] = Field(default=None, alias="imageData")
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    width: Optional[int] = None
    height: Optional[int] = None


class DocumentRequest(CaptureRequest):
    content: str
    source_url: Optional[str] = Field(default=None, alias="sourceUrl")
    selection_context: Optional[str] = Field(default=None, alias="selectionContext")

    @field_validator('content')
    @classmethod
    def content_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('content cannot be empty')
        return v


class TodoRequest(CaptureRequest):
    content: str
    priority: str = "medium"
    due_date: Optional[datetime] = Field(default=None, alias="dueDate")

    @field_validator('content')
    @classmethod
    def content_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('content cannot be empty')
        return v

    @field_validator('priority')
    @classmethod
    def priority_must_be_valid(cls, v):
        if v not in TODO_PRIORITIES:
            raise ValueError(f'priority must be one of: {list(TODO_PRIORITIES)}')
        return v


class ProductRequest(CaptureRequest):
    page_content: str = Field(default="", alias="pageContent")
    product_url: str = Field(alias="productUrl")
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    source_url: Optional[str] = Field(default=None, alias="sourceUrl")


class ScrollPositionModel(BaseModel):
    x: float = 0
    y: float = 0
    percentage: float = 0


class BookmarkRequest(CaptureRequest):
    url: str
    scroll_position: Optional[ScrollPositionModel] = Field(default=None, alias="scrollPosition")
    page_title: Optional[str] = Field(default=None, alias="pageTitle")
    favicon: Optional[str] = None
    meta_description: Optional[str] = Field(default=None, alias="metaDescription")

    @field_validator('url')
    @classmethod
    def url_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('url cannot be empty')
        return v


class YouTubeRequest(CaptureRequest):
    video_id: str = Field(alias="videoId")
    video_url: str = Field(alias="videoUrl")
    video_title: Optional[str] = Field(default=None, alias="videoTitle")
    video_description: Optional[str] = Field(default=None, alias="videoDescription")
    channel_name: Optional[str] = Field(default=None, alias="channelName")
    thumbnail_url: Optional[str] = Field(default=None, alias="thumbnailUrl")
    duration: Optional[str] = None
    view_count: Optional[int] = Field(default=None, alias="viewCount")


class ContentUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tags: Optional[List[str]] = None
    is_favorite: Optional[bool] = Field(default=None, alias="isFavorite")
    payload: Optional[Dict[str, Any]] = None
    """Corrections to fields of the item's own content type"""


class KeywordSearchRequest(BaseModel):
    query: str
    limit: int = Field(default=20, ge=1, le=100)

    @field_validator('query')
    @classmethod
    def query_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('query cannot be empty')
        return v


class RetrievalRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content_type: Optional[str] = Field(default=None, alias="contentType")
    date_filter: Optional[str] = Field(default=None, alias="dateFilter")
    limit: Optional[int] = None

    @field_validator('content_type')
    @classmethod
    def content_type_must_be_valid(cls, v):
        if v is not None and v not in CONTENT_TYPES:
            raise ValueError(f'contentType must be one of: {list(CONTENT_TYPES)}')
        return v

    @field_validator('limit')
    @classmethod
    def limit_must_be_positive(cls, v):
        if v is not None and v < 1:
            raise ValueError('limit must be >= 1')
        return v


class SemanticSearchRequest(RetrievalRequest):
    query: str

    @field_validator('query')
    @classmethod
    def query_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('query cannot be empty')
        return v


class AskRequest(RetrievalRequest):
    question: str

    @field_validator('question')
    @classmethod
    def question_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('question cannot be empty')
        return v


class SummarizeRequest(RetrievalRequest):
    topic: str

    @field_validator('topic')
    @classmethod
    def topic_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('topic cannot be empty')
        return v


class ContentResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    data: Dict[str, Any]


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class ContentListResponse(BaseModel):
    success: bool = True
    data: List[Dict[str, Any]]
    pagination: Pagination


class SearchResponse(BaseModel):
    success: bool = True
    data: List[Dict[str, Any]]
    count: int


class SourceResponse(BaseModel):
    id: str
    title: str
    content_type: str
    similarity: float
    timestamp: datetime
    url: Optional[str] = None


class AnswerResponse(BaseModel):
    success: bool = True
    answer: str
    sources: List[SourceResponse]
    confidence: str


class DeleteResponse(BaseModel):
    success: bool
    message: str


class HealthResponse(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    status: str
    version: str
    db_health: bool
    item_count: int
    embedding_model: Optional[str] = None


class ReconcileResponse(BaseModel):
    scanned: int
    embedded: int
    unchanged: int
    failed: int
    errors: List[str] = []


class ErrorResponse(BaseModel):
    error_type: str
    message: str
    timestamp: datetime = None
    details: Optional[Dict[str, Any]] = None

    def __init__(self, **data):
        super().__init__(timestamp=datetime.now(), **data)
