"""
Content endpoints: capture, CRUD, keyword and semantic search, question answering.
"""

import math
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from .schemas import (
    AnswerResponse,
    AskRequest,
    BookmarkRequest,
    ContentListResponse,
    ContentResponse,
    ContentUpdateRequest,
    DeleteResponse,
    DocumentRequest,
    KeywordSearchRequest,
    Pagination,
    PhotoRequest,
    ProductRequest,
    SearchResponse,
    SemanticSearchRequest,
    SourceResponse,
    SummarizeRequest,
    TodoRequest,
    YouTubeRequest,
)
from .services import get_capture_service, get_rag_service, get_retriever, get_store
from ..core import config
from ..core.errors import ContentNotFound
from ..core.search_service import RetrievalFilter
from ..core.schema import AnswerResult
from ..util.logging import logger, sanitize_payload

router = APIRouter()


def _answer_response(result: AnswerResult) -> AnswerResponse:
    return AnswerResponse(
        answer=result.answer,
        sources=[
            SourceResponse(
                id=s.id,
                title=s.title,
                content_type=s.content_type,
                similarity=s.similarity,
                timestamp=s.timestamp,
                url=s.url,
            )
            for s in result.sources
        ],
        confidence=result.confidence,
    )


# Capture

@router.post("/photo", response_model=ContentResponse, status_code=201)
def save_photo(request: PhotoRequest, capture=Depends(get_capture_service)):
    if not request.image_data and not request.image_url:
        raise HTTPException(status_code=400, detail="Either imageData or imageUrl is required")

    item = capture.save_photo(
        image_data=request.image_data,
        image_url=request.image_url,
        width=request.width,
        height=request.height,
        tags=request.tags,
    )
    return ContentResponse(message="Photo saved successfully", data=item.to_dict())


@router.post("/document", response_model=ContentResponse, status_code=201)
def save_document(request: DocumentRequest, capture=Depends(get_capture_service)):
    item = capture.save_document(
        request.content,
        source_url=request.source_url,
        selection_context=request.selection_context,
        tags=request.tags,
    )
    return ContentResponse(message="Document saved successfully", data=item.to_dict())


@router.post("/todo", response_model=ContentResponse, status_code=201)
def save_todo(request: TodoRequest, capture=Depends(get_capture_service)):
    item = capture.save_todo(request.content, priority=request.priority, due_date=request.due_date)
    return ContentResponse(message="Todo saved successfully", data=item.to_dict())


@router.post("/product", response_model=ContentResponse, status_code=201)
def save_product(request: ProductRequest, capture=Depends(get_capture_service)):
    item = capture.save_product(
        request.page_content,
        request.product_url,
        image_url=request.image_url,
        source_url=request.source_url,
        tags=request.tags,
    )
    return ContentResponse(message="Product saved successfully", data=item.to_dict())


@router.post("/bookmark", response_model=ContentResponse, status_code=201)
def save_bookmark(request: BookmarkRequest, capture=Depends(get_capture_service)):
    item = capture.save_bookmark(
        request.url,
        scroll_position=request.scroll_position.model_dump() if request.scroll_position else None,
        page_title=request.page_title,
        favicon=request.favicon,
        meta_description=request.meta_description,
        tags=request.tags,
    )
    return ContentResponse(message="Bookmark saved successfully", data=item.to_dict())


@router.post("/youtube", response_model=ContentResponse, status_code=201)
def save_youtube(request: YouTubeRequest, capture=Depends(get_capture_service)):
    item = capture.save_youtube(
        request.video_id,
        request.video_url,
        video_title=request.video_title,
        video_description=request.video_description,
        channel_name=request.channel_name,
        thumbnail_url=request.thumbnail_url,
        duration=request.duration,
        view_count=request.view_count,
        tags=request.tags,
    )
    return ContentResponse(message="YouTube video saved successfully", data=item.to_dict())


# Listing and keyword search

@router.get("/", response_model=ContentListResponse)
def list_content(
    content_type: Optional[str] = Query(default=None, alias="contentType"),
    search: Optional[str] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    sort_by: str = Query(default="timestamp", alias="sortBy"),
    sort_order: str = Query(default="desc", alias="sortOrder"),
    store=Depends(get_store),
):
    """List saved content, newest first by default."""
    try:
        items, total = store.list_items(
            content_type=content_type,
            search=search,
            page=page,
            limit=limit,
            sort_by=sort_by,
            sort_order=sort_order,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return ContentListResponse(
        data=[item.to_dict() for item in items],
        pagination=Pagination(total=total, page=page, limit=limit, pages=math.ceil(total / limit)),
    )


@router.post("/search", response_model=SearchResponse)
def keyword_search(request: KeywordSearchRequest, store=Depends(get_store)):
    items = store.keyword_search(request.query, limit=request.limit)
    return SearchResponse(data=[item.to_dict() for item in items], count=len(items))


# Semantic search and question answering

@router.post("/semantic-search", response_model=SearchResponse)
def semantic_search(request: SemanticSearchRequest, retriever=Depends(get_retriever)):
    """Rank saved items by meaning rather than exact words."""
    results = retriever.retrieve(
        request.query,
        RetrievalFilter(content_type=request.content_type, date_filter=request.date_filter),
        k=request.limit or config.SEARCH_DEFAULT_LIMIT,
    )
    return SearchResponse(data=[r.to_dict() for r in results], count=len(results))


@router.post("/ask", response_model=AnswerResponse)
def ask(request: AskRequest, rag=Depends(get_rag_service)):
    result = rag.answer_question(
        request.question,
        content_type=request.content_type,
        date_filter=request.date_filter,
        limit=request.limit or config.RAG_DEFAULT_LIMIT,
    )
    return _answer_response(result)


@router.post("/summarize", response_model=AnswerResponse)
def summarize(request: SummarizeRequest, rag=Depends(get_rag_service)):
    result = rag.summarize_topic(
        request.topic,
        content_type=request.content_type,
        date_filter=request.date_filter,
        limit=request.limit or config.RAG_DEFAULT_LIMIT,
    )
    return _answer_response(result)


# Single item

@router.get("/{item_id}", response_model=ContentResponse)
def get_content(item_id: str, store=Depends(get_store)):
    item = store.get(item_id, touch=True)
    if item is None:
        raise ContentNotFound(f"Content '{item_id}' not found")
    return ContentResponse(data=item.to_dict())


@router.put("/{item_id}", response_model=ContentResponse)
def update_content(item_id: str, request: ContentUpdateRequest, store=Depends(get_store)):
    partial = request.model_dump(exclude_none=True)
    if not partial:
        raise HTTPException(status_code=400, detail="No updatable fields supplied")

    logger.debug(f"Updating content '{item_id}': {sanitize_payload(partial)}")
    try:
        item = store.update(item_id, partial)
    except (ValueError, TypeError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    if item is None:
        raise ContentNotFound(f"Content '{item_id}' not found")
    return ContentResponse(message="Content updated successfully", data=item.to_dict())


@router.delete("/{item_id}", response_model=DeleteResponse)
def delete_content(item_id: str, store=Depends(get_store)):
    if not store.delete(item_id):
        raise ContentNotFound(f"Content '{item_id}' not found")
    return DeleteResponse(success=True, message="Content deleted successfully")
