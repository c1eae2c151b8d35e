"""
Admin API endpoints for the document tree.

Routes only bind requests and call DocumentService; ServiceException
subclasses are turned into responses by the application's error handler.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response, status

from cms.core.config import settings
from cms.core.exceptions import DuplicateError, NotFoundError
from cms.models.document import Document, Webpage, Layout, MediaCategory, get_document_type
from cms.services.document import DocumentService
from cms.api.deps import get_document_service
from cms.schemas.document import (
    DocumentCreate, DocumentResponse, DocumentSummary, DocumentVersionResponse,
    SetParentRequest, SetTagsRequest, SortItem, UrlSuggestionResponse, UrlValidityResponse
)

router = APIRouter(prefix="/admin", tags=["Documents"])


@router.post("/documents", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def create_document(
    doc_data: DocumentCreate,
    service: DocumentService = Depends(get_document_service)
):
    """
    Create a document of any concrete type.

    - **document_type**: TextPage, Layout or MediaCategory
    - **parent_id**: Optional parent document
    - **url_segment**: Generated from the name when omitted
    """
    document_class = get_document_type(doc_data.document_type)

    if doc_data.parent_id is not None and await service.get_document(Document, doc_data.parent_id) is None:
        raise NotFoundError(f"Parent document {doc_data.parent_id} not found")

    if doc_data.url_segment and not await _url_is_valid(service, document_class, doc_data.url_segment):
        raise DuplicateError(f"URL '{doc_data.url_segment}' is already in use")

    document = document_class(
        name=doc_data.name,
        parent_id=doc_data.parent_id,
        url_segment=doc_data.url_segment,
        meta_title=doc_data.meta_title,
        meta_description=doc_data.meta_description,
        meta_keywords=doc_data.meta_keywords,
    )
    if isinstance(document, Webpage):
        document.body_content = doc_data.body_content
        document.reveal_in_navigation = doc_data.reveal_in_navigation
        document.requires_ssl = doc_data.requires_ssl

    await service.add_document(document)
    return await _to_document_response(document)


@router.get("/documents/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: int,
    service: DocumentService = Depends(get_document_service)
):
    document = await _require_document(service, Document, document_id)
    return await _to_document_response(document)


@router.delete("/documents/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: int,
    service: DocumentService = Depends(get_document_service)
):
    """Delete a document. Documents with children are refused."""
    document = await _require_document(service, Document, document_id)
    await service.delete_document(document)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/documents/{document_id}/parents", response_model=List[DocumentSummary])
async def get_parents(
    document_id: int,
    service: DocumentService = Depends(get_document_service)
):
    """Breadcrumb from the document up to its root."""
    return [DocumentSummary.model_validate(document) async for document in service.get_parents(document_id)]


@router.put("/documents/{document_id}/tags", response_model=DocumentResponse)
async def set_tags(
    document_id: int,
    request: SetTagsRequest,
    service: DocumentService = Depends(get_document_service)
):
    document = await _require_document(service, Document, document_id)
    await service.set_tags(request.tags, document)
    await service.save_document(document)
    return await _to_document_response(document)


@router.put("/documents/{document_id}/parent", response_model=DocumentResponse)
async def set_parent(
    document_id: int,
    request: SetParentRequest,
    service: DocumentService = Depends(get_document_service)
):
    document = await _require_document(service, Document, document_id)
    await service.set_parent(document, request.parent_id)
    return await _to_document_response(document)


@router.post("/documents/sort", status_code=status.HTTP_204_NO_CONTENT)
async def sort_documents(
    items: List[SortItem],
    service: DocumentService = Depends(get_document_service)
):
    """Apply a complete sibling ordering."""
    await service.set_orders(items)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/documents/{document_id}/widgets/{widget_id}/hide", response_model=DocumentResponse)
async def hide_widget(
    document_id: int,
    widget_id: int,
    service: DocumentService = Depends(get_document_service)
):
    document = await _require_document(service, Document, document_id)
    await service.hide_widget(document, widget_id)
    return await _to_document_response(document)


@router.post("/documents/{document_id}/widgets/{widget_id}/show", response_model=DocumentResponse)
async def show_widget(
    document_id: int,
    widget_id: int,
    service: DocumentService = Depends(get_document_service)
):
    document = await _require_document(service, Document, document_id)
    await service.show_widget(document, widget_id)
    return await _to_document_response(document)


@router.post(
    "/documents/{document_id}/versions",
    response_model=DocumentVersionResponse,
    status_code=status.HTTP_201_CREATED
)
async def record_version(
    document_id: int,
    service: DocumentService = Depends(get_document_service)
):
    document = await _require_document(service, Document, document_id)
    return await service.record_version(document)


@router.post("/versions/{version_id}/revert", response_model=DocumentResponse)
async def revert_to_version(
    version_id: int,
    service: DocumentService = Depends(get_document_service)
):
    version = await service.get_document_version(version_id)
    if version is None:
        raise NotFoundError(f"Version {version_id} not found")
    document = await service.revert_to_version(version)
    return await _to_document_response(document)


@router.post("/webpages/{document_id}/publish", response_model=DocumentResponse)
async def publish_webpage(
    document_id: int,
    service: DocumentService = Depends(get_document_service)
):
    webpage = await _require_document(service, Webpage, document_id)
    await service.publish_now(webpage)
    return await _to_document_response(webpage)


@router.post("/webpages/{document_id}/unpublish", response_model=DocumentResponse)
async def unpublish_webpage(
    document_id: int,
    service: DocumentService = Depends(get_document_service)
):
    webpage = await _require_document(service, Webpage, document_id)
    await service.unpublish(webpage)
    return await _to_document_response(webpage)


@router.get("/webpages/home", response_model=DocumentResponse)
async def get_home_page(service: DocumentService = Depends(get_document_service)):
    webpage = await service.get_home_page()
    if webpage is None:
        raise NotFoundError("No published home page")
    return await _to_document_response(webpage)


@router.get("/webpages/suggest-url", response_model=UrlSuggestionResponse)
async def suggest_url(
    page_name: str = Query(..., min_length=1),
    parent_id: Optional[int] = Query(None),
    use_hierarchy: bool = Query(settings.USE_HIERARCHICAL_URLS),
    service: DocumentService = Depends(get_document_service)
):
    url = await service.get_document_url(page_name, parent_id, use_hierarchy)
    return UrlSuggestionResponse(url=url)


@router.get("/webpages/url-is-valid", response_model=UrlValidityResponse)
async def url_is_valid(
    url: str = Query(...),
    document_id: Optional[int] = Query(None),
    service: DocumentService = Depends(get_document_service)
):
    valid = await service.url_is_valid_for_webpage(url, document_id)
    return UrlValidityResponse(url=url, valid=valid)


async def _require_document(service: DocumentService, model, document_id: int):
    document = await service.get_document(model, document_id)
    if document is None:
        raise NotFoundError(f"{model.__name__} {document_id} not found")
    return document


async def _url_is_valid(service: DocumentService, document_class: type, url: str) -> bool:
    if issubclass(document_class, Layout):
        return await service.url_is_valid_for_layout(url)
    if issubclass(document_class, MediaCategory):
        return await service.url_is_valid_for_media_category(url)
    return await service.url_is_valid_for_webpage(url)


async def _to_document_response(document: Document) -> DocumentResponse:
    """Convert a document to its response model, loading its collections."""
    tags = await document.awaitable_attrs.tags
    shown = await document.awaitable_attrs.shown_widgets
    hidden = await document.awaitable_attrs.hidden_widgets
    return DocumentResponse(
        id=document.id,
        document_type=document.document_type,
        site_id=document.site_id,
        parent_id=document.parent_id,
        name=document.name,
        url_segment=document.url_segment,
        display_order=document.display_order,
        meta_title=document.meta_title,
        meta_description=document.meta_description,
        meta_keywords=document.meta_keywords,
        body_content=getattr(document, "body_content", None),
        publish_on=document.publish_on,
        published=getattr(document, "published", False),
        tags=[tag.name for tag in tags],
        shown_widget_ids=[widget.id for widget in shown],
        hidden_widget_ids=[widget.id for widget in hidden],
        created_at=document.created_at,
        updated_at=document.updated_at,
    )
