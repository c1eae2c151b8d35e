"""
Admin API endpoint for bulk webpage import.
"""
from fastapi import APIRouter, Depends

from cms.api.deps import get_import_service
from cms.schemas.import_export import ImportRequest, ImportResponse
from cms.services.import_documents import ImportDocumentsService

router = APIRouter(prefix="/admin", tags=["Import"])


@router.post("/import", response_model=ImportResponse)
async def import_documents(
    request: ImportRequest,
    service: ImportDocumentsService = Depends(get_import_service)
):
    """
    Create or update webpages by URL segment.

    Items are applied in order, so a parent listed earlier can be referenced
    through ``parent_url`` by later items.
    """
    documents = await service.import_documents(request.documents)
    return ImportResponse(imported=len(documents), document_ids=[document.id for document in documents])
