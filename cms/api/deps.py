"""
Shared FastAPI dependencies for the admin API.
"""
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cms.core.config import settings
from cms.core.database import get_db
from cms.core.exceptions import NotFoundError, ValidationError
from cms.models.site import Site
from cms.services.document import DocumentService
from cms.services.document_events import DocumentEventService
from cms.services.import_documents import ImportDocumentsService
from cms.services.site import SiteService

# Process-wide notifier; other subsystems register their handlers on it
document_events = DocumentEventService()


def get_document_event_service() -> DocumentEventService:
    return document_events


async def get_current_site(request: Request, db: AsyncSession = Depends(get_db)) -> Site:
    """
    Resolve the site a request operates on.

    Raises:
        ValidationError: If the site header is not an integer
        NotFoundError: If the site does not exist
    """
    raw_site_id = request.headers.get(settings.SITE_HEADER)
    if raw_site_id is None:
        site_id = settings.DEFAULT_SITE_ID
    else:
        try:
            site_id = int(raw_site_id)
        except ValueError:
            raise ValidationError(f"Invalid {settings.SITE_HEADER} header: '{raw_site_id}'")

    site = await SiteService(db).get_site(site_id)
    if site is None:
        raise NotFoundError(f"Site {site_id} not found")
    return site


async def get_document_service(
    db: AsyncSession = Depends(get_db),
    site: Site = Depends(get_current_site),
    events: DocumentEventService = Depends(get_document_event_service)
) -> DocumentService:
    return DocumentService(db, site, events)


async def get_import_service(
    documents: DocumentService = Depends(get_document_service)
) -> ImportDocumentsService:
    return ImportDocumentsService(documents, documents.tags, documents.url_history)
