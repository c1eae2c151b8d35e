"""
Document lifecycle notifications.

Handlers are awaited in registration order after the owning transaction has
committed. A failing handler propagates to the caller; nothing is retried.
"""
from typing import Iterable, List, Optional, Protocol

from cms.core.logging import get_logger
from cms.models.document import Document

logger = get_logger(__name__)


class DocumentEventHandler(Protocol):
    """Something that reacts to document lifecycle changes."""

    async def on_document_added(self, document: Document) -> None: ...

    async def on_document_deleted(self, document: Document) -> None: ...

    async def on_document_unpublished(self, document: Document) -> None: ...


class BaseDocumentEventHandler:
    """No-op handler to subclass when only some events matter."""

    async def on_document_added(self, document: Document) -> None:
        pass

    async def on_document_deleted(self, document: Document) -> None:
        pass

    async def on_document_unpublished(self, document: Document) -> None:
        pass


class DocumentEventService:
    """Fans document events out to registered handlers."""

    def __init__(self, handlers: Optional[Iterable[DocumentEventHandler]] = None):
        self.handlers: List[DocumentEventHandler] = list(handlers or [])

    def register(self, handler: DocumentEventHandler) -> None:
        self.handlers.append(handler)

    async def on_document_added(self, document: Document) -> None:
        await logger.ainfo(
            "Document added",
            document_id=document.id,
            document_type=document.document_type,
            site_id=document.site_id
        )
        for handler in self.handlers:
            await handler.on_document_added(document)

    async def on_document_deleted(self, document: Document) -> None:
        await logger.ainfo(
            "Document deleted",
            document_id=document.id,
            document_type=document.document_type,
            site_id=document.site_id
        )
        for handler in self.handlers:
            await handler.on_document_deleted(document)

    async def on_document_unpublished(self, document: Document) -> None:
        await logger.ainfo(
            "Document unpublished",
            document_id=document.id,
            site_id=document.site_id
        )
        for handler in self.handlers:
            await handler.on_document_unpublished(document)
