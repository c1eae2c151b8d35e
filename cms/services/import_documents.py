"""
Batch import of webpages from external descriptions.
"""
from typing import Iterable, List

from cms.core.exceptions import ValidationError
from cms.core.logging import get_logger
from cms.models.document import Webpage, get_document_type
from cms.models.tag import Tag
from cms.models.url_history import UrlHistory
from cms.schemas.import_export import DocumentImportDTO
from cms.services.document import DocumentService
from cms.services.tag import TagService
from cms.services.url_history import UrlHistoryService

logger = get_logger(__name__)


class ImportDocumentsService:
    """Applies ``DocumentImportDTO`` items through the document service."""

    def __init__(
        self,
        document_service: DocumentService,
        tag_service: TagService,
        url_history_service: UrlHistoryService
    ):
        self.documents = document_service
        self.tags = tag_service
        self.url_history = url_history_service

    async def import_documents(self, items: Iterable[DocumentImportDTO]) -> List[Webpage]:
        """Import every item in order."""
        imported = [await self.import_document(item) for item in items]
        await logger.ainfo("Documents imported", count=len(imported))
        return imported

    async def import_document(self, dto: DocumentImportDTO) -> Webpage:
        """
        Create or update the webpage with the DTO's URL segment.

        Scalar fields are overwritten, tags are replaced and URL history is
        merged additively. The publish date is only applied when the DTO names
        a parent URL.

        Raises:
            ValidationError: If a new document's type is unknown or not a webpage
        """
        tags = [await self._get_or_create_tag(name) for name in dict.fromkeys(dto.tags)]

        document = await self.documents.get_document_by_url(Webpage, dto.url_segment)
        if document is None:
            document_class = get_document_type(dto.document_type)
            if not issubclass(document_class, Webpage):
                raise ValidationError(f"'{dto.document_type}' is not a webpage type")
            document = document_class()
        else:
            # Load the current parent so a move updates both children lists
            await document.awaitable_attrs.parent

        if dto.parent_url is not None:
            document.parent = await self.documents.get_document_by_url(Webpage, dto.parent_url)
        if dto.url_segment is not None:
            document.url_segment = dto.url_segment
        document.name = dto.name
        document.body_content = dto.body_content
        document.meta_title = dto.meta_title
        document.meta_description = dto.meta_description
        document.meta_keywords = dto.meta_keywords
        document.reveal_in_navigation = dto.reveal_in_navigation
        document.requires_ssl = dto.require_ssl
        document.display_order = dto.display_order
        if dto.parent_url is not None:
            document.publish_on = dto.publish_date

        document_tags = await document.awaitable_attrs.tags
        document_tags.clear()
        document_tags.extend(tags)

        if document.id is None:
            await self.documents.add_document(document)
        else:
            await self.documents.save_document(document)

        document = await self.documents.get_document_by_url(Webpage, document.url_segment)

        urls = await document.awaitable_attrs.urls
        for url in dto.url_history:
            if not url or not url.strip():
                continue
            if any(entry.url_segment == url for entry in urls):
                continue
            if await self.url_history.get_by_url_segment(url) is None:
                await self.url_history.add(
                    UrlHistory(url_segment=url, webpage=document, site_id=document.site_id)
                )

        await self.documents.save_document(document)

        await logger.ainfo(
            "Document imported",
            document_id=document.id,
            url_segment=document.url_segment,
            tags=len(tags),
            history=len(urls)
        )
        return document

    async def _get_or_create_tag(self, name: str) -> Tag:
        tag = await self.tags.get_by_name(name)
        if tag is None:
            tag = await self.tags.add(Tag(name=name))
        return tag
