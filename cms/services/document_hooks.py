"""
Per-type document lifecycle hooks.

Each concrete document class resolves to one ``DocumentHooks`` object through
its MRO, so a subclass without its own registration inherits its parent's.
"""
from typing import Dict, Type

from sqlalchemy import inspect

from cms.core.config import settings
from cms.core.exceptions import ValidationError
from cms.core.urls import tidy_url
from cms.models.document import Document, Webpage, Layout, MediaCategory
from cms.models.url_history import UrlHistory


class DocumentHooks:
    """Default hooks shared by every document type."""

    async def on_create(self, document: Document, service) -> None:
        pass

    async def on_save(self, document: Document, service) -> None:
        pass

    async def on_delete(self, document: Document, service) -> None:
        children = await document.awaitable_attrs.children
        if children:
            raise ValidationError(
                f"Cannot delete '{document.name}' while it has {len(children)} child document(s)"
            )

        parent = await document.awaitable_attrs.parent
        if parent is not None:
            siblings = await parent.awaitable_attrs.children
            if document in siblings:
                siblings.remove(document)

        tags = await document.awaitable_attrs.tags
        tags.clear()


class WebpageHooks(DocumentHooks):
    """Assigns webpage URLs and retires old ones into URL history."""

    async def on_create(self, document: Webpage, service) -> None:
        if document.url_segment:
            return
        parent = await document.awaitable_attrs.parent
        if not isinstance(parent, Webpage):
            parent = None
        document.url_segment = await service.get_document_url(
            document.name,
            parent,
            settings.USE_HIERARCHICAL_URLS
        )

    async def on_save(self, document: Webpage, service) -> None:
        state = inspect(document)
        if not state.persistent:
            return

        previous = [url for url in state.attrs.url_segment.history.deleted if url]
        if not previous or previous[0] == document.url_segment:
            return

        old_url = previous[0]
        urls = await document.awaitable_attrs.urls
        if any(entry.url_segment == old_url for entry in urls):
            return
        if await service.url_history.get_by_url_segment(old_url) is not None:
            return

        urls.append(UrlHistory(url_segment=old_url, site_id=document.site_id))


class LayoutHooks(DocumentHooks):

    async def on_create(self, document: Layout, service) -> None:
        if not document.url_segment:
            document.url_segment = await service.get_unique_url(
                tidy_url(document.name),
                service.url_is_valid_for_layout
            )


class MediaCategoryHooks(DocumentHooks):

    async def on_create(self, document: MediaCategory, service) -> None:
        if not document.url_segment:
            document.url_segment = await service.get_unique_url(
                tidy_url(document.name),
                service.url_is_valid_for_media_category
            )


_HOOKS: Dict[type, DocumentHooks] = {
    Document: DocumentHooks(),
    Webpage: WebpageHooks(),
    Layout: LayoutHooks(),
    MediaCategory: MediaCategoryHooks(),
}


def register_document_hooks(document_class: Type[Document], hooks: DocumentHooks) -> None:
    """Install hooks for a document class and its unregistered subclasses."""
    _HOOKS[document_class] = hooks


def get_document_hooks(document: Document) -> DocumentHooks:
    """Resolve the hooks for a document by walking its class hierarchy."""
    for cls in type(document).__mro__:
        hooks = _HOOKS.get(cls)
        if hooks is not None:
            return hooks
    return _HOOKS[Document]
