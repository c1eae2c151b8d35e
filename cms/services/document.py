"""
Document service for the site content tree.

Covers creation and sibling ordering, retrieval, URL assignment, tag
reconciliation, widget visibility overrides, publishing and version rollback.
Every operation is scoped to the site the service was created for.
"""
from typing import AsyncIterator, Awaitable, Callable, Iterable, List, Optional, Type, TypeVar, Union

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from cms.core.clock import utcnow
from cms.core.database import transaction
from cms.core.exceptions import InvalidArgumentError, NotFoundError, ValidationError
from cms.core.logging import get_logger
from cms.core.urls import tidy_url
from cms.models.document import Document, Webpage, Layout, MediaCategory
from cms.models.role import Role
from cms.models.site import Site
from cms.models.tag import Tag
from cms.models.url_history import UrlHistory
from cms.models.version import DocumentVersion, snapshot_document, versioned_fields
from cms.models.widget import Widget
from cms.services.document_events import DocumentEventService
from cms.services.document_hooks import get_document_hooks
from cms.services.tag import TagService
from cms.services.url_history import UrlHistoryService

logger = get_logger(__name__)

T = TypeVar("T", bound=Document)

UrlValidator = Callable[[str], Awaitable[bool]]


class DocumentService:
    """Service for document tree operations within one site."""

    def __init__(
        self,
        db: AsyncSession,
        site: Site,
        event_service: Optional[DocumentEventService] = None
    ):
        self.db = db
        self.site = site
        self.event_service = event_service or DocumentEventService()
        self.tags = TagService(db, site)
        self.url_history = UrlHistoryService(db, site)

    # ------------------------------------------------------------------
    # Creation and ordering
    # ------------------------------------------------------------------

    async def add_document(self, document: T) -> T:
        """
        Add a new document to the tree.

        The document is placed after its existing siblings, initialised by its
        type's ``on_create`` hook, attached to its parent and persisted. The
        "document added" event fires once the transaction has committed.

        Args:
            document: Unsaved document

        Returns:
            The same document instance, now persisted
        """
        if document.site_id is None:
            document.site_id = self.site.id

        parent = await self._resolve_parent(document)
        document.display_order = await self._next_display_order(document, parent)

        await get_document_hooks(document).on_create(document, self)

        if parent is not None:
            children = await parent.awaitable_attrs.children
            if document not in children:
                children.append(document)

        async with transaction(self.db):
            self.db.add(document)

        await logger.ainfo(
            "Document created",
            document_id=document.id,
            document_type=document.document_type,
            parent_id=document.parent_id,
            display_order=document.display_order,
            site_id=document.site_id
        )

        await self.event_service.on_document_added(document)
        return document

    async def save_document(self, document: T) -> T:
        """
        Persist changes to a document.

        Runs the type's ``on_save`` hook first and returns the instance that
        was passed in.
        """
        await get_document_hooks(document).on_save(document, self)

        async with transaction(self.db):
            self.db.add(document)

        await logger.adebug("Document saved", document_id=document.id)
        return document

    async def delete_document(self, document: Optional[Document]) -> None:
        """
        Remove a document from the tree.

        Raises:
            ValidationError: If the document still has children
        """
        if document is None:
            return

        await get_document_hooks(document).on_delete(document, self)

        async with transaction(self.db):
            await self.db.delete(document)

        await self.event_service.on_document_deleted(document)

    async def set_order(self, document_id: int, order: int) -> None:
        """
        Overwrite one document's display order. Siblings are not renumbered.

        Raises:
            NotFoundError: If no such document exists in the current site
        """
        async with transaction(self.db):
            document = await self._get_for_update(document_id)
            document.display_order = order

    async def set_orders(self, items: Iterable) -> None:
        """Apply a batch of ``{id, order}`` items, one update each."""
        for item in items:
            await self.set_order(item.id, item.order)

    async def set_parent(self, document: Optional[Document], parent_id: Optional[int]) -> None:
        """Move a document under the webpage ``parent_id``, or to the root for ``None``."""
        if document is None:
            return

        parent = None
        if parent_id is not None:
            parent = await self.get_document(Webpage, parent_id)
            if parent is None:
                raise NotFoundError(f"Webpage {parent_id} not found")
            async for ancestor in self.get_parents(parent.id):
                if ancestor is document:
                    raise ValidationError(f"Cannot move '{document.name}' below itself")

        # Load the current parent so the move updates both children lists
        await document.awaitable_attrs.parent
        document.parent = parent
        await self.save_document(document)

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------

    async def get_document(self, model: Type[T], document_id: Optional[int]) -> Optional[T]:
        """Get a document of the given type by id, or ``None``."""
        if not document_id:
            return None
        document = await self.db.get(Document, document_id)
        if not isinstance(document, model) or document.site_id != self.site.id:
            return None
        return document

    async def get_all_documents(self, model: Type[T]) -> List[T]:
        """All documents of a type in the current site, in id order."""
        result = await self.db.execute(
            select(model)
            .where(model.site_id == self.site.id)
            .order_by(model.id)
        )
        return list(result.scalars().all())

    async def get_documents_by_parent(self, model: Type[T], parent: Optional[Document] = None) -> List[T]:
        """
        Get the documents of a type below a parent.

        With a parent, the parent's loaded children are filtered by type and
        keep their attached order. Without one, root documents of the current
        site are queried in display order.
        """
        if parent is not None:
            children = await parent.awaitable_attrs.children
            return [child for child in children if isinstance(child, model)]

        result = await self.db.execute(
            select(model)
            .where(model.parent_id.is_(None), model.site_id == self.site.id)
            .order_by(model.display_order)
        )
        return list(result.scalars().all())

    async def get_document_by_url(self, model: Type[T], url: str) -> Optional[T]:
        """The first document of a type with exactly this URL segment."""
        result = await self.db.execute(
            select(model)
            .where(model.url_segment == url, model.site_id == self.site.id)
            .limit(1)
        )
        return result.scalars().first()

    async def get_parents(self, document_id: Optional[int]) -> AsyncIterator[Document]:
        """
        Walk from a document up to its root.

        Yields the document itself first. Yields nothing for a missing or
        non-positive id.
        """
        if not document_id or document_id <= 0:
            return

        document = await self.get_document(Document, document_id)
        while document is not None:
            yield document
            if document.parent_id is None:
                break
            document = await self.db.get(Document, document.parent_id)

    async def get_home_page(self) -> Optional[Webpage]:
        """The first published root webpage of the site."""
        result = await self.db.execute(
            select(Webpage)
            .where(
                Webpage.parent_id.is_(None),
                Webpage.site_id == self.site.id,
                Webpage.publish_on.is_not(None),
                Webpage.publish_on <= utcnow()
            )
            .order_by(Webpage.display_order)
            .limit(1)
        )
        return result.scalars().first()

    async def exist_any(self, model: Type[Document]) -> bool:
        """Whether the current site has any document of the type."""
        result = await self.db.execute(
            select(model).where(model.site_id == self.site.id).limit(1)
        )
        return result.scalars().first() is not None

    async def any_webpages(self) -> bool:
        return await self.exist_any(Webpage)

    async def any_published_webpages(self) -> bool:
        result = await self.db.execute(
            select(Webpage)
            .where(
                Webpage.site_id == self.site.id,
                Webpage.publish_on.is_not(None),
                Webpage.publish_on <= utcnow()
            )
            .limit(1)
        )
        return result.scalars().first() is not None

    async def get_webpages_by_parent_id_for_nav(self, parent_id: Optional[int]) -> List[Webpage]:
        """Published webpages shown in navigation under a parent (root for ``None``)."""
        parent_clause = Webpage.parent_id.is_(None) if parent_id is None else Webpage.parent_id == parent_id
        result = await self.db.execute(
            select(Webpage)
            .where(
                parent_clause,
                Webpage.site_id == self.site.id,
                Webpage.reveal_in_navigation.is_(True),
                Webpage.publish_on.is_not(None),
                Webpage.publish_on <= utcnow()
            )
            .order_by(Webpage.display_order)
        )
        return list(result.scalars().all())

    async def get_document_version(self, version_id: int) -> Optional[DocumentVersion]:
        version = await self.db.get(DocumentVersion, version_id)
        if version is None or version.site_id != self.site.id:
            return None
        return version

    # ------------------------------------------------------------------
    # URL assignment
    # ------------------------------------------------------------------

    async def get_document_url(
        self,
        page_name: str,
        parent: Union[Document, int, str, None] = None,
        use_hierarchy: bool = False
    ) -> str:
        """
        Suggest a free webpage URL for a page name.

        The parent may be a document, its id or its URL. With
        ``use_hierarchy`` the parent's URL segment becomes a prefix.
        Collisions get ``-1``, ``-2``, ... appended to the whole candidate.
        """
        url = tidy_url(page_name)

        if use_hierarchy and parent is not None:
            if isinstance(parent, int):
                parent = await self.get_document(Webpage, parent)
            elif isinstance(parent, str):
                parent = await self.get_document_by_url(Webpage, parent)
            if parent is not None and parent.url_segment:
                url = f"{tidy_url(parent.url_segment)}/{url}"

        return await self.get_unique_url(url, self.url_is_valid_for_webpage)

    async def get_unique_url(self, url: str, is_valid: UrlValidator) -> str:
        candidate = url
        suffix = 0
        while not await is_valid(candidate):
            suffix += 1
            candidate = f"{url}-{suffix}"
        return candidate

    async def url_is_valid_for_webpage(self, url: Optional[str], document_id: Optional[int] = None) -> bool:
        """
        Check whether a URL may be used by a webpage.

        A URL the webpage already owns, either live or retired, is always
        valid for it. Otherwise no live webpage and no retired URL may use it.
        """
        if not url:
            return False

        if document_id is not None:
            webpage = await self.get_document(Webpage, document_id)
            if webpage is not None:
                if webpage.url_segment == url:
                    return True
                urls = await webpage.awaitable_attrs.urls
                if any(entry.url_segment == url for entry in urls):
                    return True

        if await self._url_exists(Webpage, url):
            return False
        return await self.url_is_valid_for_webpage_url_history(url)

    async def url_is_valid_for_webpage_url_history(self, url: str) -> bool:
        return await self.url_history.get_by_url_segment(url) is None

    async def url_is_valid_for_layout(self, url: Optional[str], document_id: Optional[int] = None) -> bool:
        return await self._url_is_valid_for(Layout, url, document_id)

    async def url_is_valid_for_media_category(self, url: Optional[str], document_id: Optional[int] = None) -> bool:
        return await self._url_is_valid_for(MediaCategory, url, document_id)

    async def get_history_item_by_url(self, url: str) -> Optional[UrlHistory]:
        return await self.url_history.get_by_url_segment(url)

    # ------------------------------------------------------------------
    # Tags and roles
    # ------------------------------------------------------------------

    async def set_tags(self, tag_list: Optional[str], document: Optional[Document]) -> None:
        """
        Make a document's tags match a comma separated list of names.

        Missing tags are created in the registry. Tags dropped from the list
        are unlinked but never deleted. Changes are staged on the session;
        save the document to persist them.

        Raises:
            InvalidArgumentError: If document is None
        """
        if document is None:
            raise InvalidArgumentError("document")

        names = list(dict.fromkeys(
            name.strip() for name in (tag_list or "").split(",") if name.strip()
        ))

        tags = await document.awaitable_attrs.tags
        for name in names:
            if any(tag.name == name for tag in tags):
                continue
            tag = self._pending_tag(name) or await self.tags.get_by_name(name)
            if tag is None:
                tag = Tag(name=name, site_id=self.site.id)
                self.db.add(tag)
            tags.append(tag)

        for tag in [tag for tag in tags if tag.name not in names]:
            tags.remove(tag)

    async def set_front_end_roles(self, role_list: Optional[str], webpage: Optional[Webpage]) -> None:
        """
        Restrict a webpage to a comma separated list of role names.

        Names match case-insensitively and unknown names are ignored. A page
        inheriting its roles from its parent keeps no explicit roles. Changes
        are staged on the session; save the webpage to persist them.

        Raises:
            InvalidArgumentError: If webpage is None
        """
        if webpage is None:
            raise InvalidArgumentError("webpage")

        allowed = await webpage.awaitable_attrs.front_end_allowed_roles
        if webpage.inherit_front_end_roles_from_parent:
            allowed.clear()
            return

        wanted = {name.strip().lower() for name in (role_list or "").split(",") if name.strip()}
        matched: List[Role] = []
        if wanted:
            result = await self.db.execute(select(Role).where(func.lower(Role.name).in_(sorted(wanted))))
            matched = list(result.scalars().all())

        for role in matched:
            if role not in allowed:
                allowed.append(role)
        for role in [role for role in allowed if role not in matched]:
            allowed.remove(role)

    # ------------------------------------------------------------------
    # Widget visibility
    # ------------------------------------------------------------------

    async def hide_widget(self, document: Optional[Document], widget_id: int) -> None:
        """Hide a widget on a document. Widgets of other sites are ignored."""
        widget = await self.db.get(Widget, widget_id)
        if document is None or widget is None or widget.site_id != self.site.id:
            return

        shown = await document.awaitable_attrs.shown_widgets
        hidden = await document.awaitable_attrs.hidden_widgets
        if widget in shown:
            shown.remove(widget)
        elif widget not in hidden:
            hidden.append(widget)

        await self.save_document(document)

    async def show_widget(self, document: Optional[Document], widget_id: int) -> None:
        widget = await self.db.get(Widget, widget_id)
        if document is None or widget is None or widget.site_id != self.site.id:
            return

        shown = await document.awaitable_attrs.shown_widgets
        hidden = await document.awaitable_attrs.hidden_widgets
        if widget in hidden:
            hidden.remove(widget)
        elif widget not in shown:
            shown.append(widget)

        await self.save_document(document)

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    async def publish_now(self, webpage: Webpage) -> None:
        if webpage.publish_on is None:
            webpage.publish_on = utcnow()
            await self.save_document(webpage)

    async def unpublish(self, webpage: Webpage) -> None:
        webpage.publish_on = None
        await self.save_document(webpage)
        await self.event_service.on_document_unpublished(webpage)

    # ------------------------------------------------------------------
    # Versioning
    # ------------------------------------------------------------------

    async def record_version(self, document: Document) -> DocumentVersion:
        """Store a snapshot of the document's versioned fields."""
        version = DocumentVersion(
            document=document,
            site_id=document.site_id,
            data=snapshot_document(document)
        )
        async with transaction(self.db):
            self.db.add(version)

        await logger.ainfo("Document version recorded", document_id=document.id, version_id=version.id)
        return version

    async def revert_to_version(self, version: DocumentVersion) -> Document:
        """
        Copy a snapshot's versioned fields back onto its document.

        Raises:
            NotFoundError: If the snapshot is not one of the document's versions
        """
        document = await version.awaitable_attrs.document
        if document is None:
            document = await self.db.get(Document, version.document_id)
        if document is None:
            raise NotFoundError(f"Document {version.document_id} not found")

        versions = await document.awaitable_attrs.versions
        snapshot = next((item for item in versions if item.id == version.id), None)
        if snapshot is None:
            raise NotFoundError(f"Version {version.id} not found on document {document.id}")

        async with transaction(self.db):
            for field in versioned_fields(type(document)):
                setattr(document, field, snapshot.data.get(field))

        await logger.ainfo("Document reverted", document_id=document.id, version_id=snapshot.id)
        return document

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _resolve_parent(self, document: Document) -> Optional[Document]:
        parent = await document.awaitable_attrs.parent
        if parent is None and document.parent_id is not None:
            parent = await self.db.get(Document, document.parent_id)
            if parent is not None:
                document.parent = parent
        return parent

    async def _next_display_order(self, document: Document, parent: Optional[Document]) -> int:
        if parent is not None:
            children = await parent.awaitable_attrs.children
            siblings = [child for child in children if child is not document]
        elif isinstance(document, MediaCategory):
            siblings = await self.get_documents_by_parent(MediaCategory)
        elif isinstance(document, Layout):
            siblings = await self.get_documents_by_parent(Layout)
        else:
            siblings = await self.get_documents_by_parent(Webpage)

        if not siblings:
            return 0
        return max(sibling.display_order or 0 for sibling in siblings) + 1

    async def _get_for_update(self, document_id: int) -> Document:
        document = await self.get_document(Document, document_id)
        if document is None:
            raise NotFoundError(f"Document {document_id} not found")
        return document

    async def _url_exists(self, model: Type[Document], url: str) -> bool:
        result = await self.db.execute(
            select(model)
            .where(model.url_segment == url, model.site_id == self.site.id)
            .limit(1)
        )
        return result.scalars().first() is not None

    async def _url_is_valid_for(self, model: Type[Document], url: Optional[str], document_id: Optional[int]) -> bool:
        if not url:
            return False
        if document_id is not None:
            document = await self.get_document(model, document_id)
            if document is not None and document.url_segment == url:
                return True
        return not await self._url_exists(model, url)

    def _pending_tag(self, name: str) -> Optional[Tag]:
        for obj in self.db.new:
            if isinstance(obj, Tag) and obj.name == name and obj.site_id == self.site.id:
                return obj
        return None
