"""
Document models for the site content tree.

All document types share one table; ``document_type`` holds the concrete
class name.
"""
from datetime import datetime
from typing import Optional, List
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cms.core.clock import utcnow
from cms.core.database import Base
from cms.core.exceptions import ValidationError

# Columns carrying this info are copied into and out of DocumentVersion snapshots
VERSIONED = {"versioned": True}


document_tags = Table(
    "document_tags",
    Base.metadata,
    Column("document_id", Integer, ForeignKey("documents.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True, index=True),
)

document_shown_widgets = Table(
    "document_shown_widgets",
    Base.metadata,
    Column("document_id", Integer, ForeignKey("documents.id", ondelete="CASCADE"), primary_key=True),
    Column("widget_id", Integer, ForeignKey("widgets.id", ondelete="CASCADE"), primary_key=True),
)

document_hidden_widgets = Table(
    "document_hidden_widgets",
    Base.metadata,
    Column("document_id", Integer, ForeignKey("documents.id", ondelete="CASCADE"), primary_key=True),
    Column("widget_id", Integer, ForeignKey("widgets.id", ondelete="CASCADE"), primary_key=True),
)

webpage_front_end_roles = Table(
    "webpage_front_end_roles",
    Base.metadata,
    Column("webpage_id", Integer, ForeignKey("documents.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class Document(Base):
    """Base of every node in a site's content tree."""

    __tablename__ = "documents"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    document_type: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    # Ownership and tree position
    site_id: Mapped[int] = mapped_column(ForeignKey("sites.id"), nullable=False, index=True)
    parent_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("documents.id"),
        nullable=True,
        index=True
    )
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Content
    name: Mapped[str] = mapped_column(String(255), nullable=False, info=VERSIONED)
    url_segment: Mapped[Optional[str]] = mapped_column(
        String(450),
        nullable=True,
        index=True,
        info=VERSIONED
    )
    meta_title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, info=VERSIONED)
    meta_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True, info=VERSIONED)
    meta_keywords: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, info=VERSIONED)

    # Publishing
    publish_on: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True, index=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    site: Mapped["Site"] = relationship("Site")
    parent: Mapped[Optional["Document"]] = relationship(
        "Document",
        remote_side="Document.id",
        back_populates="children"
    )
    children: Mapped[List["Document"]] = relationship(
        "Document",
        back_populates="parent",
        order_by="Document.display_order"
    )
    tags: Mapped[List["Tag"]] = relationship(
        "Tag",
        secondary=document_tags,
        back_populates="documents"
    )
    shown_widgets: Mapped[List["Widget"]] = relationship("Widget", secondary=document_shown_widgets)
    hidden_widgets: Mapped[List["Widget"]] = relationship("Widget", secondary=document_hidden_widgets)
    versions: Mapped[List["DocumentVersion"]] = relationship(
        "DocumentVersion",
        back_populates="document",
        cascade="all, delete-orphan",
        order_by="DocumentVersion.id.desc()"
    )

    __mapper_args__ = {
        "polymorphic_on": "document_type",
        "polymorphic_abstract": True,
        # Load subclass columns with every query; async sessions cannot lazy load them
        "with_polymorphic": "*",
    }

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id={self.id}, name='{self.name}', url='{self.url_segment}')>"


class Webpage(Document):
    """A publicly routable page."""

    # Subclass columns live on the shared table, so they stay nullable
    body_content: Mapped[Optional[str]] = mapped_column(Text, nullable=True, info=VERSIONED)
    reveal_in_navigation: Mapped[bool] = mapped_column(Boolean, nullable=True, default=False)
    requires_ssl: Mapped[bool] = mapped_column(Boolean, nullable=True, default=False)
    inherit_front_end_roles_from_parent: Mapped[bool] = mapped_column(
        Boolean,
        nullable=True,
        default=True
    )

    urls: Mapped[List["UrlHistory"]] = relationship(
        "UrlHistory",
        back_populates="webpage",
        cascade="all, delete-orphan"
    )
    front_end_allowed_roles: Mapped[List["Role"]] = relationship(
        "Role",
        secondary=webpage_front_end_roles,
        back_populates="front_end_webpages"
    )

    __mapper_args__ = {"polymorphic_abstract": True}

    @property
    def published(self) -> bool:
        return self.publish_on is not None and self.publish_on <= utcnow()


class TextPage(Webpage):
    """General purpose content page."""

    __mapper_args__ = {"polymorphic_identity": "TextPage"}


class Layout(Document):
    """Page layout template."""

    __mapper_args__ = {"polymorphic_identity": "Layout"}


class MediaCategory(Document):
    """Folder of media files."""

    is_gallery: Mapped[bool] = mapped_column(Boolean, nullable=True, default=False)

    __mapper_args__ = {"polymorphic_identity": "MediaCategory"}


def get_document_type(name: str) -> type:
    """
    Resolve a concrete document class from its type name.

    Raises:
        ValidationError: If the name is not a concrete document type
    """
    mapper = Document.__mapper__.polymorphic_map.get(name)
    if mapper is None:
        raise ValidationError(f"Unknown document type '{name}'")
    return mapper.class_
