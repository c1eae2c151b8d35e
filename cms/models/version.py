"""
Document version model for rollback snapshots.
"""
from datetime import datetime
from typing import Any, Dict, List
from sqlalchemy import DateTime, ForeignKey, Integer, JSON, inspect
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cms.core.clock import utcnow
from cms.core.database import Base


class DocumentVersion(Base):
    """Immutable snapshot of a document's versioned fields."""

    __tablename__ = "document_versions"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    document_id: Mapped[int] = mapped_column(
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    site_id: Mapped[int] = mapped_column(ForeignKey("sites.id"), nullable=False, index=True)

    # Snapshot of versioned columns, keyed by attribute name
    data: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    document: Mapped["Document"] = relationship("Document", back_populates="versions")

    def __repr__(self) -> str:
        return f"<DocumentVersion(id={self.id}, document_id={self.document_id})>"


def versioned_fields(document_class: type) -> List[str]:
    """Attribute names of the columns flagged as versioned on a document class."""
    return [
        attr.key
        for attr in inspect(document_class).column_attrs
        if any(column.info.get("versioned") for column in attr.columns)
    ]


def snapshot_document(document) -> Dict[str, Any]:
    """Capture the current values of a document's versioned fields."""
    return {field: getattr(document, field) for field in versioned_fields(type(document))}
