"""
Tag model for content categorization.
"""
from datetime import datetime
from typing import List
from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cms.core.clock import utcnow
from cms.core.database import Base
from cms.models.document import document_tags


class Tag(Base):
    """Tag model for categorizing documents."""

    __tablename__ = "tags"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Tag information
    site_id: Mapped[int] = mapped_column(ForeignKey("sites.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    # Relationships
    documents: Mapped[List["Document"]] = relationship(
        "Document",
        secondary=document_tags,
        back_populates="tags"
    )

    # Constraints
    __table_args__ = (
        UniqueConstraint('site_id', 'name', name='uq_tag_site_name'),
    )

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, name='{self.name}')>"
