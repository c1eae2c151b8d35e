"""
URL history model for retired webpage URLs.
"""
from datetime import datetime
from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cms.core.clock import utcnow
from cms.core.database import Base


class UrlHistory(Base):
    """A URL segment that used to point at (and still resolves to) a webpage."""

    __tablename__ = "url_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    site_id: Mapped[int] = mapped_column(ForeignKey("sites.id"), nullable=False, index=True)
    url_segment: Mapped[str] = mapped_column(String(450), nullable=False, index=True)
    webpage_id: Mapped[int] = mapped_column(
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    webpage: Mapped["Webpage"] = relationship("Webpage", back_populates="urls")

    def __repr__(self) -> str:
        return f"<UrlHistory(id={self.id}, url_segment='{self.url_segment}', webpage_id={self.webpage_id})>"
