"""
Role model for front-end access restrictions.
"""
from typing import List
from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cms.core.database import Base
from cms.models.document import webpage_front_end_roles


class Role(Base):
    """A user role that webpages can be restricted to."""

    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)

    front_end_webpages: Mapped[List["Webpage"]] = relationship(
        "Webpage",
        secondary=webpage_front_end_roles,
        back_populates="front_end_allowed_roles"
    )

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, name='{self.name}')>"
