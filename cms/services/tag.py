"""
Tag registry service.
"""
from typing import List, Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from cms.core.database import transaction
from cms.core.logging import get_logger
from cms.models.site import Site
from cms.models.tag import Tag

logger = get_logger(__name__)


class TagService:
    """Service for looking up and registering tags within a site."""

    def __init__(self, db: AsyncSession, site: Site):
        self.db = db
        self.site = site

    async def get_by_name(self, name: str) -> Optional[Tag]:
        """
        Get a tag by its exact (case-sensitive) name.

        Args:
            name: Tag name

        Returns:
            Optional[Tag]: The tag if it exists in the current site
        """
        result = await self.db.execute(
            select(Tag)
            .where(Tag.name == name, Tag.site_id == self.site.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def add(self, tag: Tag) -> Tag:
        """
        Register a new tag.

        Args:
            tag: Tag to persist

        Returns:
            Tag: The persisted tag
        """
        if tag.site_id is None:
            tag.site_id = self.site.id

        async with transaction(self.db):
            self.db.add(tag)

        await logger.ainfo("Tag created", tag_id=tag.id, name=tag.name, site_id=tag.site_id)
        return tag

    async def get_all_tags(self) -> List[Tag]:
        """Get all tags in the current site ordered by name."""
        result = await self.db.execute(
            select(Tag)
            .where(Tag.site_id == self.site.id)
            .order_by(Tag.name)
        )
        return list(result.scalars().all())

    async def get_tag_count(self) -> int:
        """Get total number of tags in the current site."""
        result = await self.db.execute(
            select(func.count(Tag.id)).where(Tag.site_id == self.site.id)
        )
        return result.scalar() or 0
