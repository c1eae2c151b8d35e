"""
URL history service for retired webpage URLs.
"""
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cms.core.database import transaction
from cms.core.logging import get_logger
from cms.models.site import Site
from cms.models.url_history import UrlHistory

logger = get_logger(__name__)


class UrlHistoryService:
    """Records URL segments that used to point at a webpage."""

    def __init__(self, db: AsyncSession, site: Site):
        self.db = db
        self.site = site

    async def get_by_url_segment(self, url_segment: str) -> Optional[UrlHistory]:
        """Find the history entry for a URL segment in the current site."""
        result = await self.db.execute(
            select(UrlHistory)
            .where(UrlHistory.url_segment == url_segment, UrlHistory.site_id == self.site.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def add(self, entry: UrlHistory) -> UrlHistory:
        """Persist a history entry."""
        if entry.site_id is None:
            entry.site_id = self.site.id

        async with transaction(self.db):
            self.db.add(entry)

        await logger.ainfo(
            "URL retired",
            url_segment=entry.url_segment,
            webpage_id=entry.webpage_id,
            site_id=entry.site_id
        )
        return entry

    async def get_for_webpage(self, webpage_id: int) -> List[UrlHistory]:
        """All retired URLs of one webpage, oldest first."""
        result = await self.db.execute(
            select(UrlHistory)
            .where(UrlHistory.webpage_id == webpage_id, UrlHistory.site_id == self.site.id)
            .order_by(UrlHistory.id)
        )
        return list(result.scalars().all())
