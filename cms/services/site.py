"""
Site lookup and bootstrap.
"""
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from cms.core.config import settings
from cms.core.database import transaction
from cms.core.logging import get_logger
from cms.models.site import Site

logger = get_logger(__name__)


class SiteService:
    """Service for resolving tenant sites."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_site(self, site_id: int) -> Optional[Site]:
        return await self.db.get(Site, site_id)

    async def ensure_default_site(self) -> Site:
        """Create the configured default site when it does not exist yet."""
        site = await self.get_site(settings.DEFAULT_SITE_ID)
        if site is not None:
            return site

        site = Site(id=settings.DEFAULT_SITE_ID, name=settings.DEFAULT_SITE_NAME)
        async with transaction(self.db):
            self.db.add(site)

        await logger.ainfo("Default site created", site_id=site.id, name=site.name)
        return site
