"""Read-only lookups over the seeded region table."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from registry.db.models import Region

logger = logging.getLogger(__name__)


class RegionLookup:
    """Resolves region names to rows. Regions are never written here."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def find_by_name(self, name: str) -> Region | None:
        result = await self._session.execute(select(Region).where(Region.name == name))
        return result.scalar_one_or_none()

    async def list(self) -> list[Region]:
        result = await self._session.execute(select(Region).order_by(Region.name))
        return list(result.scalars().all())
