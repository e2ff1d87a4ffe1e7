"""Reference data seeding."""

import logging
from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from registry.db.models import Region

logger = logging.getLogger(__name__)


async def seed_regions(session: AsyncSession, names: Iterable[str]) -> list[Region]:
    """Insert any of ``names`` that are not yet present as regions.

    Returns:
        The newly inserted regions (existing ones are left untouched).
    """
    wanted = list(dict.fromkeys(names))
    if not wanted:
        return []

    result = await session.execute(select(Region.name).where(Region.name.in_(wanted)))
    existing = set(result.scalars().all())

    created = [Region(name=name) for name in wanted if name not in existing]
    session.add_all(created)
    await session.flush()

    if created:
        logger.info("regions_seeded", extra={"count": len(created)})
    return created
