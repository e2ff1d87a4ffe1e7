"""Read paths for the person aggregate.

Each nested collection is loaded by its own ``selectinload`` query keyed by
person id, and the session's identity map stitches the results onto one
object per person. Joining all three one-to-many collections in a single
statement would multiply rows and break offset paging.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from registry.db.models import (
    Address,
    AddressLink,
    DocumentType,
    IdentityDocument,
    Person,
)
from registry.people.errors import NotFoundError
from registry.people.regions import RegionLookup

logger = logging.getLogger(__name__)

_FULL_GRAPH = (
    selectinload(Person.address_links)
    .joinedload(AddressLink.address)
    .joinedload(Address.region),
    selectinload(Person.contacts),
    selectinload(Person.identity_documents),
)


class PersonFetcher:
    """Loads fully populated people."""

    def __init__(self, session: AsyncSession, regions: RegionLookup | None = None):
        self._session = session
        self._regions = regions or RegionLookup(session)

    async def get(self, person_id: int) -> Person:
        result = await self._session.execute(
            select(Person).where(Person.id == person_id).options(*_FULL_GRAPH)
        )
        person = result.scalar_one_or_none()
        if person is None:
            raise NotFoundError(f"Person {person_id} not found", field="id")
        return person

    async def page(
        self,
        page_number: int,
        page_size: int,
        region: str | None = None,
    ) -> list[Person]:
        """Return one page of people ordered by id.

        Args:
            page_number: Zero-based page index.
            page_size: Number of people per page.
            region: Only people whose registration address lies in this
                region. An unknown region yields an empty page.
        """
        if page_number < 0 or page_size < 1:
            raise ValueError("page_number must be >= 0 and page_size >= 1")

        ids = await self._page_ids(page_number, page_size, region)
        if not ids:
            return []

        result = await self._session.execute(
            select(Person)
            .where(Person.id.in_(ids))
            .order_by(Person.id)
            .options(*_FULL_GRAPH)
        )
        people = list(result.scalars().all())
        logger.debug(
            "people_page_loaded",
            extra={"page_number": page_number, "count": len(people), "region": region},
        )
        return people

    async def _page_ids(
        self, page_number: int, page_size: int, region: str | None
    ) -> list[int]:
        stmt = select(Person.id)
        if region is not None:
            found = await self._regions.find_by_name(region)
            if found is None:
                return []
            # At most one registration link per person, so no duplicate ids
            stmt = (
                stmt.join(AddressLink, AddressLink.person_id == Person.id)
                .join(Address, Address.id == AddressLink.address_id)
                .where(AddressLink.registration.is_(True), Address.region_id == found.id)
            )
        stmt = stmt.order_by(Person.id).offset(page_number * page_size).limit(page_size)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def find_by_name_and_document(
        self, full_name: str, document_type: DocumentType, full_number: str
    ) -> int | None:
        """Return the id of the person with this name holding this document."""
        result = await self._session.execute(
            select(Person.id)
            .join(IdentityDocument, IdentityDocument.owner_id == Person.id)
            .where(
                Person.name == full_name,
                IdentityDocument.type == document_type,
                IdentityDocument.full_number == full_number,
            )
        )
        return result.scalars().first()
