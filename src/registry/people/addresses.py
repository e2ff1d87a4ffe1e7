"""Find-or-create resolution of shared address rows.

An address is keyed by (region, line) and may be linked from any number of
people. Rows are only edited in place while nobody else references them.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from registry.db.models import Address, AddressLink, Region
from registry.people.errors import (
    ConflictError,
    CreationError,
    NotFoundError,
    translate_integrity_error,
)
from registry.people.regions import RegionLookup
from registry.people.types import AddressDraft, Mode

logger = logging.getLogger(__name__)


class AddressResolver:
    """Turns an ``AddressDraft`` into a persisted ``Address``."""

    def __init__(self, session: AsyncSession, regions: RegionLookup | None = None):
        self._session = session
        self._regions = regions or RegionLookup(session)

    async def resolve(
        self,
        draft: AddressDraft,
        mode: Mode,
        person_id: int | None = None,
    ) -> Address:
        """Return the address row the draft refers to, creating it if needed.

        Args:
            draft: Candidate address.
            mode: CREATE rejects drafts carrying an address id.
            person_id: Person being updated; used to tell whether an
                identified address is shared with anyone else.

        Raises:
            CreationError: Address id supplied in create mode.
            NotFoundError: Address id does not exist.
            ConflictError: Region or line missing, unknown region, or a
                concurrent writer created the same address.
        """
        if draft.id is not None and mode is Mode.CREATE:
            raise CreationError(
                "New person must not reference existing addresses by id",
                field="addresses",
            )

        region = await self._require_region(draft)
        line = draft.line or ""

        if draft.id is None:
            return await self._find_or_create(region, line)

        address = await self._session.get(Address, draft.id)
        if address is None:
            raise NotFoundError(f"Address {draft.id} not found", field="addresses")
        return await self._resave(address, region, line, person_id)

    async def find(self, region: Region, line: str) -> Address | None:
        result = await self._session.execute(
            select(Address).where(Address.region_id == region.id, Address.line == line)
        )
        return result.scalar_one_or_none()

    async def _require_region(self, draft: AddressDraft) -> Region:
        if not draft.region or not draft.line:
            raise ConflictError(
                "Address requires both region and address line", field="addresses"
            )
        region = await self._regions.find_by_name(draft.region)
        if region is None:
            raise ConflictError(f"Unknown region: {draft.region}", field="region")
        return region

    async def _find_or_create(self, region: Region, line: str) -> Address:
        existing = await self.find(region, line)
        if existing is not None:
            logger.debug(
                "address_reused",
                extra={"address_id": existing.id, "region": region.name},
            )
            return existing

        address = Address(region=region, line=line)
        self._session.add(address)
        await self._flush()
        logger.debug(
            "address_created", extra={"address_id": address.id, "region": region.name}
        )
        return address

    async def _resave(
        self,
        address: Address,
        region: Region,
        line: str,
        person_id: int | None,
    ) -> Address:
        if address.region_id == region.id and address.line == line:
            return address

        # The edited key may already exist as its own row
        existing = await self.find(region, line)
        if existing is not None:
            logger.debug(
                "address_edit_merged",
                extra={"from_address_id": address.id, "address_id": existing.id},
            )
            return existing

        if await self._is_shared(address, person_id):
            logger.debug("address_copied_on_write", extra={"address_id": address.id})
            return await self._find_or_create(region, line)

        address.region = region
        address.line = line
        await self._flush()
        logger.debug("address_edited", extra={"address_id": address.id})
        return address

    async def _is_shared(self, address: Address, person_id: int | None) -> bool:
        stmt = select(func.count(AddressLink.id)).where(
            AddressLink.address_id == address.id
        )
        if person_id is not None:
            stmt = stmt.where(AddressLink.person_id != person_id)
        return (await self._session.scalar(stmt) or 0) > 0

    async def _flush(self) -> None:
        try:
            await self._session.flush()
        except IntegrityError as e:
            logger.warning("address_write_conflict", extra={"error": str(e.orig)})
            raise translate_integrity_error(e) from e
