"""Create and update of the person aggregate.

Both operations run inside the caller's transaction. Validation and address
resolution happen before the person graph is touched, so a failure in either
leaves the session without partial changes to the person. Orphaned
addresses are removed only after the updated graph has been flushed.
"""

import logging

from sqlalchemy import delete, exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from registry.db.models import (
    Address,
    AddressLink,
    Contact,
    IdentityDocument,
    Person,
)
from registry.people.addresses import AddressResolver
from registry.people.errors import (
    ConflictError,
    CreationError,
    NotFoundError,
    UpdateError,
    translate_integrity_error,
)
from registry.people.types import AddressDraft, Mode, PersonDraft
from registry.people.validation import AggregateValidator

logger = logging.getLogger(__name__)

ResolvedAddress = tuple[AddressDraft, Address]


class PersonReconciler:
    """Applies candidate person graphs to storage."""

    def __init__(
        self,
        session: AsyncSession,
        validator: AggregateValidator | None = None,
        addresses: AddressResolver | None = None,
    ):
        self._session = session
        self._validator = validator or AggregateValidator(session)
        self._addresses = addresses or AddressResolver(session)

    async def create(self, draft: PersonDraft | None) -> Person:
        """Persist a new person with all of its nested items.

        Raises:
            CreationError: Missing draft, identifiers present, or a contact or
                document that already exists.
            ConflictError: Invariant violations or a late constraint failure.
        """
        if draft is None:
            raise CreationError("Person is required")
        if draft.id is not None:
            raise CreationError("New person must not carry an id", field="id")

        await self._validator.validate(draft, Mode.CREATE)
        resolved = await self._resolve_addresses(draft, Mode.CREATE, None)

        person = Person(
            name=draft.name,
            date_of_birth=draft.date_of_birth,
            hidden=draft.hidden,
            address_links=[
                AddressLink(address=address, registration=addr.registration)
                for addr, address in resolved
            ],
            contacts=[Contact(phone_number=c.phone_number) for c in draft.contacts],
            identity_documents=[
                IdentityDocument(
                    type=d.type,
                    full_number=d.full_number,
                    issue_date=d.issue_date,
                    primary=d.primary,
                )
                for d in draft.identity_documents
            ],
        )
        self._session.add(person)
        await self._flush()

        logger.info(
            "person_created",
            extra={
                "person_id": person.id,
                "addresses": len(person.address_links),
                "contacts": len(person.contacts),
                "documents": len(person.identity_documents),
            },
        )
        return person

    async def update(self, draft: PersonDraft | None) -> Person:
        """Replace a stored person's graph with the candidate graph.

        Nested items carrying an id are edited in place; items without one
        are added; stored items missing from the candidate are removed.

        Raises:
            UpdateError: Missing draft or person id.
            NotFoundError: Person or a referenced nested item does not exist.
            CreationError: A new contact or document already exists.
            ConflictError: Invariant violations or a late constraint failure.
        """
        if draft is None:
            raise UpdateError("Person is required")
        if draft.id is None:
            raise UpdateError("Person id is required for update", field="id")

        person = await self._load(draft.id)
        previous_address_ids = {link.address_id for link in person.address_links}

        await self._validator.validate(draft, Mode.UPDATE)
        resolved = await self._resolve_addresses(draft, Mode.UPDATE, person.id)

        person.name = draft.name
        person.date_of_birth = draft.date_of_birth
        person.hidden = draft.hidden
        await self._release_owned_values(person, draft)
        person.contacts = self._merge_contacts(person, draft)
        person.identity_documents = self._merge_documents(person, draft)
        person.address_links = self._merge_links(person, resolved)
        await self._flush()

        current_address_ids = {link.address_id for link in person.address_links}
        deleted = await self._delete_orphans(previous_address_ids - current_address_ids)

        logger.info(
            "person_updated",
            extra={"person_id": person.id, "orphans_deleted": deleted},
        )
        return person

    async def _load(self, person_id: int) -> Person:
        result = await self._session.execute(
            select(Person)
            .where(Person.id == person_id)
            .options(
                selectinload(Person.address_links),
                selectinload(Person.contacts),
                selectinload(Person.identity_documents),
            )
        )
        person = result.scalar_one_or_none()
        if person is None:
            raise NotFoundError(f"Person {person_id} not found", field="id")
        return person

    async def _resolve_addresses(
        self, draft: PersonDraft, mode: Mode, person_id: int | None
    ) -> list[ResolvedAddress]:
        resolved: list[ResolvedAddress] = []
        seen: set[int] = set()
        for addr in draft.addresses:
            address = await self._addresses.resolve(addr, mode, person_id)
            if address.id in seen:
                raise ConflictError(
                    f"Address listed more than once: {address.region.name}, {address.line}",
                    field="addresses",
                )
            seen.add(address.id)
            resolved.append((addr, address))
        return resolved

    async def _release_owned_values(self, person: Person, draft: PersonDraft) -> None:
        """Free the unique values the update is about to reassign.

        Unique constraints are checked row by row and a flush writes updates
        before delete-orphan deletes. Dropped contacts and documents are
        therefore deleted first. Kept rows whose value changes are then parked
        on a placeholder derived from their id, so values can move between
        rows (including swaps) before the final values are written.
        """
        kept_contacts = {c.id: c.phone_number for c in draft.contacts if c.id is not None}
        kept_documents = {
            d.id: (d.type, d.full_number)
            for d in draft.identity_documents
            if d.id is not None
        }
        person.contacts = [c for c in person.contacts if c.id in kept_contacts]
        person.identity_documents = [
            d for d in person.identity_documents if d.id in kept_documents
        ]
        await self._flush()

        parked = 0
        for contact in person.contacts:
            if contact.phone_number != kept_contacts[contact.id]:
                contact.phone_number = f"#{contact.id}"
                parked += 1
        for doc in person.identity_documents:
            if (doc.type, doc.full_number) != kept_documents[doc.id]:
                doc.full_number = f"#{doc.id}"
                parked += 1
        if parked:
            await self._flush()
            logger.debug(
                "owned_values_parked", extra={"person_id": person.id, "rows": parked}
            )

    @staticmethod
    def _merge_contacts(person: Person, draft: PersonDraft) -> list[Contact]:
        stored = {contact.id: contact for contact in person.contacts}
        merged: list[Contact] = []
        for candidate in draft.contacts:
            if candidate.id is None:
                merged.append(Contact(phone_number=candidate.phone_number))
                continue
            contact = stored[candidate.id]
            contact.phone_number = candidate.phone_number
            merged.append(contact)
        return merged

    @staticmethod
    def _merge_documents(person: Person, draft: PersonDraft) -> list[IdentityDocument]:
        stored = {doc.id: doc for doc in person.identity_documents}
        merged: list[IdentityDocument] = []
        for candidate in draft.identity_documents:
            if candidate.id is None:
                doc = IdentityDocument()
            else:
                doc = stored[candidate.id]
            doc.type = candidate.type
            doc.full_number = candidate.full_number
            doc.issue_date = candidate.issue_date
            doc.primary = candidate.primary
            merged.append(doc)
        return merged

    @staticmethod
    def _merge_links(
        person: Person, resolved: list[ResolvedAddress]
    ) -> list[AddressLink]:
        by_address = {link.address_id: link for link in person.address_links}
        by_id = {link.id: link for link in person.address_links}
        wanted = {address.id for _, address in resolved}
        merged: list[AddressLink] = []
        for candidate, address in resolved:
            link = by_address.get(address.id)
            if link is None and candidate.link_id is not None:
                # Repoint the named join row unless its address is still wanted
                named = by_id[candidate.link_id]
                if named.address_id not in wanted and named not in merged:
                    link = named
                    link.address = address
            if link is None:
                link = AddressLink(address=address)
            link.registration = candidate.registration
            merged.append(link)
        return merged

    async def _delete_orphans(self, address_ids: set[int]) -> int:
        """Delete addresses from ``address_ids`` that no link references."""
        if not address_ids:
            return 0
        result = await self._session.execute(
            select(Address.id).where(
                Address.id.in_(address_ids),
                ~exists().where(AddressLink.address_id == Address.id),
            )
        )
        orphan_ids = list(result.scalars().all())
        if not orphan_ids:
            return 0
        await self._session.execute(delete(Address).where(Address.id.in_(orphan_ids)))
        logger.info(
            "orphan_addresses_deleted",
            extra={"address_ids": orphan_ids},
        )
        return len(orphan_ids)

    async def _flush(self) -> None:
        try:
            await self._session.flush()
        except IntegrityError as e:
            logger.warning("person_write_conflict", extra={"error": str(e.orig)})
            raise translate_integrity_error(e) from e
