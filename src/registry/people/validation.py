"""Person-level invariant checks run before any write.

The validator only reads. It turns the common collisions into errors that
name the offending field; the unique constraints in storage remain the
final guard (see ``translate_integrity_error``).
"""

import logging
from collections import Counter
from collections.abc import Iterable

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from registry.db.models import AddressLink, Contact, IdentityDocument
from registry.people.errors import ConflictError, CreationError, NotFoundError
from registry.people.types import Mode, PersonDraft

logger = logging.getLogger(__name__)


class AggregateValidator:
    """Checks a candidate person graph against the registry invariants."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def validate(self, draft: PersonDraft, mode: Mode) -> None:
        """Return normally if the draft is acceptable for ``mode``.

        Raises:
            ConflictError: Primary document or registration address counts
                are wrong, or the draft repeats a phone number, a document
                or a nested id.
            CreationError: Identifiers in create mode, or a new contact or
                document collides with a stored one.
            NotFoundError: An identifier in update mode does not belong to
                the person being updated.
        """
        self.check_primary_document(draft)
        self.check_registration_address(draft)
        self._check_internal_duplicates(draft)

        if mode is Mode.CREATE:
            self._check_no_identifiers(draft)
        else:
            if draft.id is None:
                raise ValueError("update validation requires a person id")
            await self._check_identifiers_exist(draft, draft.id)

        await self._check_new_contacts_unique(draft)
        await self._check_new_documents_unique(draft)
        logger.debug("person_validated", extra={"mode": mode.value, "person_id": draft.id})

    @staticmethod
    def check_primary_document(draft: PersonDraft) -> None:
        primary = sum(1 for doc in draft.identity_documents if doc.primary)
        if primary != 1:
            raise ConflictError(
                f"Person must have exactly one primary identity document, got {primary}",
                field="identity_documents",
            )

    @staticmethod
    def check_registration_address(draft: PersonDraft) -> None:
        registrations = sum(1 for addr in draft.addresses if addr.registration)
        if registrations > 1:
            raise ConflictError(
                f"Person may have at most one registration address, got {registrations}",
                field="addresses",
            )

    @staticmethod
    def _check_internal_duplicates(draft: PersonDraft) -> None:
        phones = Counter(contact.phone_number for contact in draft.contacts)
        if repeated := [phone for phone, count in phones.items() if count > 1]:
            raise ConflictError(
                f"Phone number listed more than once: {repeated[0]}",
                field="phone_number",
            )
        documents = Counter(
            (doc.type, doc.full_number) for doc in draft.identity_documents
        )
        if any(count > 1 for count in documents.values()):
            raise ConflictError(
                "Identity document listed more than once", field="identity_documents"
            )

        # One stored row can back only one item of the candidate graph
        nested_ids = (
            ("contacts", (contact.id for contact in draft.contacts)),
            ("identity_documents", (doc.id for doc in draft.identity_documents)),
            ("addresses", (addr.id for addr in draft.addresses)),
            ("addresses", (addr.link_id for addr in draft.addresses)),
        )
        for field, ids in nested_ids:
            counts = Counter(i for i in ids if i is not None)
            if repeated := [i for i, count in counts.items() if count > 1]:
                raise ConflictError(
                    f"{field} id {repeated[0]} listed more than once", field=field
                )

    @staticmethod
    def _check_no_identifiers(draft: PersonDraft) -> None:
        if any(contact.id is not None for contact in draft.contacts):
            raise CreationError(
                "New contacts must not carry an id", field="contacts"
            )
        if any(doc.id is not None for doc in draft.identity_documents):
            raise CreationError(
                "New identity documents must not carry an id",
                field="identity_documents",
            )
        if any(
            addr.id is not None or addr.link_id is not None for addr in draft.addresses
        ):
            raise CreationError(
                "New addresses must not carry an id", field="addresses"
            )

    async def _check_identifiers_exist(self, draft: PersonDraft, person_id: int) -> None:
        await self._require_owned(
            Contact.id,
            Contact.owner_id,
            (c.id for c in draft.contacts),
            person_id,
            "contacts",
        )
        await self._require_owned(
            IdentityDocument.id,
            IdentityDocument.owner_id,
            (d.id for d in draft.identity_documents),
            person_id,
            "identity_documents",
        )
        await self._require_owned(
            AddressLink.id,
            AddressLink.person_id,
            (a.link_id for a in draft.addresses),
            person_id,
            "addresses",
        )

    async def _require_owned(
        self,
        id_column,
        owner_column,
        ids: Iterable[int | None],
        person_id: int,
        field: str,
    ) -> None:
        wanted = {i for i in ids if i is not None}
        if not wanted:
            return
        result = await self._session.execute(
            select(id_column).where(id_column.in_(wanted), owner_column == person_id)
        )
        missing = wanted - set(result.scalars().all())
        if missing:
            raise NotFoundError(
                f"{field} not found for person {person_id}: {sorted(missing)}",
                field=field,
            )

    async def _check_new_contacts_unique(self, draft: PersonDraft) -> None:
        phones = [c.phone_number for c in draft.contacts if c.id is None]
        if not phones:
            return
        stmt = select(Contact.phone_number).where(Contact.phone_number.in_(phones))
        if draft.id is not None:
            # The person's own rows are either kept in the draft or released
            stmt = stmt.where(Contact.owner_id != draft.id)
        result = await self._session.execute(stmt)
        if taken := result.scalars().first():
            raise CreationError(
                f"Phone number is already used: {taken}", field="phone_number"
            )

    async def _check_new_documents_unique(self, draft: PersonDraft) -> None:
        keys = [
            (d.type, d.full_number) for d in draft.identity_documents if d.id is None
        ]
        if not keys:
            return
        stmt = select(IdentityDocument.type, IdentityDocument.full_number).where(
            or_(
                *(
                    and_(
                        IdentityDocument.type == doc_type,
                        IdentityDocument.full_number == full_number,
                    )
                    for doc_type, full_number in keys
                )
            )
        )
        if draft.id is not None:
            stmt = stmt.where(IdentityDocument.owner_id != draft.id)
        result = await self._session.execute(stmt)
        if taken := result.first():
            raise CreationError(
                f"Identity document already exists: {taken.type.value} full_number={taken.full_number}",
                field="identity_documents",
            )
