"""Person service: one transaction per operation over the core components."""

import logging

from sqlalchemy import exists, select

from registry.db.engine import Database
from registry.db.models import DocumentType, IdentityDocument, Person, Region
from registry.people.fetcher import PersonFetcher
from registry.people.reconciler import PersonReconciler
from registry.people.regions import RegionLookup
from registry.people.types import PersonDraft

logger = logging.getLogger(__name__)


class PersonService:
    """Entry point used by the HTTP adapter and the CLI.

    Returned objects are detached from their session with every collection
    already loaded.
    """

    def __init__(self, database: Database):
        self._db = database

    async def create_person(self, draft: PersonDraft | None) -> Person:
        async with self._db.session() as session:
            return await PersonReconciler(session).create(draft)

    async def update_person(self, draft: PersonDraft | None) -> Person:
        async with self._db.session() as session:
            return await PersonReconciler(session).update(draft)

    async def get_person(self, person_id: int) -> Person:
        async with self._db.session() as session:
            return await PersonFetcher(session).get(person_id)

    async def list_people(
        self,
        page_number: int,
        page_size: int,
        region: str | None = None,
    ) -> list[Person]:
        async with self._db.session() as session:
            return await PersonFetcher(session).page(page_number, page_size, region)

    async def find_by_name_and_document(
        self,
        full_name: str,
        document_type: DocumentType,
        full_number: str,
    ) -> int | None:
        async with self._db.session() as session:
            return await PersonFetcher(session).find_by_name_and_document(
                full_name, document_type, full_number
            )

    async def verify_passport(self, full_name: str, passport_number: str) -> bool:
        """Check that a person with this name holds this inner passport.

        A plain equality check; it says nothing about the document's validity.
        """
        async with self._db.session() as session:
            stmt = select(
                exists()
                .where(IdentityDocument.owner_id == Person.id)
                .where(
                    Person.name == full_name,
                    IdentityDocument.type == DocumentType.INNER_PASSPORT,
                    IdentityDocument.full_number == passport_number,
                )
            )
            verified = bool(await session.scalar(stmt))
        logger.debug("passport_verified", extra={"verified": verified})
        return verified

    async def list_regions(self) -> list[Region]:
        async with self._db.session() as session:
            return await RegionLookup(session).list()
