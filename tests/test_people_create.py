"""Tests for creating people through the person service."""

import pytest

from registry.db.models import (
    Address,
    AddressLink,
    Contact,
    DocumentType,
    IdentityDocument,
    Person,
)
from registry.people import ConflictError, CreationError
from tests.conftest import count_rows, make_address, make_contact, make_document, make_person


class TestCreatePerson:
    """Tests for PersonService.create_person."""

    async def test_round_trip(self, service):
        draft = make_person(
            hidden=True,
            addresses=(
                make_address(registration=True),
                make_address(region="R2", line="L2"),
            ),
            contacts=(make_contact(), make_contact("+79001112233")),
        )
        created = await service.create_person(draft)
        assert created.id is not None
        assert all(c.id is not None for c in created.contacts)
        assert all(d.id is not None for d in created.identity_documents)

        fetched = await service.get_person(created.id)
        assert fetched.name == draft.name
        assert fetched.date_of_birth == draft.date_of_birth
        assert fetched.hidden is True
        assert len(fetched.address_links) == 2
        assert len(fetched.contacts) == 2
        assert len(fetched.identity_documents) == 1

    async def test_defaults_preserved(self, service):
        created = await service.create_person(make_person())
        fetched = await service.get_person(created.id)
        assert fetched.hidden is False
        assert fetched.address_links == []
        assert fetched.identity_documents[0].primary is True

    async def test_registration_flag_stored(self, service):
        created = await service.create_person(
            make_person(
                addresses=(
                    make_address(line="Home", registration=True),
                    make_address(line="Office"),
                )
            )
        )
        fetched = await service.get_person(created.id)
        flags = {link.address.line: link.registration for link in fetched.address_links}
        assert flags == {"Home": True, "Office": False}

    async def test_shared_address_stored_once(self, database, service):
        a = await service.create_person(
            make_person(name="A", addresses=(make_address("R1", "L1", registration=True),))
        )
        b = await service.create_person(
            make_person(
                name="B",
                addresses=(
                    make_address("R1", "L1"),
                    make_address("R2", "L2", registration=True),
                ),
                contacts=(make_contact("+79990000000"),),
                identity_documents=(make_document("1111 222222"),),
            )
        )

        assert await count_rows(database, Address) == 2
        assert await count_rows(database, AddressLink) == 3
        assert a.address_links[0].address_id == b.address_links[0].address_id

        in_r1 = await service.list_people(0, 10, region="R1")
        in_r2 = await service.list_people(0, 10, region="R2")
        assert [p.id for p in in_r2] == [b.id]
        # B lives in R1 too, but is registered in R2
        assert [p.id for p in in_r1] == [a.id]

    async def test_listing_by_region_matches_both_registrations(self, service):
        a = await service.create_person(
            make_person(name="A", addresses=(make_address("R1", "L1", registration=True),))
        )
        b = await service.create_person(
            make_person(
                name="B",
                addresses=(make_address("R1", "L1", registration=True),),
                contacts=(make_contact("+79990000000"),),
                identity_documents=(make_document("1111 222222"),),
            )
        )
        people = await service.list_people(0, 10, region="R1")
        assert [p.id for p in people] == [a.id, b.id]


class TestCreateRejected:
    """Failed creates leave storage untouched."""

    async def test_none(self, service):
        with pytest.raises(CreationError):
            await service.create_person(None)

    async def test_person_with_id(self, service):
        with pytest.raises(CreationError) as exc_info:
            await service.create_person(make_person(id=7))
        assert exc_info.value.field == "id"

    async def test_duplicate_phone(self, database, service):
        await service.create_person(make_person())
        before = await count_rows(database, Contact)

        with pytest.raises(CreationError) as exc_info:
            await service.create_person(
                make_person(
                    name="Copycat",
                    identity_documents=(make_document("1111 222222"),),
                )
            )
        assert exc_info.value.field == "phone_number"
        assert await count_rows(database, Contact) == before
        assert await count_rows(database, Person) == 1

    async def test_duplicate_document(self, database, service):
        await service.create_person(make_person())
        with pytest.raises(CreationError):
            await service.create_person(
                make_person(name="Copycat", contacts=(make_contact("+79990000000"),))
            )
        assert await count_rows(database, IdentityDocument) == 1

    @pytest.mark.parametrize(
        "documents",
        [
            (),
            (make_document(primary=False),),
            (
                make_document("1111 111111"),
                make_document(
                    "2222 222222", type=DocumentType.INTERNATIONAL_PASSPORT
                ),
            ),
        ],
        ids=["none", "no_primary", "two_primaries"],
    )
    async def test_primary_document_count(self, database, service, documents):
        with pytest.raises(ConflictError):
            await service.create_person(make_person(identity_documents=documents))
        assert await count_rows(database, Person) == 0

    async def test_two_registration_addresses(self, database, service):
        draft = make_person(
            addresses=(
                make_address(line="L1", registration=True),
                make_address(line="L2", registration=True),
            )
        )
        with pytest.raises(ConflictError):
            await service.create_person(draft)
        assert await count_rows(database, Address) == 0

    async def test_unknown_region_rolls_back_addresses(self, database, service):
        draft = make_person(
            addresses=(make_address("R1", "L1"), make_address("Atlantis", "L2"))
        )
        with pytest.raises(ConflictError):
            await service.create_person(draft)
        assert await count_rows(database, Address) == 0
        assert await count_rows(database, Person) == 0

    async def test_same_address_twice(self, database, service):
        draft = make_person(addresses=(make_address(), make_address(registration=True)))
        with pytest.raises(ConflictError) as exc_info:
            await service.create_person(draft)
        assert exc_info.value.field == "addresses"
        assert await count_rows(database, Address) == 0
