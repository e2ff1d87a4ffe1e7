"""Tests for updating people and orphan address cleanup."""

import dataclasses

import pytest

from registry.db.models import Address, AddressLink, Contact, IdentityDocument, Person
from registry.people import ConflictError, CreationError, NotFoundError, UpdateError
from tests.conftest import count_rows, make_address, make_contact, make_document, make_person


def as_update(person, **changes):
    """Build an update draft that mirrors ``person`` with ``changes`` applied."""
    draft = make_person(
        id=person.id,
        name=person.name,
        hidden=person.hidden,
        addresses=tuple(
            make_address(
                link.address.region.name,
                link.address.line,
                registration=link.registration,
                id=link.address_id,
                link_id=link.id,
            )
            for link in person.address_links
        ),
        contacts=tuple(make_contact(c.phone_number, id=c.id) for c in person.contacts),
        identity_documents=tuple(
            make_document(d.full_number, primary=d.primary, type=d.type, id=d.id)
            for d in person.identity_documents
        ),
    )
    return dataclasses.replace(draft, **changes)


@pytest.fixture
async def neighbour(service):
    """A second person sharing R1/L1."""
    return await service.create_person(
        make_person(
            name="Neighbour",
            addresses=(make_address("R1", "L1", registration=True),),
            contacts=(make_contact("+79990000000"),),
            identity_documents=(make_document("1111 222222"),),
        )
    )


class TestUpdateRejected:
    """Structurally unusable updates."""

    async def test_none(self, service):
        with pytest.raises(UpdateError):
            await service.update_person(None)

    async def test_missing_id(self, service):
        with pytest.raises(UpdateError) as exc_info:
            await service.update_person(make_person())
        assert exc_info.value.field == "id"

    async def test_missing_id_wins_over_other_errors(self, service):
        draft = make_person(
            identity_documents=(),
            addresses=(
                make_address(registration=True),
                make_address(line="L2", registration=True),
            ),
        )
        with pytest.raises(UpdateError):
            await service.update_person(draft)

    async def test_unknown_person(self, service):
        with pytest.raises(NotFoundError):
            await service.update_person(make_person(id=404))

    async def test_primary_document_count_checked(self, service):
        person = await service.create_person(make_person())
        draft = as_update(
            person,
            identity_documents=(
                make_document(primary=False, id=person.identity_documents[0].id),
            ),
        )
        with pytest.raises(ConflictError):
            await service.update_person(draft)

    async def test_two_registration_addresses(self, service):
        person = await service.create_person(make_person())
        draft = as_update(
            person,
            addresses=(
                make_address(line="L1", registration=True),
                make_address(line="L2", registration=True),
            ),
        )
        with pytest.raises(ConflictError):
            await service.update_person(draft)

    async def test_foreign_contact_id(self, service, neighbour):
        person = await service.create_person(make_person())
        draft = as_update(
            person, contacts=(make_contact("+79005550000", id=neighbour.contacts[0].id),)
        )
        with pytest.raises(NotFoundError):
            await service.update_person(draft)

    async def test_new_contact_taken_by_other_person(self, database, service, neighbour):
        person = await service.create_person(make_person())
        draft = as_update(
            person,
            contacts=(
                make_contact(id=person.contacts[0].id),
                make_contact(neighbour.contacts[0].phone_number),
            ),
        )
        with pytest.raises(CreationError):
            await service.update_person(draft)
        assert await count_rows(database, Contact) == 2

    async def test_edited_contact_collision_surfaces_as_conflict(
        self, service, neighbour
    ):
        person = await service.create_person(make_person())
        draft = as_update(
            person,
            contacts=(
                make_contact(neighbour.contacts[0].phone_number, id=person.contacts[0].id),
            ),
        )
        with pytest.raises(ConflictError) as exc_info:
            await service.update_person(draft)
        assert exc_info.value.field == "phone_number"

        stored = await service.get_person(person.id)
        assert stored.contacts[0].phone_number == "+79001234567"


class TestScalarsAndOwnedItems:
    """Contacts and documents are merged by id."""

    async def test_scalars_updated(self, service):
        person = await service.create_person(make_person())
        updated = await service.update_person(
            as_update(person, name="Ivan Sidorov", hidden=True)
        )
        fetched = await service.get_person(updated.id)
        assert fetched.name == "Ivan Sidorov"
        assert fetched.hidden is True

    async def test_contact_edited_in_place(self, service):
        person = await service.create_person(make_person())
        contact_id = person.contacts[0].id
        await service.update_person(
            as_update(person, contacts=(make_contact("+79005550000", id=contact_id),))
        )
        fetched = await service.get_person(person.id)
        assert [(c.id, c.phone_number) for c in fetched.contacts] == [
            (contact_id, "+79005550000")
        ]

    async def test_contacts_added_and_removed(self, database, service):
        person = await service.create_person(
            make_person(contacts=(make_contact(), make_contact("+79001112233")))
        )
        kept = person.contacts[0]
        await service.update_person(
            as_update(
                person,
                contacts=(
                    make_contact(kept.phone_number, id=kept.id),
                    make_contact("+79004445566"),
                ),
            )
        )
        fetched = await service.get_person(person.id)
        assert [c.phone_number for c in fetched.contacts] == [
            "+79001234567",
            "+79004445566",
        ]
        assert fetched.contacts[0].id == kept.id
        assert await count_rows(database, Contact) == 2

    async def test_primary_moved_to_new_document(self, service):
        person = await service.create_person(make_person())
        old = person.identity_documents[0]
        await service.update_person(
            as_update(
                person,
                identity_documents=(
                    make_document(old.full_number, primary=False, id=old.id),
                    make_document("7777 888888"),
                ),
            )
        )
        fetched = await service.get_person(person.id)
        primaries = [d.full_number for d in fetched.identity_documents if d.primary]
        assert primaries == ["7777 888888"]


class TestValuesMovingBetweenRows:
    """Phone and document numbers can move between the person's own rows."""

    @pytest.fixture
    async def two_contacts(self, service):
        return await service.create_person(
            make_person(
                contacts=(make_contact("+79000000001"), make_contact("+79000000002"))
            )
        )

    @pytest.fixture
    async def two_documents(self, service):
        return await service.create_person(
            make_person(
                identity_documents=(
                    make_document("1111 000001"),
                    make_document("1111 000002", primary=False),
                )
            )
        )

    async def test_kept_contact_takes_dropped_number(
        self, database, service, two_contacts
    ):
        first, second = two_contacts.contacts
        await service.update_person(
            as_update(
                two_contacts,
                contacts=(make_contact(second.phone_number, id=first.id),),
            )
        )
        fetched = await service.get_person(two_contacts.id)
        assert [(c.id, c.phone_number) for c in fetched.contacts] == [
            (first.id, "+79000000002")
        ]
        assert await count_rows(database, Contact) == 1

    async def test_contacts_swap_numbers(self, service, two_contacts):
        first, second = two_contacts.contacts
        updated = await service.update_person(
            as_update(
                two_contacts,
                contacts=(
                    make_contact("+79000000002", id=first.id),
                    make_contact("+79000000001", id=second.id),
                ),
            )
        )
        expected = {(first.id, "+79000000002"), (second.id, "+79000000001")}
        assert {(c.id, c.phone_number) for c in updated.contacts} == expected
        fetched = await service.get_person(two_contacts.id)
        assert {(c.id, c.phone_number) for c in fetched.contacts} == expected

    async def test_new_contact_takes_dropped_number(
        self, database, service, two_contacts
    ):
        first, second = two_contacts.contacts
        await service.update_person(
            as_update(
                two_contacts,
                contacts=(
                    make_contact(first.phone_number, id=first.id),
                    make_contact(second.phone_number),
                ),
            )
        )
        fetched = await service.get_person(two_contacts.id)
        assert sorted(c.phone_number for c in fetched.contacts) == [
            "+79000000001",
            "+79000000002",
        ]
        assert second.id not in {c.id for c in fetched.contacts}
        assert await count_rows(database, Contact) == 2

    async def test_kept_document_takes_dropped_number(
        self, database, service, two_documents
    ):
        first, second = two_documents.identity_documents
        await service.update_person(
            as_update(
                two_documents,
                identity_documents=(make_document(second.full_number, id=first.id),),
            )
        )
        fetched = await service.get_person(two_documents.id)
        assert [(d.id, d.full_number) for d in fetched.identity_documents] == [
            (first.id, "1111 000002")
        ]
        assert await count_rows(database, IdentityDocument) == 1

    async def test_documents_swap_numbers(self, service, two_documents):
        first, second = two_documents.identity_documents
        await service.update_person(
            as_update(
                two_documents,
                identity_documents=(
                    make_document("1111 000002", id=first.id),
                    make_document("1111 000001", primary=False, id=second.id),
                ),
            )
        )
        fetched = await service.get_person(two_documents.id)
        assert {(d.id, d.full_number, d.primary) for d in fetched.identity_documents} == {
            (first.id, "1111 000002", True),
            (second.id, "1111 000001", False),
        }


class TestRepeatedIdentifiers:
    """A stored row may back only one item of the update draft."""

    async def test_contact_id_listed_twice(self, service):
        person = await service.create_person(make_person())
        contact_id = person.contacts[0].id
        draft = as_update(
            person,
            contacts=(
                make_contact("+79000000005", id=contact_id),
                make_contact("+79000000006", id=contact_id),
            ),
        )
        with pytest.raises(ConflictError) as exc_info:
            await service.update_person(draft)
        assert exc_info.value.field == "contacts"

        fetched = await service.get_person(person.id)
        assert [c.phone_number for c in fetched.contacts] == ["+79001234567"]

    async def test_document_id_listed_twice(self, service):
        person = await service.create_person(make_person())
        doc_id = person.identity_documents[0].id
        draft = as_update(
            person,
            identity_documents=(
                make_document("1111 000001", id=doc_id),
                make_document("1111 000002", primary=False, id=doc_id),
            ),
        )
        with pytest.raises(ConflictError) as exc_info:
            await service.update_person(draft)
        assert exc_info.value.field == "identity_documents"

    async def test_link_id_listed_twice(self, service):
        person = await service.create_person(make_person(addresses=(make_address(),)))
        link_id = person.address_links[0].id
        draft = as_update(
            person,
            addresses=(
                make_address(link_id=link_id),
                make_address("R2", "L2", link_id=link_id),
            ),
        )
        with pytest.raises(ConflictError) as exc_info:
            await service.update_person(draft)
        assert exc_info.value.field == "addresses"


class TestAddressReconciliation:
    """Address links are reused, rebuilt and cleaned up."""

    async def test_clearing_addresses_deletes_orphan(self, database, service):
        person = await service.create_person(
            make_person(addresses=(make_address(registration=True),))
        )
        updated = await service.update_person(as_update(person, addresses=()))

        assert updated.address_links == []
        assert await count_rows(database, AddressLink, AddressLink.person_id == person.id) == 0
        assert await count_rows(database, Address) == 0

    async def test_shared_address_survives(self, database, service, neighbour):
        person = await service.create_person(make_person(addresses=(make_address(),)))
        await service.update_person(as_update(person, addresses=()))

        assert await count_rows(database, Address) == 1
        fetched = await service.get_person(neighbour.id)
        assert fetched.address_links[0].address.line == "L1"

    async def test_replaced_address_deleted(self, database, service):
        person = await service.create_person(make_person(addresses=(make_address(),)))
        await service.update_person(
            as_update(person, addresses=(make_address("R2", "New street"),))
        )
        fetched = await service.get_person(person.id)
        assert [link.address.line for link in fetched.address_links] == ["New street"]
        assert await count_rows(database, Address) == 1

    async def test_existing_link_reused(self, service):
        person = await service.create_person(make_person(addresses=(make_address(),)))
        link = person.address_links[0]

        await service.update_person(
            as_update(person, addresses=(make_address(registration=True),))
        )
        fetched = await service.get_person(person.id)
        assert fetched.address_links[0].id == link.id
        assert fetched.address_links[0].registration is True

    async def test_address_line_edited_by_id(self, database, service):
        person = await service.create_person(make_person(addresses=(make_address(),)))
        link = person.address_links[0]

        await service.update_person(
            as_update(
                person,
                addresses=(
                    make_address(line="L1, flat 5", id=link.address_id, link_id=link.id),
                ),
            )
        )
        fetched = await service.get_person(person.id)
        assert fetched.address_links[0].address_id == link.address_id
        assert fetched.address_links[0].address.line == "L1, flat 5"
        assert await count_rows(database, Address) == 1

    async def test_shared_address_edit_copies(self, database, service, neighbour):
        person = await service.create_person(make_person(addresses=(make_address(),)))
        link = person.address_links[0]

        await service.update_person(
            as_update(
                person,
                addresses=(
                    make_address(line="L1, flat 5", id=link.address_id, link_id=link.id),
                ),
            )
        )
        mine = await service.get_person(person.id)
        theirs = await service.get_person(neighbour.id)
        assert mine.address_links[0].id == link.id
        assert mine.address_links[0].address.line == "L1, flat 5"
        assert theirs.address_links[0].address.line == "L1"
        assert await count_rows(database, Address) == 2

    async def test_same_address_twice(self, service):
        person = await service.create_person(make_person())
        with pytest.raises(ConflictError):
            await service.update_person(
                as_update(person, addresses=(make_address(), make_address(registration=True)))
            )

    async def test_failed_update_keeps_addresses(self, database, service):
        person = await service.create_person(make_person(addresses=(make_address(),)))
        draft = as_update(
            person, addresses=(), identity_documents=(make_document(primary=False),)
        )
        with pytest.raises(ConflictError):
            await service.update_person(draft)

        assert await count_rows(database, Address) == 1
        assert await count_rows(database, Person) == 1
