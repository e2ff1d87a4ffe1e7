"""Wire shapes for the people API.

Dates travel as ``dd-MM-yyyy`` strings. Booleans accept JSON booleans or the
literal strings ``"true"``/``"false"``; anything else is rejected.
"""

from datetime import date, datetime
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    StringConstraints,
)

from registry.db.models import AddressLink, Contact, DocumentType, IdentityDocument, Person
from registry.people.types import AddressDraft, ContactDraft, DocumentDraft, PersonDraft

DATE_FORMAT = "%d-%m-%Y"


def _parse_date(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return datetime.strptime(value, DATE_FORMAT).date()
        except ValueError as e:
            raise ValueError("date must be formatted as dd-MM-yyyy") from e
    return value


def _parse_bool(value: Any) -> Any:
    if value is None or isinstance(value, bool):
        return value
    if value in ("true", "false"):
        return value == "true"
    raise ValueError("allowed input: true or false")


WireDate = Annotated[
    date,
    BeforeValidator(_parse_date),
    PlainSerializer(lambda d: d.strftime(DATE_FORMAT), return_type=str),
]
WireBool = Annotated[bool, BeforeValidator(_parse_bool)]
PhoneNumber = Annotated[str, StringConstraints(pattern=r"^\+7\d{10}$")]


# Requests


class AddressRequest(BaseModel):
    id: int | None = None
    link_id: int | None = None
    region: Annotated[str, StringConstraints(max_length=20)]
    address: Annotated[str, StringConstraints(max_length=255)]
    registration_address: WireBool = False

    def to_draft(self) -> AddressDraft:
        return AddressDraft(
            region=self.region,
            line=self.address,
            registration=self.registration_address,
            id=self.id,
            link_id=self.link_id,
        )


class ContactRequest(BaseModel):
    id: int | None = None
    phone_number: PhoneNumber

    def to_draft(self) -> ContactDraft:
        return ContactDraft(phone_number=self.phone_number, id=self.id)


class IdentityDocumentRequest(BaseModel):
    id: int | None = None
    type: DocumentType
    full_number: Annotated[str, StringConstraints(min_length=1, max_length=20)]
    issue_date: WireDate
    is_primary: WireBool = False

    def to_draft(self) -> DocumentDraft:
        return DocumentDraft(
            type=self.type,
            full_number=self.full_number,
            issue_date=self.issue_date,
            primary=self.is_primary,
            id=self.id,
        )


class PersonRequest(BaseModel):
    """Body of both POST and PUT /people; ``id`` is required only for PUT."""

    id: int | None = None
    name: Annotated[str, StringConstraints(min_length=1, max_length=255)]
    date_of_birth: WireDate
    is_hidden: WireBool = False
    addresses: list[AddressRequest] = Field(default_factory=list)
    contacts: list[ContactRequest] = Field(default_factory=list)
    identity_documents: list[IdentityDocumentRequest] = Field(min_length=1)

    def to_draft(self) -> PersonDraft:
        return PersonDraft(
            name=self.name,
            date_of_birth=self.date_of_birth,
            hidden=self.is_hidden,
            addresses=tuple(a.to_draft() for a in self.addresses),
            contacts=tuple(c.to_draft() for c in self.contacts),
            identity_documents=tuple(d.to_draft() for d in self.identity_documents),
            id=self.id,
        )


# Responses


class IdResponse(BaseModel):
    id: int


class PersonWriteResponse(BaseModel):
    """Generated identifiers after create or update."""

    id: int
    is_hidden: bool
    addresses: list[IdResponse]
    contacts: list[IdResponse]
    identity_documents: list[IdResponse]

    @classmethod
    def from_person(cls, person: Person) -> "PersonWriteResponse":
        return cls(
            id=person.id,
            is_hidden=person.hidden,
            addresses=[IdResponse(id=link.address_id) for link in person.address_links],
            contacts=[IdResponse(id=c.id) for c in person.contacts],
            identity_documents=[IdResponse(id=d.id) for d in person.identity_documents],
        )


class AddressResponse(BaseModel):
    id: int
    link_id: int
    region: str
    address: str
    registration_address: bool

    @classmethod
    def from_link(cls, link: AddressLink) -> "AddressResponse":
        return cls(
            id=link.address.id,
            link_id=link.id,
            region=link.address.region.name,
            address=link.address.line,
            registration_address=link.registration,
        )


class ContactResponse(BaseModel):
    id: int
    phone_number: str

    @classmethod
    def from_contact(cls, contact: Contact) -> "ContactResponse":
        return cls(id=contact.id, phone_number=contact.phone_number)


class IdentityDocumentResponse(BaseModel):
    id: int
    type: DocumentType
    full_number: str
    issue_date: WireDate
    is_primary: bool

    @classmethod
    def from_document(cls, doc: IdentityDocument) -> "IdentityDocumentResponse":
        return cls(
            id=doc.id,
            type=doc.type,
            full_number=doc.full_number,
            issue_date=doc.issue_date,
            is_primary=doc.primary,
        )


class PersonResponse(BaseModel):
    id: int
    name: str
    date_of_birth: WireDate
    is_hidden: bool
    addresses: list[AddressResponse]
    contacts: list[ContactResponse]
    identity_documents: list[IdentityDocumentResponse]

    @classmethod
    def from_person(cls, person: Person) -> "PersonResponse":
        return cls(
            id=person.id,
            name=person.name,
            date_of_birth=person.date_of_birth,
            is_hidden=person.hidden,
            addresses=[AddressResponse.from_link(link) for link in person.address_links],
            contacts=[ContactResponse.from_contact(c) for c in person.contacts],
            identity_documents=[
                IdentityDocumentResponse.from_document(d)
                for d in person.identity_documents
            ],
        )


class PersonSummaryResponse(BaseModel):
    """One row of the people listing."""

    id: int
    name: str
    date_of_birth: WireDate
    main_identity_document: IdentityDocumentResponse | None = None
    contact: ContactResponse | None = None
    registration_address: AddressResponse | None = None

    @classmethod
    def from_person(cls, person: Person) -> "PersonSummaryResponse":
        primary = next((d for d in person.identity_documents if d.primary), None)
        registration = next(
            (link for link in person.address_links if link.registration), None
        )
        return cls(
            id=person.id,
            name=person.name,
            date_of_birth=person.date_of_birth,
            main_identity_document=(
                IdentityDocumentResponse.from_document(primary) if primary else None
            ),
            contact=(
                ContactResponse.from_contact(person.contacts[0])
                if person.contacts
                else None
            ),
            registration_address=(
                AddressResponse.from_link(registration) if registration else None
            ),
        )


class RegionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class ErrorResponse(BaseModel):
    message: str
