"""SQLAlchemy ORM models."""

from datetime import date
from enum import Enum

from sqlalchemy import (
    Boolean,
    Date,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all models."""


class DocumentType(Enum):
    """Kinds of identity documents a person can hold."""

    INNER_PASSPORT = "INNER_PASSPORT"
    INTERNATIONAL_PASSPORT = "INTERNATIONAL_PASSPORT"
    PENSION_ID = "PENSION_ID"
    MEDICAL_INSURANCE = "MEDICAL_INSURANCE"


class Region(Base):
    """Named reference entity, seeded by migrations and never edited here."""

    __tablename__ = "regions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(
        String(20), nullable=False, unique=True, index=True
    )

    def __repr__(self) -> str:
        return f"Region(id={self.id!r}, name={self.name!r})"


class Address(Base):
    """A (region, address line) pair shared by any number of people.

    Addresses are reference-counted through ``AddressLink`` rows; nothing
    cascades from a link to its address.
    """

    __tablename__ = "addresses"
    __table_args__ = (
        UniqueConstraint("region_id", "line", name="uq_addresses_region_line"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    region_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("regions.id"), nullable=False
    )
    line: Mapped[str] = mapped_column(String(255), nullable=False)

    region: Mapped[Region] = relationship(Region, lazy="joined")

    def __repr__(self) -> str:
        return f"Address(id={self.id!r}, region_id={self.region_id!r}, line={self.line!r})"


class AddressLink(Base):
    """Join record between a person and an address."""

    __tablename__ = "address_links"
    __table_args__ = (
        UniqueConstraint(
            "person_id", "address_id", name="uq_address_links_person_address"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    person_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("people.id"), nullable=False, index=True
    )
    address_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("addresses.id"), nullable=False, index=True
    )
    registration: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    person: Mapped["Person"] = relationship("Person", back_populates="address_links")
    address: Mapped[Address] = relationship(Address, lazy="joined")

    def __repr__(self) -> str:
        return (
            f"AddressLink(id={self.id!r}, person_id={self.person_id!r}, "
            f"address_id={self.address_id!r}, registration={self.registration!r})"
        )


class Contact(Base):
    """Phone contact owned by exactly one person."""

    __tablename__ = "contacts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    owner_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("people.id"), nullable=False, index=True
    )
    phone_number: Mapped[str] = mapped_column(
        String(12), nullable=False, unique=True
    )

    owner: Mapped["Person"] = relationship("Person", back_populates="contacts")

    def __repr__(self) -> str:
        return f"Contact(id={self.id!r}, owner_id={self.owner_id!r})"


class IdentityDocument(Base):
    """Identity document owned by exactly one person."""

    __tablename__ = "identity_documents"
    __table_args__ = (
        UniqueConstraint(
            "type", "full_number", name="uq_identity_documents_type_number"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    owner_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("people.id"), nullable=False, index=True
    )
    type: Mapped[DocumentType] = mapped_column(
        SAEnum(DocumentType, native_enum=False, length=30), nullable=False
    )
    full_number: Mapped[str] = mapped_column(String(20), nullable=False)
    issue_date: Mapped[date] = mapped_column(Date, nullable=False)
    primary: Mapped[bool] = mapped_column(
        "is_primary", Boolean, nullable=False, default=False
    )

    owner: Mapped["Person"] = relationship(
        "Person", back_populates="identity_documents"
    )

    def __repr__(self) -> str:
        return (
            f"IdentityDocument(id={self.id!r}, type={self.type.name}, "
            f"owner_id={self.owner_id!r}, primary={self.primary!r})"
        )


class Person(Base):
    """Person aggregate root.

    Collections use ``lazy="raise"``: every read path states up front which
    collections it loads, so an accidental implicit load fails loudly instead
    of issuing hidden queries.
    """

    __tablename__ = "people"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column("full_name", String(255), nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    hidden: Mapped[bool] = mapped_column(
        "is_hidden", Boolean, nullable=False, default=False
    )

    address_links: Mapped[list[AddressLink]] = relationship(
        AddressLink,
        back_populates="person",
        cascade="all, delete-orphan",
        lazy="raise",
        order_by=AddressLink.id,
    )
    contacts: Mapped[list[Contact]] = relationship(
        Contact,
        back_populates="owner",
        cascade="all, delete-orphan",
        lazy="raise",
        order_by=Contact.id,
    )
    identity_documents: Mapped[list[IdentityDocument]] = relationship(
        IdentityDocument,
        back_populates="owner",
        cascade="all, delete-orphan",
        lazy="raise",
        order_by=IdentityDocument.id,
    )

    def __repr__(self) -> str:
        return f"Person(id={self.id!r}, hidden={self.hidden!r})"
