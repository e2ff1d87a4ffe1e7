"""Public types for the people subsystem.

Drafts describe a candidate person graph as submitted by a caller. They are
immutable; every default is stated once on the field itself.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum

from registry.db.models import DocumentType


class Mode(Enum):
    """Which operation a candidate graph is being checked for."""

    CREATE = "create"
    UPDATE = "update"


@dataclass(frozen=True)
class AddressDraft:
    """A requested link from the person to a (region, line) address.

    ``id`` names an existing address row; ``link_id`` an existing join row.
    Both are optional and only meaningful in update mode.
    """

    region: str | None
    line: str | None
    registration: bool = False
    id: int | None = None
    link_id: int | None = None


@dataclass(frozen=True)
class ContactDraft:
    phone_number: str
    id: int | None = None


@dataclass(frozen=True)
class DocumentDraft:
    type: DocumentType
    full_number: str
    issue_date: date
    primary: bool = False
    id: int | None = None


@dataclass(frozen=True)
class PersonDraft:
    """Candidate person graph for create and update."""

    name: str
    date_of_birth: date
    hidden: bool = False
    addresses: tuple[AddressDraft, ...] = ()
    contacts: tuple[ContactDraft, ...] = ()
    identity_documents: tuple[DocumentDraft, ...] = ()
    id: int | None = None
