"""Error kinds raised by the person service.

All of them are terminal for the current operation: the surrounding
transaction is rolled back and nothing is retried.
"""

import re

from sqlalchemy.exc import IntegrityError


class RegistryError(Exception):
    """Base class for classified person-service failures."""

    def __init__(self, message: str, field: str | None = None):
        self.message = message
        self.field = field
        super().__init__(message)


class NotFoundError(RegistryError):
    """A referenced person, nested item or address does not exist."""


class ConflictError(RegistryError):
    """A structural invariant of the person graph is violated."""


class CreationError(RegistryError):
    """A create request carries identifiers or collides with stored data."""


class UpdateError(RegistryError):
    """An update request is structurally unusable (e.g. no person id)."""


# constraint name or "table.column" signature -> offending field
_UNIQUE_FIELDS: dict[str, str] = {
    "contacts.phone_number": "phone_number",
    "contacts_phone_number_key": "phone_number",
    "uq_identity_documents_type_number": "identity_documents",
    "identity_documents.type, identity_documents.full_number": "identity_documents",
    "uq_addresses_region_line": "addresses",
    "addresses.region_id, addresses.line": "addresses",
    "uq_address_links_person_address": "addresses",
    "address_links.person_id, address_links.address_id": "addresses",
}

_FIELD_MESSAGES: dict[str, str] = {
    "phone_number": "Phone number is already used by another person",
    "identity_documents": "Identity document with this type and number already exists",
    "addresses": "Address was concurrently created or linked twice",
}

_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: ([\w., ]+)")
_POSTGRES_CONSTRAINT = re.compile(r'constraint "(\w+)"')


def _unique_signature(exc: IntegrityError) -> str | None:
    text = str(exc.orig) if exc.orig is not None else str(exc)
    if match := _SQLITE_UNIQUE.search(text):
        return match.group(1).strip()
    if match := _POSTGRES_CONSTRAINT.search(text):
        return match.group(1)
    return None


def translate_integrity_error(exc: IntegrityError) -> ConflictError:
    """Reclassify a storage-level integrity failure as a domain conflict.

    Pre-checks catch the common collisions with precise messages; this covers
    the races they cannot close under concurrent writers.
    """
    signature = _unique_signature(exc)
    field = _UNIQUE_FIELDS.get(signature) if signature else None
    if field is None:
        return ConflictError("Person data conflicts with stored data")
    return ConflictError(_FIELD_MESSAGES[field], field=field)
