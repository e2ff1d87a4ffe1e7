"""Tests for the error taxonomy and integrity error translation."""

import pytest
from sqlalchemy.exc import IntegrityError

from registry.people import (
    ConflictError,
    CreationError,
    NotFoundError,
    RegistryError,
    UpdateError,
    translate_integrity_error,
)


def integrity_error(message: str) -> IntegrityError:
    return IntegrityError("INSERT INTO ...", {}, Exception(message))


class TestTaxonomy:
    @pytest.mark.parametrize(
        "error_type", [NotFoundError, ConflictError, CreationError, UpdateError]
    )
    def test_kinds_share_base(self, error_type):
        err = error_type("broken", field="contacts")
        assert isinstance(err, RegistryError)
        assert err.message == "broken"
        assert err.field == "contacts"
        assert str(err) == "broken"

    def test_field_optional(self):
        assert ConflictError("broken").field is None


class TestTranslateIntegrityError:
    """Store-level uniqueness failures become conflicts naming the field."""

    @pytest.mark.parametrize(
        "message,field",
        [
            ("UNIQUE constraint failed: contacts.phone_number", "phone_number"),
            (
                "UNIQUE constraint failed: identity_documents.type, "
                "identity_documents.full_number",
                "identity_documents",
            ),
            (
                "UNIQUE constraint failed: addresses.region_id, addresses.line",
                "addresses",
            ),
            (
                "UNIQUE constraint failed: address_links.person_id, "
                "address_links.address_id",
                "addresses",
            ),
        ],
    )
    def test_sqlite_messages(self, message, field):
        translated = translate_integrity_error(integrity_error(message))
        assert isinstance(translated, ConflictError)
        assert translated.field == field

    def test_postgres_constraint_name(self):
        translated = translate_integrity_error(
            integrity_error(
                'duplicate key value violates unique constraint '
                '"uq_identity_documents_type_number"'
            )
        )
        assert translated.field == "identity_documents"

    def test_unknown_failure(self):
        translated = translate_integrity_error(
            integrity_error("FOREIGN KEY constraint failed")
        )
        assert isinstance(translated, ConflictError)
        assert translated.field is None
