"""Initial schema.

Revision ID: 001
Revises:
Create Date: 2026-10-19

People with their address links, contacts and identity documents; shared
addresses keyed by (region, line); seeded region reference table.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

REGIONS = (
    "Moscow",
    "Saint Petersburg",
    "Novosibirsk",
    "Yekaterinburg",
    "Kazan",
    "Nizhny Novgorod",
    "Samara",
    "Omsk",
)


def upgrade() -> None:
    # Regions (reference data)
    regions = op.create_table(
        "regions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(20), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index("ix_regions_name", "regions", ["name"])

    # Addresses, shared between people
    op.create_table(
        "addresses",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("region_id", sa.Integer(), nullable=False),
        sa.Column("line", sa.String(255), nullable=False),
        sa.ForeignKeyConstraint(["region_id"], ["regions.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("region_id", "line", name="uq_addresses_region_line"),
    )

    # People
    op.create_table(
        "people",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column("is_hidden", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    # Person <-> address join records
    op.create_table(
        "address_links",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("person_id", sa.Integer(), nullable=False),
        sa.Column("address_id", sa.Integer(), nullable=False),
        sa.Column("registration", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(["person_id"], ["people.id"]),
        sa.ForeignKeyConstraint(["address_id"], ["addresses.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "person_id", "address_id", name="uq_address_links_person_address"
        ),
    )
    op.create_index("ix_address_links_person_id", "address_links", ["person_id"])
    op.create_index("ix_address_links_address_id", "address_links", ["address_id"])

    # Contacts
    op.create_table(
        "contacts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("phone_number", sa.String(12), nullable=False),
        sa.ForeignKeyConstraint(["owner_id"], ["people.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("phone_number"),
    )
    op.create_index("ix_contacts_owner_id", "contacts", ["owner_id"])

    # Identity documents
    op.create_table(
        "identity_documents",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("full_number", sa.String(20), nullable=False),
        sa.Column("issue_date", sa.Date(), nullable=False),
        sa.Column("is_primary", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(["owner_id"], ["people.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "type", "full_number", name="uq_identity_documents_type_number"
        ),
    )
    op.create_index("ix_identity_documents_owner_id", "identity_documents", ["owner_id"])

    op.bulk_insert(regions, [{"name": name} for name in REGIONS])


def downgrade() -> None:
    op.drop_index("ix_identity_documents_owner_id", table_name="identity_documents")
    op.drop_table("identity_documents")
    op.drop_index("ix_contacts_owner_id", table_name="contacts")
    op.drop_table("contacts")
    op.drop_index("ix_address_links_address_id", table_name="address_links")
    op.drop_index("ix_address_links_person_id", table_name="address_links")
    op.drop_table("address_links")
    op.drop_table("people")
    op.drop_table("addresses")
    op.drop_index("ix_regions_name", table_name="regions")
    op.drop_table("regions")
