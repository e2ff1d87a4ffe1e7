"""Database layer."""

from registry.db.engine import Database
from registry.db.models import (
    Address,
    AddressLink,
    Base,
    Contact,
    DocumentType,
    IdentityDocument,
    Person,
    Region,
)
from registry.db.seed import seed_regions

__all__ = [
    # Engine
    "Database",
    "seed_regions",
    # Models
    "Address",
    "AddressLink",
    "Base",
    "Contact",
    "DocumentType",
    "IdentityDocument",
    "Person",
    "Region",
]
