"""Person aggregate: validation, address reconciliation and fan-out reads."""

from registry.people.addresses import AddressResolver
from registry.people.errors import (
    ConflictError,
    CreationError,
    NotFoundError,
    RegistryError,
    UpdateError,
    translate_integrity_error,
)
from registry.people.fetcher import PersonFetcher
from registry.people.reconciler import PersonReconciler
from registry.people.regions import RegionLookup
from registry.people.service import PersonService
from registry.people.types import (
    AddressDraft,
    ContactDraft,
    DocumentDraft,
    Mode,
    PersonDraft,
)
from registry.people.validation import AggregateValidator

__all__ = [
    "AddressDraft",
    "AddressResolver",
    "AggregateValidator",
    "ConflictError",
    "ContactDraft",
    "CreationError",
    "DocumentDraft",
    "Mode",
    "NotFoundError",
    "PersonDraft",
    "PersonFetcher",
    "PersonReconciler",
    "PersonService",
    "RegionLookup",
    "RegistryError",
    "UpdateError",
    "translate_integrity_error",
]
