"""Passenger encrypted credential store."""

# Version constants (must be defined before imports to avoid circular dependencies)
__version__ = "1.0.0"
SCHEMA_VERSION = 1

# ruff: noqa: E402
from .config import config
from .errors import (
    AuthorizationError,
    BreachedPassphraseError,
    ConfigurationError,
    ConflictError,
    DeserializationError,
    IntegrityError,
    NotFoundError,
    PassengerError,
    StorageError,
    ValidationError,
)
from .models import (
    ConstantPair,
    CredentialEntry,
    EntryDraft,
    FullView,
    ListableView,
    PassphraseRecord,
    VaultDocument,
)
from .store import Store

__all__ = [
    "Store",
    "config",
    "ConstantPair",
    "CredentialEntry",
    "EntryDraft",
    "FullView",
    "ListableView",
    "PassphraseRecord",
    "VaultDocument",
    "PassengerError",
    "ConfigurationError",
    "IntegrityError",
    "DeserializationError",
    "ValidationError",
    "BreachedPassphraseError",
    "NotFoundError",
    "ConflictError",
    "AuthorizationError",
    "StorageError",
]
