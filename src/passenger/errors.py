"""Exception taxonomy shared by every Passenger component."""

from typing import Optional


class PassengerError(Exception):
    """Base exception for Passenger errors."""

    pass


class ConfigurationError(PassengerError):
    """Raised when the encryption secret is missing or empty."""

    pass


class IntegrityError(PassengerError):
    """Raised when an encrypted blob fails authentication."""

    pass


class DeserializationError(PassengerError):
    """Raised when a decrypted document has an unexpected shape."""

    pass


class ValidationError(PassengerError):
    """Raised when a required field is missing or invalid."""

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"missing field '{field}'")


class BreachedPassphraseError(PassengerError):
    """Raised when a passphrase appears in the breach index."""

    def __init__(self, message: str = "passphrase is on a brute-force repository"):
        super().__init__(message)


class NotFoundError(PassengerError):
    """Raised when an entry id or constant key does not exist."""

    pass


class ConflictError(PassengerError):
    """Raised when a constant key or registration already exists."""

    pass


class AuthorizationError(PassengerError):
    """Raised when the master passphrase does not match or the vault is unregistered."""

    pass


class StorageError(PassengerError):
    """Raised when the vault file cannot be read or written."""

    pass
