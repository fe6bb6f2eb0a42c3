"""Data models for the credential store and its views."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from .errors import DeserializationError
from .strength import calculate


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise TypeError(f"expected ISO timestamp, got {type(value).__name__}")
    parsed = datetime.fromisoformat(value)
    # Naive timestamps are taken as UTC
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _require_str(data: dict, key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"'{key}' must be a string")
    return value


def _optional_str(data: dict, key: str) -> Optional[str]:
    if data.get(key) is None:
        return None
    return _require_str(data, key)


@dataclass
class PassphraseRecord:
    """One passphrase value set on an entry, with the time it was set."""

    value: str
    created_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict:
        return {"value": self.value, "createdAt": self.created_at.isoformat()}

    @classmethod
    def from_dict(cls, data: dict) -> "PassphraseRecord":
        return cls(
            value=_require_str(data, "value"),
            created_at=_parse_datetime(data["createdAt"]),
        )


@dataclass
class CredentialEntry:
    """A stored credential with its append-only passphrase history."""

    id: str
    platform: str
    url: str
    identity: str
    passphrase_history: List[PassphraseRecord]
    created_at: datetime
    updated_at: datetime
    total_accesses: int = 0
    notes: Optional[str] = None

    @property
    def passphrase(self) -> str:
        """The current passphrase, the tip of the history."""
        return self.passphrase_history[-1].value

    @property
    def passphrase_updated_at(self) -> datetime:
        return self.passphrase_history[-1].created_at

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON storage."""
        data: Dict[str, Any] = {
            "id": self.id,
            "platform": self.platform,
            "url": self.url,
            "identity": self.identity,
            "passphraseHistory": [r.to_dict() for r in self.passphrase_history],
            "totalAccesses": self.total_accesses,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }
        if self.notes is not None:
            data["notes"] = self.notes
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "CredentialEntry":
        """Create CredentialEntry from dictionary."""
        history = [PassphraseRecord.from_dict(r) for r in data["passphraseHistory"]]
        if not history:
            raise ValueError(f"entry {data.get('id')!r} has an empty passphrase history")

        total_accesses = data.get("totalAccesses", 0)
        if not isinstance(total_accesses, int) or total_accesses < 0:
            raise ValueError(f"entry {data.get('id')!r} has an invalid access count")

        notes = data.get("notes")
        if notes is not None and not isinstance(notes, str):
            raise TypeError("'notes' must be a string")

        return cls(
            id=_require_str(data, "id"),
            platform=_require_str(data, "platform"),
            url=_require_str(data, "url"),
            identity=_require_str(data, "identity"),
            passphrase_history=history,
            created_at=_parse_datetime(data["createdAt"]),
            updated_at=_parse_datetime(data["updatedAt"]),
            total_accesses=total_accesses,
            notes=notes,
        )


@dataclass
class ConstantPair:
    """Key-value pair referenced from identities as ``_$<key>``."""

    key: str
    value: str

    def to_dict(self) -> dict:
        return {"key": self.key, "value": self.value}

    @classmethod
    def from_dict(cls, data: dict) -> "ConstantPair":
        return cls(key=_require_str(data, "key"), value=_require_str(data, "value"))


@dataclass
class VaultDocument:
    """The whole persisted unit of one owner."""

    owner: Optional[str] = None
    master_passphrase: Optional[str] = None
    entries: List[CredentialEntry] = field(default_factory=list)
    constants: List[ConstantPair] = field(default_factory=list)
    schema_version: int = 1

    @property
    def is_registered(self) -> bool:
        return bool(self.owner) and bool(self.master_passphrase)

    def find_entry(self, entry_id: str) -> int:
        """Index of the entry with ``entry_id``, or -1."""
        return next(
            (i for i, entry in enumerate(self.entries) if entry.id == entry_id), -1
        )

    def find_constant(self, key: str) -> Optional[ConstantPair]:
        return next((pair for pair in self.constants if pair.key == key), None)

    def to_dict(self) -> dict:
        return {
            "schemaVersion": self.schema_version,
            "owner": self.owner,
            "masterPassphrase": self.master_passphrase,
            "entries": [entry.to_dict() for entry in self.entries],
            "constants": [pair.to_dict() for pair in self.constants],
        }

    @classmethod
    def from_dict(cls, data: Any) -> "VaultDocument":
        """Build a document from decoded JSON, rejecting unexpected shapes."""
        if not isinstance(data, dict):
            raise DeserializationError("vault document must be a JSON object")
        try:
            document = cls(
                owner=_optional_str(data, "owner"),
                master_passphrase=_optional_str(data, "masterPassphrase"),
                entries=[CredentialEntry.from_dict(e) for e in data.get("entries") or []],
                constants=[ConstantPair.from_dict(c) for c in data.get("constants") or []],
                schema_version=data.get("schemaVersion", 1),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise DeserializationError(f"Vault document is corrupted: {e!r}") from e

        ids = [entry.id for entry in document.entries]
        if len(ids) != len(set(ids)):
            raise DeserializationError("Vault document contains duplicate entry ids")
        keys = [pair.key for pair in document.constants]
        if len(keys) != len(set(keys)):
            raise DeserializationError("Vault document contains duplicate constant keys")
        return document


@dataclass(frozen=True)
class Credentials:
    """Owner and stored master passphrase hash, for authorization checks."""

    owner: Optional[str]
    master_passphrase: Optional[str]


@dataclass
class EntryDraft:
    """Caller-supplied fields for creating or updating an entry."""

    platform: Optional[str] = None
    url: Optional[str] = None
    identity: Optional[str] = None
    passphrase: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "EntryDraft":
        """Create a draft from a JSON-style mapping, ignoring server-side fields."""
        return cls(
            platform=data.get("platform"),
            url=data.get("url"),
            identity=data.get("identity"),
            passphrase=data.get("passphrase"),
            notes=data.get("notes"),
        )

    def copy_with_updates(self, **updates) -> "EntryDraft":
        """Create a new draft, replacing only the fields given a value."""
        data = {
            "platform": self.platform,
            "url": self.url,
            "identity": self.identity,
            "passphrase": self.passphrase,
            "notes": self.notes,
        }
        data.update({k: v for k, v in updates.items() if v is not None})
        return EntryDraft(**data)


@dataclass(frozen=True)
class ListableView:
    """Entry as listed: identity resolved, no passphrase value."""

    id: str
    platform: str
    identity: str
    url: str
    created_at: datetime
    updated_at: datetime
    total_accesses: int
    passphrase_updated_at: datetime
    passphrase_strength: int

    @classmethod
    def from_entry(cls, entry: CredentialEntry, identity: str) -> "ListableView":
        return cls(
            id=entry.id,
            platform=entry.platform,
            identity=identity,
            url=entry.url,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
            total_accesses=entry.total_accesses,
            passphrase_updated_at=entry.passphrase_updated_at,
            passphrase_strength=calculate(entry.passphrase),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "platform": self.platform,
            "identity": self.identity,
            "url": self.url,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
            "totalAccesses": self.total_accesses,
            "passphraseUpdatedAt": self.passphrase_updated_at.isoformat(),
            "passphraseStrength": self.passphrase_strength,
        }


@dataclass(frozen=True)
class FullView(ListableView):
    """Entry as fetched: listable fields plus passphrase, notes and history."""

    passphrase: str
    notes: Optional[str]
    passphrase_history: Tuple[PassphraseRecord, ...]

    @classmethod
    def from_entry(cls, entry: CredentialEntry, identity: str) -> "FullView":
        listable = ListableView.from_entry(entry, identity)
        return cls(
            **vars(listable),
            passphrase=entry.passphrase,
            notes=entry.notes,
            passphrase_history=tuple(
                PassphraseRecord(r.value, r.created_at) for r in entry.passphrase_history
            ),
        )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["passphrase"] = self.passphrase
        data["notes"] = self.notes
        data["passphraseHistory"] = [r.to_dict() for r in self.passphrase_history]
        return data
