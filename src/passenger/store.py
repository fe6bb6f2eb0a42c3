"""Credential store - the only component that mutates and persists a vault."""

import contextlib
import copy
import json
import logging
import os
import stat
import tempfile
import uuid
from pathlib import Path
from typing import List, Optional, Union

from . import SCHEMA_VERSION
from . import breach, constants
from .config import config, validate_owner
from .crypto import (
    decode_blob,
    decrypt,
    derive_key,
    encode_blob,
    encrypt,
    hash_master_passphrase,
    verify_master_passphrase,
)
from .errors import (
    AuthorizationError,
    BreachedPassphraseError,
    ConflictError,
    DeserializationError,
    IntegrityError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from .models import (
    ConstantPair,
    CredentialEntry,
    Credentials,
    EntryDraft,
    FullView,
    ListableView,
    PassphraseRecord,
    VaultDocument,
    utc_now,
)

logger = logging.getLogger(__name__)

# Checked in this order, the first missing one is reported
REQUIRED_FIELDS = ("platform", "passphrase", "url", "identity")


def validate_draft(draft: EntryDraft) -> EntryDraft:
    """Reject drafts with a missing required field."""
    for name in REQUIRED_FIELDS:
        value = getattr(draft, name)
        if value is not None and not isinstance(value, str):
            raise ValidationError(name, f"field '{name}' must be a string")
        if not value:
            raise ValidationError(name)
    if draft.notes is not None and not isinstance(draft.notes, str):
        raise ValidationError("notes", "field 'notes' must be a string")
    return draft


def screen_passphrase(passphrase: str) -> None:
    """Raise if the passphrase is in the breach corpus."""
    if breach.is_known_breached(passphrase):
        logger.warning("Rejected a passphrase found in the breach index")
        raise BreachedPassphraseError()


class Store:
    """Encrypted credential store of one owner.

    Every mutating call builds a new document on a copy, persists it with a
    single atomic write, and only then replaces the in-memory document: a
    failed call leaves both the file and this object unchanged.

    There is no cross-process locking; concurrent writers of the same owner
    race and the last write wins.
    """

    def __init__(
        self,
        owner: str,
        secret: Optional[str] = None,
        *,
        file_path: Optional[Union[str, Path]] = None,
    ):
        """Load (or start) the vault of ``owner``.

        Args:
            owner: Vault owner, also the vault file name
            secret: Encryption secret (defaults to the PASSENGER_SECRET_KEY variable)
            file_path: Optional custom vault file path

        Raises:
            ConfigurationError: If no secret is available
            IntegrityError: If the vault cannot be authenticated
            DeserializationError: If the decrypted vault has an unexpected shape
            StorageError: If the vault file cannot be read
        """
        self.owner = validate_owner(owner)
        self.file_path = Path(file_path) if file_path else config.vault_path_for(owner)
        self._key = derive_key(secret if secret is not None else config.get_secret_key())
        self._document = self._load()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self) -> VaultDocument:
        """Load and decrypt the document, empty when no vault exists yet."""
        try:
            raw_content = self.file_path.read_bytes()
        except FileNotFoundError:
            logger.debug("No vault at %s, starting empty", self.file_path)
            return VaultDocument()
        except OSError as e:
            raise StorageError(f"Failed to read vault file: {e}") from e

        if not raw_content.strip():
            return VaultDocument()

        try:
            blob = decode_blob(raw_content.decode("ascii"))
        except UnicodeDecodeError as e:
            raise IntegrityError("Vault file has invalid encoding") from e

        try:
            plaintext = decrypt(self._key, blob)
        except IntegrityError:
            logger.warning("Vault %s failed authentication", self.file_path)
            raise

        try:
            data = json.loads(plaintext.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise DeserializationError(f"Vault content is not valid JSON: {e}") from e

        document = VaultDocument.from_dict(data)
        if document.owner is not None and document.owner != self.owner:
            raise AuthorizationError(
                f"vault at {self.file_path} belongs to another owner"
            )

        logger.debug(
            "Loaded vault of %s with %d entries", self.owner, len(document.entries)
        )
        return document

    def _persist(self, document: VaultDocument) -> None:
        """Encrypt and write the whole document with an atomic replace."""
        document.schema_version = SCHEMA_VERSION
        payload = json.dumps(document.to_dict()).encode("utf-8")
        text = encode_blob(encrypt(self._key, payload))

        vault_dir = self.file_path.parent
        try:
            config.ensure_vault_dir(vault_dir)
            temp_fd, temp_path = tempfile.mkstemp(
                dir=vault_dir, prefix=".vault_tmp_", suffix=config.VAULT_SUFFIX
            )
        except OSError as e:
            raise StorageError(f"Failed to save vault: {e}") from e

        try:
            with os.fdopen(temp_fd, "w", encoding="ascii") as f:
                f.write(text)

            # Set permissions (0600)
            os.chmod(temp_path, stat.S_IRUSR | stat.S_IWUSR)

            # Atomic replace (works on Unix and Windows)
            os.replace(temp_path, self.file_path)
        except OSError as e:
            self._cleanup_temp(temp_path)
            raise StorageError(f"Failed to save vault: {e}") from e

        logger.debug("Persisted vault of %s to %s", self.owner, self.file_path)

    def _cleanup_temp(self, temp_path: str) -> None:
        """Remove temporary file if it exists."""
        with contextlib.suppress(OSError):
            os.unlink(temp_path)

    def _working_copy(self) -> VaultDocument:
        return copy.deepcopy(self._document)

    def _commit(self, document: VaultDocument) -> None:
        self._persist(document)
        self._document = document

    def _require_registered(self) -> None:
        if not self._document.is_registered:
            raise AuthorizationError(f"vault of '{self.owner}' is not registered yet")

    def _index_of(self, entry_id: str) -> int:
        index = self._document.find_entry(entry_id)
        if index == -1:
            raise NotFoundError(f"entry '{entry_id}' not found")
        return index

    def _new_id(self, document: VaultDocument) -> str:
        taken = {entry.id for entry in document.entries}
        while True:
            entry_id = str(uuid.uuid4())
            if entry_id not in taken:
                return entry_id

    def _resolve(self, identity: str) -> str:
        return constants.resolve(identity, self._document.constants)

    def _listable(self, entry: CredentialEntry) -> ListableView:
        return ListableView.from_entry(entry, self._resolve(entry.identity))

    # ------------------------------------------------------------------
    # Registration and authorization
    # ------------------------------------------------------------------

    @property
    def is_registered(self) -> bool:
        return self._document.is_registered

    def register(self, master_passphrase: str) -> None:
        """Register the owner with a master passphrase."""
        if self._document.is_registered:
            raise ConflictError(f"'{self.owner}' is already registered")
        if not master_passphrase:
            raise ValidationError("masterPassphrase")

        document = VaultDocument(
            owner=self.owner,
            master_passphrase=hash_master_passphrase(master_passphrase),
            entries=[],
            constants=[],
        )
        self._commit(document)
        logger.info("Registered vault of %s", self.owner)

    def get_credentials(self) -> Credentials:
        """Owner and stored master passphrase hash."""
        return Credentials(
            owner=self._document.owner,
            master_passphrase=self._document.master_passphrase,
        )

    def verify_master_passphrase(self, candidate: str) -> bool:
        """Check a candidate master passphrase."""
        return verify_master_passphrase(self._document.master_passphrase, candidate)

    def reset_master_passphrase(self, old: str, new: str) -> None:
        """Replace the master passphrase after checking the current one."""
        self._require_registered()
        if not self.verify_master_passphrase(old):
            raise AuthorizationError("passphrase could not be validated")
        if not new:
            raise ValidationError("masterPassphrase")

        document = self._working_copy()
        document.master_passphrase = hash_master_passphrase(new)
        self._commit(document)
        logger.info("Reset master passphrase of %s", self.owner)

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------

    def create(self, draft: EntryDraft) -> ListableView:
        """Validate, screen and store a new entry."""
        self._require_registered()
        validate_draft(draft)
        screen_passphrase(draft.passphrase)  # type: ignore[arg-type]

        document = self._working_copy()
        now = utc_now()
        entry = CredentialEntry(
            id=self._new_id(document),
            platform=draft.platform,  # type: ignore[arg-type]
            url=draft.url,  # type: ignore[arg-type]
            identity=draft.identity,  # type: ignore[arg-type]
            passphrase_history=[PassphraseRecord(draft.passphrase, now)],  # type: ignore[arg-type]
            created_at=now,
            updated_at=now,
            total_accesses=0,
            notes=draft.notes or None,
        )
        document.entries.append(entry)
        self._commit(document)
        logger.info("Created entry %s", entry.id)
        return self._listable(entry)

    def fetch_all(self) -> List[ListableView]:
        """All entries in insertion order, without passphrases."""
        self._require_registered()
        return [self._listable(entry) for entry in self._document.entries]

    def query(self, keyword: str) -> List[ListableView]:
        """Entries whose platform, identity or url contains ``keyword``.

        Matching is case-sensitive and uses the stored values, so an identity
        kept as a constant reference matches on the reference only.
        """
        self._require_registered()
        return [
            self._listable(entry)
            for entry in self._document.entries
            if keyword in entry.platform
            or keyword in entry.identity
            or keyword in entry.url
        ]

    def fetch_one(self, entry_id: str) -> FullView:
        """Fetch an entry with its passphrase, counting the access."""
        self._require_registered()
        index = self._index_of(entry_id)

        document = self._working_copy()
        entry = document.entries[index]
        # An access is not a content edit: updated_at stays
        entry.total_accesses += 1
        self._commit(document)
        return FullView.from_entry(entry, self._resolve(entry.identity))

    def fetch_draft(self, entry_id: str) -> EntryDraft:
        """Stored fields of an entry as a draft, without counting an access."""
        self._require_registered()
        entry = self._document.entries[self._index_of(entry_id)]
        return EntryDraft(
            platform=entry.platform,
            url=entry.url,
            identity=entry.identity,
            passphrase=entry.passphrase,
            notes=entry.notes,
        )

    def update(
        self, entry_id: str, draft: EntryDraft, preserve_updated_at: bool = False
    ) -> ListableView:
        """Replace the fields of an entry.

        A passphrase that differs from the current one is screened and
        appended to the history; earlier records are never changed.
        """
        self._require_registered()
        index = self._index_of(entry_id)
        validate_draft(draft)

        document = self._working_copy()
        current = document.entries[index]
        now = utc_now()

        history = list(current.passphrase_history)
        if draft.passphrase != current.passphrase:
            screen_passphrase(draft.passphrase)  # type: ignore[arg-type]
            history.append(PassphraseRecord(draft.passphrase, now))  # type: ignore[arg-type]

        entry = CredentialEntry(
            id=current.id,
            platform=draft.platform,  # type: ignore[arg-type]
            url=draft.url,  # type: ignore[arg-type]
            identity=draft.identity,  # type: ignore[arg-type]
            passphrase_history=history,
            created_at=current.created_at,
            updated_at=current.updated_at if preserve_updated_at else now,
            total_accesses=current.total_accesses,
            notes=draft.notes or None,
        )
        document.entries[index] = entry
        self._commit(document)
        logger.info("Updated entry %s", entry.id)
        return self._listable(entry)

    def delete(self, entry_id: str) -> bool:
        """Remove an entry if present. Returns whether anything was removed."""
        self._require_registered()
        document = self._working_copy()
        original_count = len(document.entries)
        document.entries = [e for e in document.entries if e.id != entry_id]
        self._commit(document)

        removed = len(document.entries) < original_count
        if removed:
            logger.info("Deleted entry %s", entry_id)
        return removed

    def export_entries(self) -> List[CredentialEntry]:
        """Stored entries as kept on disk (identities unresolved)."""
        self._require_registered()
        return copy.deepcopy(self._document.entries)

    def count(self) -> int:
        """Get the number of entries."""
        return len(self._document.entries)

    # ------------------------------------------------------------------
    # Constants
    # ------------------------------------------------------------------

    def declare_constant(self, key: str, value: str) -> ConstantPair:
        """Add a new constant pair."""
        self._require_registered()
        pair = constants.validate_pair(key, value)
        if self._document.find_constant(key) is not None:
            raise ConflictError(f"constant '{key}' already exists")

        document = self._working_copy()
        document.constants.append(pair)
        self._commit(document)
        return ConstantPair(pair.key, pair.value)

    def modify_constant(
        self, key: str, value: str, new_key: Optional[str] = None
    ) -> ConstantPair:
        """Change the value (and optionally the key) of a constant."""
        self._require_registered()
        if self._document.find_constant(key) is None:
            raise NotFoundError(f"constant '{key}' not found")
        pair = constants.validate_pair(new_key or key, value)
        if pair.key != key and self._document.find_constant(pair.key) is not None:
            raise ConflictError(f"constant '{pair.key}' already exists")

        document = self._working_copy()
        document.constants = [
            pair if existing.key == key else existing for existing in document.constants
        ]
        self._commit(document)
        return ConstantPair(pair.key, pair.value)

    def fetch_constant(self, key: str) -> ConstantPair:
        """Get one constant pair."""
        self._require_registered()
        pair = self._document.find_constant(key)
        if pair is None:
            raise NotFoundError(f"constant '{key}' not found")
        return ConstantPair(pair.key, pair.value)

    def forget_constant(self, key: str) -> None:
        """Remove a constant pair."""
        self._require_registered()
        if self._document.find_constant(key) is None:
            raise NotFoundError(f"constant '{key}' not found")

        document = self._working_copy()
        document.constants = [p for p in document.constants if p.key != key]
        self._commit(document)

    def list_constants(self) -> List[ConstantPair]:
        """All constant pairs in declaration order."""
        self._require_registered()
        return [ConstantPair(p.key, p.value) for p in self._document.constants]
