"""Cryptographic operations for the at-rest vault blob and the master passphrase.

Blob layout is ``nonce || ciphertext || tag``: a 12-byte random nonce, a
ciphertext as long as the plaintext, and a 16-byte AES-GCM tag. The key is the
SHA-256 digest of an externally supplied secret.
"""

import base64
import binascii
import secrets
from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .errors import ConfigurationError, IntegrityError

NONCE_LENGTH = 12  # 96-bit nonce, fresh for every encryption
TAG_LENGTH = 16  # 128-bit authentication tag
KEY_LENGTH = 32  # SHA-256 output

# Argon2id parameters (OWASP recommendations for password storage)
ARGON2_TIME_COST = 2
ARGON2_MEMORY_COST = 65536  # 64 MiB
ARGON2_PARALLELISM = 4
ARGON2_HASH_LENGTH = 32
ARGON2_SALT_LENGTH = 16

_hasher = PasswordHasher(
    time_cost=ARGON2_TIME_COST,
    memory_cost=ARGON2_MEMORY_COST,
    parallelism=ARGON2_PARALLELISM,
    hash_len=ARGON2_HASH_LENGTH,
    salt_len=ARGON2_SALT_LENGTH,
)


def generate_nonce() -> bytes:
    """Generate a cryptographically secure random nonce."""
    return secrets.token_bytes(NONCE_LENGTH)


def derive_key(secret: Optional[str]) -> bytes:
    """Derive the 256-bit encryption key from the external secret."""
    if not secret:
        raise ConfigurationError("secret key is not provided")

    digest = hashes.Hash(hashes.SHA256())
    digest.update(secret.encode("utf-8"))
    return digest.finalize()


def encrypt(key: bytes, plaintext: bytes) -> bytes:
    """Encrypt plaintext, returning ``nonce || ciphertext || tag``."""
    nonce = generate_nonce()
    # AESGCM appends the tag to the ciphertext
    return nonce + AESGCM(key).encrypt(nonce, plaintext, None)


def decrypt(key: bytes, blob: bytes) -> bytes:
    """Verify and decrypt a blob produced by :func:`encrypt`."""
    if len(blob) < NONCE_LENGTH + TAG_LENGTH:
        raise IntegrityError("encrypted data is truncated")

    nonce, sealed = blob[:NONCE_LENGTH], blob[NONCE_LENGTH:]
    try:
        return AESGCM(key).decrypt(nonce, sealed, None)
    except InvalidTag:
        raise IntegrityError(
            "Decryption failed - wrong secret key or tampered vault"
        ) from None


def encode_blob(blob: bytes) -> str:
    """Armour a blob as base64 text for storage."""
    return base64.b64encode(blob).decode("ascii")


def decode_blob(text: str) -> bytes:
    """Decode base64 text produced by :func:`encode_blob`."""
    try:
        return base64.b64decode(text.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise IntegrityError(f"Encrypted data is not valid base64: {e}") from e


def hash_master_passphrase(passphrase: str) -> str:
    """Hash the master passphrase with Argon2id for storage."""
    return _hasher.hash(passphrase)


def verify_master_passphrase(stored_hash: Optional[str], candidate: str) -> bool:
    """Check a candidate against the stored master passphrase hash."""
    if not stored_hash:
        return False
    try:
        return _hasher.verify(stored_hash, candidate)
    except (VerificationError, InvalidHashError):
        return False
