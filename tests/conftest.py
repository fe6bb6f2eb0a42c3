"""Shared pytest fixtures for all tests."""

import os
import tempfile
from typing import Generator

import pytest

from passenger.models import EntryDraft
from passenger.store import Store

# ============================================================================
# File System Fixtures
# ============================================================================


@pytest.fixture
def temp_dir() -> Generator[str, None, None]:
    """Provide a temporary directory that's automatically cleaned up."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def vault_path(temp_dir: str) -> str:
    """Provide a temporary vault file path."""
    return os.path.join(temp_dir, "alice.bus")


# ============================================================================
# Store Fixtures
# ============================================================================


@pytest.fixture
def owner() -> str:
    return "alice"


@pytest.fixture
def secret() -> str:
    """Encryption secret for tests."""
    return "test-secret-key"


@pytest.fixture
def master_passphrase() -> str:
    """Standard master passphrase for tests."""
    return "Tr1cky-Master-Passphrase!"


@pytest.fixture
def unregistered_store(owner: str, secret: str, vault_path: str) -> Store:
    """Provide a store whose owner has not registered yet."""
    return Store(owner, secret, file_path=vault_path)


@pytest.fixture
def store(unregistered_store: Store, master_passphrase: str) -> Store:
    """Provide a registered, empty store."""
    unregistered_store.register(master_passphrase)
    return unregistered_store


@pytest.fixture
def reopen(owner: str, secret: str, vault_path: str):
    """Open the same vault file again, as a new process would."""

    def _reopen(secret_override: str = None) -> Store:
        return Store(owner, secret_override or secret, file_path=vault_path)

    return _reopen


# ============================================================================
# Model Fixtures
# ============================================================================


@pytest.fixture
def sample_draft() -> EntryDraft:
    """Provide a valid entry draft."""
    return EntryDraft(
        platform="GitHub",
        url="https://github.com",
        identity="octo@example.com",
        passphrase="Zq8#vLm2!pTr7&xW",
        notes="Work account",
    )


@pytest.fixture
def store_with_entries(store: Store):
    """Provide a store with three entries, two sharing a passphrase."""
    store.create(
        EntryDraft("GitHub", "https://github.com", "octo@example.com", "Zq8#vLm2!pTr7&xW")
    )
    store.create(
        EntryDraft("Gmail", "https://mail.google.com", "octo@gmail.com", "Zq8#vLm2!pTr7&xW")
    )
    store.create(
        EntryDraft(
            "AWS",
            "https://console.aws.amazon.com",
            "admin",
            "Kd9$wQz4@hMn",
            notes="Production account",
        )
    )
    return store
