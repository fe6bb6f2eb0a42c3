"""Configuration management for Passenger."""

import getpass
import os
import re
import sys
from pathlib import Path
from typing import Optional

from .errors import ValidationError


class Config:
    """Configuration settings for Passenger."""

    HOME_ENV = "PASSENGER_HOME"
    SECRET_KEY_ENV = "PASSENGER_SECRET_KEY"
    MASTER_PASSPHRASE_ENV = "PASSENGER_MASTER_PASSPHRASE"
    OWNER_ENV = "PASSENGER_OWNER"
    LOG_LEVEL_ENV = "PASSENGER_LOG_LEVEL"

    VAULT_DIR_NAME = ".passenger"
    VAULT_SUFFIX = ".bus"

    # Owner names become file names
    OWNER_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._@-]*$")

    # Security constants
    BREACH_LENGTH_CEILING = 285  # No breach list exists past this length
    MAX_PASSWORD_ATTEMPTS = 3

    # Generator constants
    DEFAULT_GENERATED_LENGTH = 32
    MIN_GENERATED_LENGTH = 8

    # Reporting constants
    OLD_PASSPHRASE_DAYS = 365
    SIMILARITY_THRESHOLD = 3
    MOST_ACCESSED_LIMIT = 5
    WEAK_SCORE_BELOW = 4
    STRONG_SCORE_ABOVE = 5

    def __init__(self):
        """Initialize configuration with environment variable support."""
        self.vault_dir = self._get_vault_dir()
        self.log_level = os.getenv(self.LOG_LEVEL_ENV, "WARNING").upper()

    def _get_vault_dir(self) -> Path:
        """Get vault directory from environment or use the per-user default."""
        env_path = os.getenv(self.HOME_ENV)
        if env_path:
            return Path(env_path).expanduser()
        if sys.platform.startswith("win"):
            return Path.home() / "AppData" / "Roaming" / self.VAULT_DIR_NAME
        return Path.home() / self.VAULT_DIR_NAME

    def vault_path_for(self, owner: str) -> Path:
        """Get the vault file path of an owner."""
        validate_owner(owner)
        return self.vault_dir / f"{owner}{self.VAULT_SUFFIX}"

    def ensure_vault_dir(self, vault_dir: Optional[Path] = None) -> None:
        """Ensure the vault directory exists."""
        (vault_dir or self.vault_dir).mkdir(parents=True, exist_ok=True)

    def get_secret_key(self) -> Optional[str]:
        """Read the encryption secret from the environment."""
        return os.getenv(self.SECRET_KEY_ENV)

    def default_owner(self) -> str:
        """Owner from the environment, falling back to the login name."""
        return os.getenv(self.OWNER_ENV) or getpass.getuser()


def validate_owner(owner: str) -> str:
    """Reject owner names that cannot be used as a vault file name."""
    if not owner or not Config.OWNER_PATTERN.match(owner):
        raise ValidationError("owner", f"invalid owner name {owner!r}")
    return owner


config = Config()
