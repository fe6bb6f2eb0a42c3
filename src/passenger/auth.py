"""Master passphrase prompts and the per-command authorization check."""

import getpass
import os
import sys

from .config import Config, config
from .errors import AuthorizationError
from .store import Store


def get_master_passphrase(
    prompt: str = "Master passphrase: ", confirm: bool = False
) -> str:
    """Securely prompt for the master passphrase without echo."""
    env_passphrase = os.getenv(config.MASTER_PASSPHRASE_ENV)
    if env_passphrase is not None:
        return env_passphrase

    try:
        passphrase = getpass.getpass(prompt)

        if confirm:
            passphrase_confirm = getpass.getpass("Confirm master passphrase: ")
            if passphrase != passphrase_confirm:
                raise ValueError("Passphrases do not match")

        return passphrase

    except (KeyboardInterrupt, EOFError):
        print("\nPassphrase prompt cancelled", file=sys.stderr)
        raise


def prompt_create_master_passphrase() -> str:
    """Prompt the owner to choose a master passphrase, with confirmation."""
    return get_master_passphrase(prompt="Create master passphrase: ", confirm=True)


def authorize(store: Store) -> None:
    """Verify the caller's master passphrase before a vault command runs.

    Interactive prompts get ``Config.MAX_PASSWORD_ATTEMPTS`` tries; a
    passphrase from the environment gets one.
    """
    if not store.is_registered:
        raise AuthorizationError(f"'{store.owner}' is not registered yet")

    attempts = 1 if os.getenv(config.MASTER_PASSPHRASE_ENV) is not None else Config.MAX_PASSWORD_ATTEMPTS
    for attempt in range(1, attempts + 1):
        if store.verify_master_passphrase(get_master_passphrase()):
            return
        remaining = attempts - attempt
        if remaining:
            print(
                f"Incorrect passphrase ({remaining} attempts remaining)",
                file=sys.stderr,
            )

    raise AuthorizationError("passphrase could not be validated")
