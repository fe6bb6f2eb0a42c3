"""CLI helpers: session state, store access, error mapping and logging setup."""

import contextlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from . import ui
from .auth import authorize
from .config import config
from .errors import PassengerError, StorageError
from .store import Store

# Command aliases mapping
COMMAND_ALIASES = {
    "list": ["ls", "fetchAll"],
    "fetch": ["get"],
    "query": ["search"],
    "delete": ["rm", "del"],
    "generate": ["gen"],
}

# Exit code for a vault file the current user may not read or write
EXIT_PERMISSION_DENIED = 126


@dataclass
class Session:
    """Options shared by every command of one invocation."""

    owner: Optional[str] = None
    vault_dir: Optional[Path] = None

    @property
    def resolved_owner(self) -> str:
        return self.owner or config.default_owner()

    @property
    def file_path(self) -> Optional[Path]:
        if self.vault_dir is None:
            return None
        return self.vault_dir / f"{self.resolved_owner}{config.VAULT_SUFFIX}"


def setup_logging(verbose: bool = False) -> None:
    """Send log records to stderr through rich."""
    level = logging.DEBUG if verbose else getattr(logging, config.log_level, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def get_session(ctx: typer.Context) -> Session:
    if not isinstance(ctx.obj, Session):
        ctx.obj = Session()
    return ctx.obj


def open_store(ctx: typer.Context) -> Store:
    """Open the vault of the session owner without authorizing."""
    session = get_session(ctx)
    return Store(session.resolved_owner, file_path=session.file_path)


def get_store(ctx: typer.Context) -> Store:
    """Open the vault of the session owner and verify the master passphrase."""
    store = open_store(ctx)
    authorize(store)
    return store


@contextlib.contextmanager
def vault_errors() -> Iterator[None]:
    """Report store errors and exit with a failure status."""
    try:
        yield
    except StorageError as e:
        ui.error(str(e))
        code = EXIT_PERMISSION_DENIED if isinstance(e.__cause__, PermissionError) else 1
        raise typer.Exit(code)
    except PassengerError as e:
        ui.error(str(e))
        raise typer.Exit(1)
