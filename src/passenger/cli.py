"""CLI using Typer."""

import json
import os
import stat
import sys
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from . import __version__, messages, ui
from .auth import get_master_passphrase, prompt_create_master_passphrase
from .browser import SUPPORTED_BROWSERS, export_csv, import_csv
from .cli_helpers import (
    COMMAND_ALIASES,
    get_session,
    get_store,
    open_store,
    setup_logging,
    vault_errors,
)
from .config import Config
from .errors import BreachedPassphraseError, ValidationError
from .generator import copy_to_clipboard, generate_passphrase, manipulate
from .models import EntryDraft
from .reports import (
    EntrySummary,
    find_old_passphrases,
    find_similar_to_identity,
    get_vault_statistics,
)

app = typer.Typer(
    name="passenger",
    help="Encrypted credential store",
    add_completion=True,
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
    rich_markup_mode="rich",
)

JsonOption = Annotated[
    bool, typer.Option("--json", help="Print machine-readable JSON")
]
PlatformOption = Annotated[
    Optional[str], typer.Option("--platform", "-p", help="Platform name")
]
UrlOption = Annotated[Optional[str], typer.Option("--url", "-u", help="Login URL")]
IdentityOption = Annotated[
    Optional[str],
    typer.Option("--identity", "-i", help="Username or email, or a _$constant"),
]
NotesOption = Annotated[Optional[str], typer.Option("--notes", "-n", help="Notes")]
PassphraseOption = Annotated[
    Optional[str], typer.Option("--passphrase", help="Passphrase of the entry")
]
GenerateOption = Annotated[
    bool, typer.Option("--generate", "-g", help="Generate the passphrase")
]
LengthOption = Annotated[
    int, typer.Option("--length", "-l", help="Generated passphrase length")
]


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"passenger {__version__}")
        raise typer.Exit()


def echo_json(data) -> None:
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _choose_passphrase(
    passphrase: Optional[str], generate: bool, length: int
) -> Optional[str]:
    """Passphrase from the options; ``None`` when neither was given."""
    if generate and passphrase is not None:
        ui.error(messages.ERROR_MUTUALLY_EXCLUSIVE_GEN)
        raise typer.Exit(1)
    if generate:
        return generate_passphrase(length)
    return passphrase


@app.callback()
def main_callback(
    ctx: typer.Context,
    owner: Annotated[
        Optional[str],
        typer.Option(
            "--owner",
            "-o",
            help="Vault owner (default: PASSENGER_OWNER or the login name)",
        ),
    ] = None,
    vault_dir: Annotated[
        Optional[Path],
        typer.Option(
            "--vault-dir",
            help="Vault directory (default: PASSENGER_HOME or ~/.passenger)",
        ),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", help="Show debug logging")
    ] = False,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = None,
):
    """Encrypted, file-backed credential store."""
    setup_logging(verbose)
    session = get_session(ctx)
    session.owner = owner
    session.vault_dir = vault_dir.expanduser() if vault_dir else None


# ============================================================================
# Account
# ============================================================================


@app.command("register", help="Register a new vault", rich_help_panel="Account")
def register(ctx: typer.Context):
    """Register the owner with a new master passphrase."""
    with vault_errors():
        store = open_store(ctx)
        try:
            master = prompt_create_master_passphrase()
        except ValueError as e:
            ui.error(str(e))
            raise typer.Exit(1)
        store.register(master)
        ui.success(messages.SUCCESS_REGISTERED.format(owner=store.owner))


@app.command("reset", help="Change the master passphrase", rich_help_panel="Account")
def reset(
    ctx: typer.Context,
    new: Annotated[
        str,
        typer.Option(
            "--new",
            prompt="New master passphrase",
            hide_input=True,
            confirmation_prompt=True,
            help="New master passphrase",
        ),
    ],
):
    """Verify the current master passphrase and replace it."""
    with vault_errors():
        store = open_store(ctx)
        current = get_master_passphrase("Current master passphrase: ")
        store.reset_master_passphrase(current, new)
        ui.success(messages.SUCCESS_RESET)


# ============================================================================
# Entries
# ============================================================================


@app.command("list", help="List all entries (ls)", rich_help_panel="Entries")
def list_entries(ctx: typer.Context, as_json: JsonOption = False):
    """List all entries without their passphrases."""
    with vault_errors():
        views = get_store(ctx).fetch_all()
    if as_json:
        echo_json([view.to_dict() for view in views])
    else:
        ui.show_entries_table(views)


@app.command("query", help="Search entries (search)", rich_help_panel="Entries")
def query_entries(
    ctx: typer.Context,
    keyword: Annotated[str, typer.Argument(help="Text found in platform, identity or url")],
    as_json: JsonOption = False,
):
    """Case-sensitive search over platform, identity and url."""
    with vault_errors():
        views = get_store(ctx).query(keyword)
    if as_json:
        echo_json([view.to_dict() for view in views])
    elif not views:
        ui.info(messages.INFO_NO_MATCHES.format(query=keyword))
    else:
        ui.show_entries_table(views, title=f"Matching '{keyword}'")


@app.command("fetch", help="Show one entry (get)", rich_help_panel="Entries")
def fetch_entry(
    ctx: typer.Context,
    entry_id: Annotated[str, typer.Argument(help="Entry id")],
    show: Annotated[
        bool, typer.Option("--show", "-s", help="Show passphrase in output")
    ] = False,
    copy: Annotated[
        bool, typer.Option("--copy", "-c", help="Copy passphrase to clipboard")
    ] = False,
    as_json: JsonOption = False,
):
    """Fetch one entry with its passphrase. Counts as an access."""
    with vault_errors():
        view = get_store(ctx).fetch_one(entry_id)
    if as_json:
        echo_json(view.to_dict())
    else:
        ui.show_entry_panel(view, show_passphrase=show)
    if copy:
        ui.copy_with_feedback(view.passphrase, "Passphrase")


@app.command("create", help="Create an entry", rich_help_panel="Entries")
def create_entry(
    ctx: typer.Context,
    platform: PlatformOption = None,
    url: UrlOption = None,
    identity: IdentityOption = None,
    notes: NotesOption = None,
    passphrase: PassphraseOption = None,
    generate: GenerateOption = False,
    length: LengthOption = Config.DEFAULT_GENERATED_LENGTH,
    as_json: JsonOption = False,
):
    """Create an entry; the passphrase is prompted for when not given."""
    chosen = _choose_passphrase(passphrase, generate, length)
    with vault_errors():
        store = get_store(ctx)
        if chosen is None:
            chosen = typer.prompt("Passphrase", hide_input=True)
        view = store.create(
            EntryDraft(
                platform=platform,
                url=url,
                identity=identity,
                passphrase=chosen,
                notes=notes,
            )
        )
    if as_json:
        echo_json(view.to_dict())
    else:
        ui.success(messages.SUCCESS_CREATED.format(platform=view.platform, id=view.id))


@app.command("update", help="Update an entry", rich_help_panel="Entries")
def update_entry(
    ctx: typer.Context,
    entry_id: Annotated[str, typer.Argument(help="Entry id")],
    platform: PlatformOption = None,
    url: UrlOption = None,
    identity: IdentityOption = None,
    notes: NotesOption = None,
    passphrase: PassphraseOption = None,
    generate: GenerateOption = False,
    length: LengthOption = Config.DEFAULT_GENERATED_LENGTH,
    as_json: JsonOption = False,
):
    """Update an entry; omitted options keep their stored values."""
    chosen = _choose_passphrase(passphrase, generate, length)
    with vault_errors():
        store = get_store(ctx)
        draft = store.fetch_draft(entry_id).copy_with_updates(
            platform=platform,
            url=url,
            identity=identity,
            notes=notes,
            passphrase=chosen,
        )
        view = store.update(entry_id, draft)
    if as_json:
        echo_json(view.to_dict())
    else:
        ui.success(messages.SUCCESS_UPDATED.format(platform=view.platform))


@app.command("delete", help="Delete an entry (rm, del)", rich_help_panel="Entries")
def delete_entry(
    ctx: typer.Context,
    entry_id: Annotated[str, typer.Argument(help="Entry id")],
):
    """Delete an entry. Deleting a missing id is not an error."""
    with vault_errors():
        removed = get_store(ctx).delete(entry_id)
    if removed:
        ui.success(messages.SUCCESS_DELETED.format(id=entry_id))
    else:
        ui.info(messages.INFO_NOTHING_DELETED.format(id=entry_id))


# ============================================================================
# Constants
# ============================================================================


@app.command("declare", help="Declare a constant", rich_help_panel="Constants")
def declare_constant(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Constant key")],
    value: Annotated[str, typer.Argument(help="Constant value")],
):
    with vault_errors():
        pair = get_store(ctx).declare_constant(key, value)
    ui.success(messages.SUCCESS_DECLARED.format(key=pair.key))
    ui.info(f"Use it as an identity with _${pair.key}")


@app.command("modify", help="Modify a constant", rich_help_panel="Constants")
def modify_constant(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Constant key")],
    value: Annotated[str, typer.Argument(help="New value")],
    rename: Annotated[
        Optional[str], typer.Option("--rename", "-r", help="New key")
    ] = None,
):
    with vault_errors():
        pair = get_store(ctx).modify_constant(key, value, new_key=rename)
    ui.success(messages.SUCCESS_MODIFIED.format(key=pair.key))


@app.command("remember", help="Show a constant", rich_help_panel="Constants")
def remember_constant(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Constant key")],
    as_json: JsonOption = False,
):
    with vault_errors():
        pair = get_store(ctx).fetch_constant(key)
    if as_json:
        echo_json(pair.to_dict())
    else:
        typer.echo(pair.value)


@app.command("forget", help="Remove a constant", rich_help_panel="Constants")
def forget_constant(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Constant key")],
):
    with vault_errors():
        get_store(ctx).forget_constant(key)
    ui.success(messages.SUCCESS_FORGOTTEN.format(key=key))


@app.command("constants", help="List constants", rich_help_panel="Constants")
def list_constants(ctx: typer.Context, as_json: JsonOption = False):
    with vault_errors():
        pairs = get_store(ctx).list_constants()
    if as_json:
        echo_json([pair.to_dict() for pair in pairs])
    else:
        ui.show_constants(pairs)


# ============================================================================
# Utilities
# ============================================================================


@app.command("generate", help="Generate a passphrase (gen)", rich_help_panel="Utilities")
def generate(
    length: Annotated[
        int, typer.Argument(help="Passphrase length (minimum 8)")
    ] = Config.DEFAULT_GENERATED_LENGTH,
    copy: Annotated[
        bool, typer.Option("--copy", "-c", help="Copy instead of printing")
    ] = False,
):
    """Generate a random passphrase."""
    passphrase = generate_passphrase(length)
    if copy and copy_to_clipboard(passphrase):
        ui.success("Passphrase generated and copied")
        return
    if copy:
        ui.warning(messages.INFO_CLIPBOARD_UNAVAILABLE)
    typer.echo(passphrase)


@app.command("manipulate", help="Disguise a memorable text", rich_help_panel="Utilities")
def manipulate_text(
    text: Annotated[str, typer.Argument(help="Text to transform")],
):
    """Swap characters of a text for look-alikes."""
    typer.echo(manipulate(text))


@app.command("strength", help="Score a passphrase", rich_help_panel="Utilities")
def strength(
    passphrase: Annotated[str, typer.Argument(help="Passphrase to score")],
):
    """Show the strength score and which criteria a passphrase meets."""
    ui.show_strength(passphrase)


@app.command("stats", help="Show vault statistics", rich_help_panel="Utilities")
def show_stats(ctx: typer.Context, as_json: JsonOption = False):
    """Display vault statistics."""
    with vault_errors():
        store = get_store(ctx)
        entries = store.export_entries()
        constants = store.list_constants()

    stats = get_vault_statistics(entries)
    similar = find_similar_to_identity(entries, constants)
    old = find_old_passphrases(entries)

    if as_json:
        data = stats.to_dict()
        data["similarToIdentity"] = [EntrySummary.from_entry(e).to_dict() for e in similar]
        data["oldPassphrases"] = [EntrySummary.from_entry(e).to_dict() for e in old]
        echo_json(data)
    else:
        ui.show_statistics(stats, similar=len(similar), old=len(old))


# ============================================================================
# Browser import/export
# ============================================================================


@app.command("import", help="Import a browser CSV export", rich_help_panel="Browser")
def import_entries(
    ctx: typer.Context,
    browser: Annotated[
        str, typer.Argument(help=f"One of: {', '.join(SUPPORTED_BROWSERS)}")
    ],
    input_file: Annotated[Path, typer.Argument(help="CSV file exported by the browser")],
):
    """Create one entry per CSV row; invalid or breached rows are skipped."""
    input_path = input_file.expanduser()
    if not input_path.exists():
        ui.error(messages.ERROR_FILE_NOT_FOUND.format(path=input_file))
        raise typer.Exit(1)

    with vault_errors():
        store = get_store(ctx)
        try:
            drafts = import_csv(browser, input_path.read_text(encoding="utf-8"))
        except ValueError as e:
            ui.error(str(e))
            raise typer.Exit(1)

        imported = 0
        for row, draft in enumerate(drafts, 1):
            try:
                store.create(draft)
            except (ValidationError, BreachedPassphraseError) as e:
                ui.warning(
                    messages.ERROR_SKIPPED_ROW.format(
                        row=row, platform=draft.platform or "-", error=e
                    )
                )
                continue
            imported += 1

    ui.success(messages.SUCCESS_IMPORTED.format(count=imported, browser=browser.lower()))


@app.command("export", help="Export entries as CSV", rich_help_panel="Browser")
def export_entries(
    ctx: typer.Context,
    output: Annotated[Path, typer.Argument(help="Output file path")],
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Overwrite existing file")
    ] = False,
):
    """Export entries in the chromium CSV layout."""
    output_path = output.expanduser()
    if output_path.exists() and not force:
        ui.error(messages.ERROR_FILE_EXISTS.format(path=output))
        raise typer.Exit(1)

    with vault_errors():
        entries = get_store(ctx).export_entries()

    try:
        output_path.write_text(export_csv(entries), encoding="utf-8")
        os.chmod(output_path, stat.S_IRUSR | stat.S_IWUSR)
    except OSError as e:
        ui.error(f"Export failed: {e}")
        raise typer.Exit(1)

    ui.success(messages.SUCCESS_EXPORTED.format(count=len(entries), path=output))
    ui.warning(messages.WARNING_PLAINTEXT_EXPORT)


# ============================================================================
# Auto-register command aliases from COMMAND_ALIASES mapping
# ============================================================================

_COMMAND_HANDLERS = {
    "list": list_entries,
    "fetch": fetch_entry,
    "query": query_entries,
    "delete": delete_entry,
    "generate": generate,
}

for command_name, aliases in COMMAND_ALIASES.items():
    handler = _COMMAND_HANDLERS.get(command_name)
    if handler:
        for alias in aliases:
            app.command(alias, help=f"Alias for '{command_name}'", hidden=True)(handler)  # type: ignore[type-var]


def main() -> None:
    """Main entry point."""
    try:
        app()
    except KeyboardInterrupt:
        ui.error("Operation cancelled")
        sys.exit(1)


if __name__ == "__main__":
    main()
