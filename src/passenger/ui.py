"""UI utilities."""

from datetime import datetime
from typing import Dict, List, Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .constants import reference
from .generator import copy_to_clipboard
from .messages import INFO_CLIPBOARD_UNAVAILABLE, INFO_NO_CONSTANTS, INFO_NO_ENTRIES
from .models import ConstantPair, FullView, ListableView
from .reports import EntrySummary, VaultStatistics
from .strength import calculate, evaluate, strength_color, strength_label

console = Console()


def success(message: str) -> None:
    """Display success message."""
    console.print(f"[green]✓[/green] {message}")


def error(message: str) -> None:
    """Display error message."""
    console.print(f"[red]✗[/red] {message}")


def info(message: str) -> None:
    """Display info message."""
    console.print(f"[blue]i[/blue] {message}")


def warning(message: str) -> None:
    """Display warning message."""
    console.print(f"[yellow]![/yellow] {message}")


def humanize_date(dt: Optional[datetime]) -> str:
    """Format datetime as absolute timestamp."""
    if not dt:
        return "-"

    # Stored timestamps are UTC, show them in local time
    local_dt = dt.astimezone() if dt.tzinfo else dt
    return local_dt.strftime("%Y-%m-%d %H:%M")


def styled_score(score: int) -> str:
    """Score with its label, colored by strength."""
    color = strength_color(score)
    return f"[{color}]{strength_label(score)} ({score})[/{color}]"


def copy_with_feedback(text: str, label: str = "Text") -> bool:
    """Copy text to clipboard and show feedback message."""
    if copy_to_clipboard(text):
        success(f"{label} copied")
        return True
    warning(INFO_CLIPBOARD_UNAVAILABLE)
    return False


def show_entries_table(views: List[ListableView], title: str = "Passenger") -> None:
    """Display entries table."""
    if not views:
        info(INFO_NO_ENTRIES)
        return

    table = Table(title=title, show_lines=False, expand=True)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Platform", style="cyan bold")
    table.add_column("Identity", style="green")
    table.add_column("URL", style="blue dim")
    table.add_column("Strength", justify="right")
    table.add_column("Accessed", justify="right")
    table.add_column("Updated", style="dim", justify="right")

    for view in views:
        table.add_row(
            view.id,
            escape(view.platform),
            escape(view.identity),
            escape(view.url),
            styled_score(view.passphrase_strength),
            str(view.total_accesses),
            humanize_date(view.updated_at),
        )

    console.print(table)
    console.print(f"[dim]Total: {len(views)} entries[/dim]")


def show_entry_panel(view: FullView, show_passphrase: bool = False) -> None:
    """Display entry details."""
    content = [f"[green]Identity:[/green] {escape(view.identity)}"]

    if show_passphrase:
        content.append(f"[yellow]Passphrase:[/yellow] {escape(view.passphrase)}")
    else:
        content.append(
            f"[yellow]Passphrase:[/yellow] {'•' * 12}  "
            f"[dim]({styled_score(view.passphrase_strength)}, "
            f"{len(view.passphrase)} chars)[/dim]"
        )

    content.append(f"[blue]URL:[/blue] {escape(view.url)}")

    if view.notes:
        content.append(f"\n[cyan]Notes:[/cyan]\n{escape(view.notes)}")

    content.append("")
    content.append(
        f"[dim]Created {humanize_date(view.created_at)} • "
        f"Updated {humanize_date(view.updated_at)}[/dim]"
    )
    content.append(
        f"[dim]Passphrase set {humanize_date(view.passphrase_updated_at)} • "
        f"{len(view.passphrase_history)} version(s) • "
        f"Accessed {view.total_accesses} times[/dim]"
    )

    panel = Panel(
        "\n".join(content),
        title=f"{escape(view.platform)} [dim]{view.id}[/dim]",
        border_style="cyan",
        expand=False,
    )
    console.print(panel)


def show_strength(passphrase: str) -> None:
    """Display the score of a passphrase and every criterion result."""
    score = calculate(passphrase)
    results: Dict[str, bool] = evaluate(passphrase)

    table = Table(title=f"Strength: {styled_score(score)}", show_header=False)
    table.add_column("Result", justify="center")
    table.add_column("Criterion")
    for label, passed in results.items():
        mark = "[green]✓[/green]" if passed else "[red]✗[/red]"
        table.add_row(mark, label)

    console.print(table)


def show_constants(pairs: Sequence[ConstantPair]) -> None:
    """Display constants table."""
    if not pairs:
        info(INFO_NO_CONSTANTS)
        return

    table = Table(title="Constants", expand=False)
    table.add_column("Key", style="cyan bold")
    table.add_column("Reference", style="dim")
    table.add_column("Value", style="green")
    for pair in pairs:
        table.add_row(escape(pair.key), escape(reference(pair.key)), escape(pair.value))

    console.print(table)


def _summaries(summaries: Sequence[EntrySummary]) -> str:
    return ", ".join(escape(s.platform) for s in summaries) or "-"


def show_statistics(
    stats: VaultStatistics, similar: int = 0, old: int = 0
) -> None:
    """Display vault statistics."""
    if not stats.total_count:
        info(INFO_NO_ENTRIES)
        return

    table = Table(title="Vault Statistics", show_header=False, expand=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Entries", str(stats.total_count))
    table.add_row("Platforms", str(stats.unique_platforms_count))
    table.add_row("Unique passphrases", str(stats.unique_passphrases))
    table.add_row("Average length", f"{stats.average_length:.1f}")
    table.add_row("Average strength", f"{stats.average_strength:.1f}")
    table.add_row("Shared passphrases", f"{stats.percentage_of_common:.0f}%")
    table.add_row("Weak", str(len(stats.weak)))
    table.add_row("Medium", str(len(stats.medium)))
    table.add_row("Strong", str(len(stats.strong)))
    table.add_row("Similar to identity", str(similar))
    table.add_row("Older than a year", str(old))
    console.print(table)

    console.print(f"[dim]Most accessed:[/dim] {_summaries(stats.most_accessed)}")
    for group in stats.common_by_platform:
        warning(f"Same passphrase on: {_summaries(group)}")
