"""
CLI entry point for vaultcards.
"""

# Standard library imports
import logging
import random
from pathlib import Path
from typing import List, Optional

# Third-party imports
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

# Local application imports
from vaultcards.config import AppConfig
from vaultcards.exceptions import SettingsError, StoreError, VaultCardsError
from vaultcards.indexer import index_all_cards
from vaultcards.models import Card, StudySettings
from vaultcards.selector import sort_cards_for_listing
from vaultcards.store import CardStore
from vaultcards.cli._review_logic import review_logic


console = Console()

app = typer.Typer(
    name="vaultcards",
    help="vaultcards: spaced repetition for flashcards written in Markdown.",
    add_completion=False,
    rich_markup_mode="markdown",
)


# ---------------------------------------------------------------------------
# Helpers for resolving the vault and data file
# ---------------------------------------------------------------------------


_vault_option = typer.Option(  # noqa: B008
    None,
    "--vault",
    help="Directory of Markdown notes to scan. "
    "Falls back to VAULTCARDS_VAULT_DIR, then the current directory.",
)

_data_option = typer.Option(  # noqa: B008
    None,
    "--data",
    help="Path to the JSON data file. "
    "Defaults to <vault>/.vaultcards/data.json.",
)


def _resolve_paths(
    vault: Optional[Path], data: Optional[Path]
) -> tuple[Path, CardStore]:
    """Resolve the vault directory and open the store from flags or AppConfig."""
    config = AppConfig()
    vault_dir = vault if vault is not None else config.vault_dir
    data_path = data if data is not None else config.resolve_data_file(vault_dir)
    return vault_dir, CardStore(data_path)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging."
    ),
):
    """Configure logging for every command."""
    level = "DEBUG" if verbose else AppConfig().log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


# ---------------------------------------------------------------------------
# Index
# ---------------------------------------------------------------------------


@app.command()
def index(
    vault: Optional[Path] = _vault_option,
    data: Optional[Path] = _data_option,
    silent: bool = typer.Option(
        False, "--silent", help="Only log the summary; print nothing."
    ),
):
    """Index all cards in the vault, keeping existing review history."""
    vault_dir, store = _resolve_paths(vault, data)
    result = index_all_cards(
        store,
        vault_dir,
        show_notifications=not silent,
        notifier=console.print,
    )

    if result.errors and not silent:
        console.print(
            "[bold red]Errors encountered while reading notes:[/bold red]"
        )
        for error in result.errors:
            console.print(f"- {escape(str(error))}")

    if result.error is not None:
        raise typer.Exit(code=1)


# ---------------------------------------------------------------------------
# Review
# ---------------------------------------------------------------------------


@app.command()
def review(
    vault: Optional[Path] = _vault_option,
    data: Optional[Path] = _data_option,
    force: bool = typer.Option(
        False,
        "--force",
        help="Review cards regardless of due date.",
    ),
    seed: Optional[int] = typer.Option(
        None, "--seed", help="Seed for the card sampling order."
    ),
):
    """Starts a review session."""
    vault_dir, store = _resolve_paths(vault, data)
    rng = random.Random(seed) if seed is not None else None
    try:
        review_logic(store=store, vault_dir=vault_dir, force=force, rng=rng)
    except SettingsError as e:
        console.print(f"[bold]Invalid settings: {escape(str(e))}[/bold]")
        raise typer.Exit(code=1) from e
    except StoreError as e:
        console.print(f"[bold]A data file error occurred: {escape(str(e))}[/bold]")
        raise typer.Exit(code=1) from e
    except Exception as e:
        console.print(
            f"[bold]An unexpected error occurred:[/bold] {escape(str(e))}"
        )
        raise typer.Exit(code=1) from e


# ---------------------------------------------------------------------------
# Cards
# ---------------------------------------------------------------------------


def _truncate(text: str, max_length: int = 50) -> str:
    text = text.replace("\n", " ")
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def _display_cards(cons: Console, cards: List[Card]):
    """
    Render every card as one table row, cards without a due date first.
    """
    table = Table(title=f"All Cards ({len(cards)})")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Front", style="cyan")
    table.add_column("Due", style="yellow")
    table.add_column("Source", style="magenta")
    table.add_column("Stats")

    for idx, card in enumerate(sort_cards_for_listing(cards), start=1):
        due = (
            card.next_review.astimezone().strftime("%Y-%m-%d")
            if card.next_review
            else "New card"
        )
        stats = (
            f"Reviews: {card.review_count} | "
            f"Ease: {card.ease_factor:.2f} | "
            f"Interval: {card.interval} days"
            if card.review_count
            else ""
        )
        table.add_row(
            str(idx), _truncate(card.front), due, card.source_file, stats
        )
    cons.print(table)


@app.command()
def cards(
    vault: Optional[Path] = _vault_option,
    data: Optional[Path] = _data_option,
):
    """View all indexed cards."""
    _, store = _resolve_paths(vault, data)
    try:
        all_cards = store.load_cards()
    except StoreError as e:
        console.print(f"[bold]A data file error occurred: {escape(str(e))}[/bold]")
        raise typer.Exit(code=1) from e

    if not all_cards:
        console.print(
            "[yellow]No indexed cards found. Run the indexing command first.[/yellow]"
        )
        return

    _display_cards(console, all_cards)


# ---------------------------------------------------------------------------
# Settings subcommand group
# ---------------------------------------------------------------------------

settings_app = typer.Typer(
    name="settings",
    help="Show or change study settings.",
)
app.add_typer(settings_app)


def _field_name(key: str) -> Optional[str]:
    """Map a field name or its camelCase alias to the field name."""
    for name, info in StudySettings.model_fields.items():
        if key in (name, info.alias):
            return name
    return None


@settings_app.command("show")
def settings_show(
    vault: Optional[Path] = _vault_option,
    data: Optional[Path] = _data_option,
):
    """Print the current study settings."""
    _, store = _resolve_paths(vault, data)
    try:
        current = store.load_settings()
    except VaultCardsError as e:
        console.print(f"[bold red]Error: {escape(str(e))}[/bold red]")
        raise typer.Exit(code=1) from e

    table = Table(title="Study Settings", show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="magenta")
    for name, value in current.model_dump().items():
        table.add_row(name, str(value))
    console.print(table)


@settings_app.command("set")
def settings_set(
    key: str = typer.Argument(..., help="Setting name, e.g. cards_per_session."),
    value: str = typer.Argument(..., help="New value."),
    vault: Optional[Path] = _vault_option,
    data: Optional[Path] = _data_option,
):
    """Change one study setting."""
    _, store = _resolve_paths(vault, data)
    name = _field_name(key)
    if name is None:
        console.print(f"[bold red]Error: unknown setting '{key}'.[/bold red]")
        raise typer.Exit(code=1)

    try:
        with store.transaction():
            current = store.load_settings()
            updated = StudySettings.model_validate(
                {**current.model_dump(), name: value}
            )
            store.save_settings(updated)
    except ValidationError as e:
        console.print(
            f"[bold red]Invalid value for {name}:[/bold red] {escape(str(e))}"
        )
        raise typer.Exit(code=1) from e
    except VaultCardsError as e:
        console.print(f"[bold red]Error: {escape(str(e))}[/bold red]")
        raise typer.Exit(code=1) from e

    console.print(
        f"[green]{name}[/green] set to [bold]{getattr(updated, name)}[/bold]"
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main():
    """
    Run the CLI application.

    If an unexpected exception occurs, print a bold red error message to the console and exit the process with status code 1.
    """
    try:
        app()
    except Exception as e:
        console.print(f"[bold red]UNEXPECTED ERROR: {escape(str(e))}[/bold red]")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
