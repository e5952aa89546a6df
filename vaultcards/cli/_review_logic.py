"""Review command logic: pre-index, build the session, and offer the no-cards-due choices."""

import logging
import random
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.prompt import Prompt

from vaultcards.cli.review_ui import start_review_flow
from vaultcards.indexer import index_all_cards
from vaultcards.review_manager import ReviewSessionManager
from vaultcards.store import CardStore

logger = logging.getLogger(__name__)
console = Console()

REVIEW_ANYWAY = "review"
INDEX_NEW = "index"
CANCEL = "cancel"


def _ask_no_cards_choice() -> str:
    """
    Offer the fallback choices when nothing is due and no new cards remain.
    """
    console.print("[bold yellow]No cards due for review.[/bold yellow]")
    console.print(
        "You have no cards due for review right now. What would you like to do?"
    )
    console.print(
        f"  [cyan]{REVIEW_ANYWAY}[/cyan]  review cards anyway\n"
        f"  [cyan]{INDEX_NEW}[/cyan]   index new cards\n"
        f"  [cyan]{CANCEL}[/cyan]  do nothing"
    )
    return Prompt.ask(
        "Choice",
        choices=[REVIEW_ANYWAY, INDEX_NEW, CANCEL],
        default=CANCEL,
        console=console,
    )


def review_logic(
    store: CardStore,
    vault_dir: Path,
    force: bool = False,
    rng: Optional[random.Random] = None,
) -> int:
    """
    Set up and run a review session.

    Runs a silent indexing pass first when automatic indexing is enabled, builds the session, and falls back to the no-cards choices when nothing is available.

    Parameters:
        store (CardStore): Handle to the data file.
        vault_dir (Path): Vault to index before reviewing.
        force (bool): Start a forced review straight away.
        rng (Optional[random.Random]): Randomness for card sampling.

    Returns:
        int: Number of cards reviewed.
    """
    settings = store.load_settings()
    if settings.enable_automatic_indexing:
        index_all_cards(
            store,
            vault_dir,
            show_notifications=False,
            notifier=console.print,
        )

    if not store.load_cards():
        console.print(
            "[yellow]No indexed cards found. Run the indexing command first.[/yellow]"
        )
        return 0

    manager = ReviewSessionManager(store=store, rng=rng)
    size = manager.initialize_session(force=force)

    if size == 0 and not force:
        choice = _ask_no_cards_choice()
        if choice == INDEX_NEW:
            index_all_cards(store, vault_dir, notifier=console.print)
            return 0
        if choice == CANCEL:
            return 0
        force = True
        size = manager.initialize_session(force=True)

    if size == 0:
        console.print("[yellow]No cards available to review.[/yellow]")
        return 0

    suffix = " (forced review)" if force else ""
    console.print(f"[bold cyan]Reviewing {size} cards{suffix}[/bold cyan]")
    return start_review_flow(manager)
