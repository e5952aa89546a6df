"""
Index-all-cards entry point: scan the vault, merge with the store, save.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from .config import AppConfig
from .exceptions import DocumentReadError, StoreError, VaultCardsError
from .merger import count_new_cards, merge_cards
from .parser import load_cards_from_vault
from .store import CardStore

logger = logging.getLogger(__name__)

Notifier = Callable[[str], None]


@dataclass
class IndexResult:
    """Outcome of one indexing pass."""

    total_cards: int = 0
    new_cards: int = 0
    files_with_cards: int = 0
    duration_s: float = 0.0
    saved: bool = False
    errors: List[DocumentReadError] = field(default_factory=list)
    error: Optional[str] = None


def _summary(result: IndexResult) -> str:
    new_part = f" ({result.new_cards} new)" if result.new_cards > 0 else ""
    return (
        f"Indexed {result.total_cards} cards{new_part} from "
        f"{result.files_with_cards} files in {result.duration_s:.1f}s"
    )


def index_all_cards(
    store: CardStore,
    vault_dir: Path,
    show_notifications: bool = True,
    notifier: Optional[Notifier] = None,
    now: Optional[datetime] = None,
) -> IndexResult:
    """
    Rebuild the card store from a full scan of the vault.

    Cards already in the store keep their review history; cards whose block disappeared are dropped. A pass that finds no cards leaves the store untouched. This function never raises: unreadable documents are skipped and save failures are reported through the result and the notifier.

    Parameters:
        store (CardStore): Handle to the data file.
        vault_dir (Path): Root of the Markdown vault.
        show_notifications (bool): Loud mode sends progress and summary messages to `notifier`; silent mode only logs them.
        notifier (Optional[Notifier]): Callback receiving user-facing messages. Save failures are sent to it in both modes.
        now (Optional[datetime]): Timestamp recorded on the saved store.

    Returns:
        IndexResult: Counts, per-document errors, and whether the store was saved.
    """
    start = time.monotonic()
    result = IndexResult()

    def tell(message: str) -> None:
        if show_notifications and notifier is not None:
            notifier(message)

    tell("Starting card indexing...")

    try:
        with store.transaction():
            previous = store.load_cards()
            fresh, errors = load_cards_from_vault(vault_dir)
            result.errors = errors

            if not fresh:
                result.duration_s = time.monotonic() - start
                logger.info("No cards found in %s", vault_dir)
                tell("No cards found in vault")
                return result

            result.new_cards = count_new_cards(fresh, previous)
            merged = merge_cards(fresh, previous)
            result.total_cards = len(merged)
            result.files_with_cards = len({c.source_file for c in merged})
            store.save_cards(merged, now=now)
            result.saved = True
    except StoreError as e:
        result.duration_s = time.monotonic() - start
        result.error = str(e)
        logger.error(f"Error saving cards: {e}")
        if notifier is not None:
            notifier("Error saving cards to the data file")
        return result
    except VaultCardsError as e:
        result.duration_s = time.monotonic() - start
        result.error = str(e)
        logger.error(f"Indexing failed: {e}")
        if notifier is not None:
            notifier(f"Indexing failed: {e}")
        return result

    result.duration_s = time.monotonic() - start
    if show_notifications:
        tell(_summary(result))
    elif result.new_cards > 0:
        logger.info("Silently %s", _summary(result).lower())
    return result


def schedule_startup_indexing(
    store: CardStore,
    vault_dir: Path,
    delay: Optional[float] = None,
) -> Optional[threading.Timer]:
    """
    Run one silent indexing pass after `delay` seconds on a daemon timer.

    When `delay` is omitted it comes from `AppConfig.startup_index_delay`
    (env `VAULTCARDS_STARTUP_INDEX_DELAY`).

    Returns:
        Optional[threading.Timer]: The started timer, or None when automatic indexing is disabled or the settings cannot be loaded.
    """
    try:
        settings = store.load_settings()
    except VaultCardsError as e:
        logger.error(f"Skipping startup indexing, settings unavailable: {e}")
        return None

    if not settings.enable_automatic_indexing:
        logger.debug("Automatic indexing is disabled.")
        return None

    if delay is None:
        delay = AppConfig().startup_index_delay

    timer = threading.Timer(
        delay,
        index_all_cards,
        args=(store, vault_dir),
        kwargs={"show_notifications": False},
    )
    timer.daemon = True
    timer.start()
    logger.debug(f"Startup indexing scheduled in {delay}s for {vault_dir}")
    return timer
