"""
Chooses which cards to present in a review session.
"""

import logging
import random
from datetime import datetime
from typing import List, Optional, Sequence

from .models import Card, StudySettings, ensure_utc

logger = logging.getLogger(__name__)


def random_subset(
    cards: Sequence[Card], size: int, rng: Optional[random.Random] = None
) -> List[Card]:
    """Uniformly random sample of at most ``size`` cards, in random order."""
    rng = rng or random.Random()
    return rng.sample(list(cards), min(size, len(cards)))


def build_review_pool(
    cards: Sequence[Card], now: datetime, settings: StudySettings
) -> List[Card]:
    """
    Collect the cards eligible for a regular session.

    Due cards are capped at ``reviews_per_day`` in store order. Only when nothing is due does the pool fall back to never-reviewed cards, capped at ``new_cards_per_day``.
    """
    now = ensure_utc(now)
    due = [card for card in cards if card.is_due(now)]
    if due:
        return due[: settings.reviews_per_day]
    unreviewed = [card for card in cards if card.last_reviewed is None]
    return unreviewed[: settings.new_cards_per_day]


def select_review_cards(
    cards: Sequence[Card],
    now: datetime,
    settings: StudySettings,
    rng: Optional[random.Random] = None,
) -> List[Card]:
    """
    Pick the cards for a review session.

    Parameters:
        cards (Sequence[Card]): Every card in the store.
        now (datetime): Reference time for due-date checks.
        settings (StudySettings): Supplies the session size and daily caps.
        rng (Optional[random.Random]): Source of randomness; a fresh one is used when omitted.

    Returns:
        List[Card]: Up to ``cards_per_session`` distinct cards in random order. An empty list means no cards are available and the caller may offer a forced review.
    """
    pool = build_review_pool(cards, now, settings)
    if not pool:
        logger.info("No cards are due and no new cards remain.")
        return []
    selected = random_subset(pool, settings.cards_per_session, rng)
    logger.debug(
        f"Selected {len(selected)} of {len(pool)} eligible cards for review."
    )
    return selected


def _review_order_key(card: Card):
    # Never-reviewed cards sort first; the rest oldest review first.
    if card.last_reviewed is None:
        return (0, 0.0)
    return (1, card.last_reviewed.timestamp())


def select_forced_review_cards(
    cards: Sequence[Card], settings: StudySettings
) -> List[Card]:
    """
    Pick cards regardless of due date.

    Never-reviewed cards come first in store order, then the least recently reviewed, capped at ``cards_per_session``.
    """
    ordered = sorted(cards, key=_review_order_key)
    return ordered[: settings.cards_per_session]


def _listing_order_key(card: Card):
    if card.next_review is None:
        return (0, 0.0)
    return (1, card.next_review.timestamp())


def sort_cards_for_listing(cards: Sequence[Card]) -> List[Card]:
    """Cards without a next review first, then by ascending next review."""
    return sorted(cards, key=_listing_order_key)
