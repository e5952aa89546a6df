"""
Reconciles freshly parsed cards with the persisted card store.

A full indexing pass rebuilds the store from the parse: cards whose id is
already known keep their review history, unseen ids start with default
scheduling state, and stored cards that no longer appear are dropped.
"""

import logging
from typing import Dict, Iterable, List

from .constants import DEFAULT_EASE_FACTOR
from .models import Card

logger = logging.getLogger(__name__)

SCHEDULING_FIELDS = (
    "last_reviewed",
    "next_review",
    "ease_factor",
    "interval",
    "review_count",
)


def _index_by_id(cards: Iterable[Card]) -> Dict[str, Card]:
    return {card.id: card for card in cards}


def merge_cards(fresh: List[Card], previous: Iterable[Card]) -> List[Card]:
    """
    Carry scheduling state from previous cards onto freshly parsed ones.

    Parameters:
        fresh (List[Card]): Cards from the current indexing pass; mutated in place.
        previous (Iterable[Card]): Cards from the persisted store.

    Returns:
        List[Card]: The fresh cards, in parse order, with merged scheduling state.
    """
    existing = _index_by_id(previous)
    for card in fresh:
        old = existing.get(card.id)
        if old is not None:
            for field in SCHEDULING_FIELDS:
                setattr(card, field, getattr(old, field))
        else:
            card.ease_factor = DEFAULT_EASE_FACTOR
            card.interval = 0
            card.review_count = 0

    dropped = len(existing.keys() - {card.id for card in fresh})
    if dropped:
        logger.debug(f"{dropped} stored cards no longer found in the vault.")
    return fresh


def count_new_cards(fresh: Iterable[Card], previous: Iterable[Card]) -> int:
    """Number of fresh cards whose id is not in the previous store."""
    known = {card.id for card in previous}
    return sum(1 for card in fresh if card.id not in known)
