"""vaultcards - spaced repetition for flashcards embedded in Markdown notes."""

from .models import Card, CardStoreData, Rating, StudySettings
from .hashing import generate_card_id
from .parser import find_cards_in_content, load_cards_from_vault
from .merger import merge_cards
from .selector import select_forced_review_cards, select_review_cards
from .scheduler import SM2Scheduler, SM2SchedulerConfig
from .store import CardStore
from .indexer import index_all_cards

__all__ = [
    "Card",
    "CardStoreData",
    "Rating",
    "StudySettings",
    "generate_card_id",
    "find_cards_in_content",
    "load_cards_from_vault",
    "merge_cards",
    "select_review_cards",
    "select_forced_review_cards",
    "SM2Scheduler",
    "SM2SchedulerConfig",
    "CardStore",
    "index_all_cards",
]
