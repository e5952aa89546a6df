"""
This module defines the ReviewSessionManager class, which is responsible for
managing one review session. It reads cards and settings from the store,
uses the selector to build the session queue, and records ratings through
the shared ReviewProcessor.
"""

import logging
import random
from datetime import datetime, timezone
from typing import Dict, List, Optional

from .models import Card, StudySettings
from .review_processor import ReviewProcessor
from .scheduler import BaseScheduler, SM2Scheduler, SM2SchedulerConfig
from .selector import select_forced_review_cards, select_review_cards
from .store import CardStore

# Initialize logger
logger = logging.getLogger(__name__)


class ReviewSessionManager:
    """
    Manages a review session for flashcards.

    This class is responsible for:
    - Building the session queue from due or new cards, or from all cards in a forced review.
    - Providing cards one by one for review.
    - Processing ratings and writing updated cards back to the store.
    """

    def __init__(
        self,
        store: CardStore,
        scheduler: Optional[BaseScheduler] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Create a ReviewSessionManager over a card store.

        Parameters:
            store (CardStore): Handle used to load cards and settings and to persist reviews.
            scheduler (Optional[BaseScheduler]): Scheduling engine; when omitted an SM2Scheduler configured from the stored settings is created on initialization.
            rng (Optional[random.Random]): Randomness for card sampling.
        """
        self.store = store
        self.scheduler = scheduler
        self.rng = rng
        self.settings: Optional[StudySettings] = None
        self.review_queue: List[Card] = []
        self.forced = False
        self.session_size = 0
        self.review_processor: Optional[ReviewProcessor] = None

    def initialize_session(
        self, now: Optional[datetime] = None, force: bool = False
    ) -> int:
        """
        Load settings and cards and fill the session queue.

        Parameters:
            now (Optional[datetime]): Reference time for due checks; defaults to the current UTC time.
            force (bool): Ignore due dates and take never-reviewed cards first, then the least recently reviewed.

        Returns:
            int: Number of cards in the session. Zero means nothing is due and no new cards remain; the caller may retry with ``force=True``.
        """
        now = now or datetime.now(timezone.utc)
        self.settings = self.store.load_settings()
        if self.scheduler is None:
            self.scheduler = SM2Scheduler(
                SM2SchedulerConfig.from_settings(self.settings)
            )
        self.review_processor = ReviewProcessor(self.store, self.scheduler)

        cards = self.store.load_cards()
        if force:
            self.review_queue = select_forced_review_cards(cards, self.settings)
        else:
            self.review_queue = select_review_cards(
                cards, now, self.settings, rng=self.rng
            )
        self.forced = force
        self.session_size = len(self.review_queue)

        logger.info(
            f"Initialized {'forced ' if force else ''}session with "
            f"{self.session_size} of {len(cards)} cards."
        )
        return self.session_size

    def get_next_card(self) -> Optional[Card]:
        """
        Retrieves the next card to be reviewed.

        Returns:
            The next Card object to be reviewed, or None if the queue is empty.
        """
        if not self.review_queue:
            logger.info("Review queue is empty. Session may be complete.")
            return None
        return self.review_queue[0]

    def _get_card_from_queue(self, card_id: str) -> Optional[Card]:
        for card in self.review_queue:
            if card.id == card_id:
                return card
        return None

    def _remove_card_from_queue(self, card_id: str) -> None:
        self.review_queue = [
            card for card in self.review_queue if card.id != card_id
        ]

    def submit_review(
        self,
        card_id: str,
        rating: int,
        reviewed_at: Optional[datetime] = None,
    ) -> Card:
        """
        Submit a rating for a card in the current session.

        Parameters:
            card_id (str): Id of the card to review.
            rating (int): 1=Hard, 2=Good, 3=Easy.
            reviewed_at (Optional[datetime]): Timestamp of the review; defaults to now.

        Returns:
            Card: The updated card, already written back to the store.

        Raises:
            ValueError: If the session was not initialized, the card is not part of it, or the rating is invalid.
        """
        if self.review_processor is None:
            raise ValueError("Review session has not been initialized.")

        card = self._get_card_from_queue(card_id)
        if not card:
            raise ValueError(
                f"Card {card_id} not found in the current review session."
            )

        try:
            updated_card = self.review_processor.process_review(
                card=card, rating=rating, reviewed_at=reviewed_at
            )
        except Exception as e:
            logger.error(f"Failed to submit review for card {card_id}: {e}")
            raise

        self._remove_card_from_queue(card_id)
        return updated_card

    def skip_card(self, card_id: str) -> None:
        """Drop a card from the queue without rating it."""
        self._remove_card_from_queue(card_id)

    def get_session_stats(self) -> Dict[str, int]:
        """
        Provide counts for the active session.

        Returns:
            dict: "total_cards" (cards initially queued), "reviewed_cards" (cards no longer queued) and "remaining_cards".
        """
        remaining = len(self.review_queue)
        return {
            "total_cards": self.session_size,
            "reviewed_cards": self.session_size - remaining,
            "remaining_cards": remaining,
        }
