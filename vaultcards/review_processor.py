"""
Shared review processing logic for vaultcards.

The ReviewProcessor applies a rating through the scheduler and writes the
updated card back into the store by id. It is used both by the
ReviewSessionManager and by forced-review sessions.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from .models import Card
from .scheduler import BaseScheduler
from .store import CardStore

# Initialize logger
logger = logging.getLogger(__name__)


class ReviewProcessor:
    """
    Processes review submissions with consistent logic across review workflows.
    """

    def __init__(self, store: CardStore, scheduler: BaseScheduler):
        """
        Initialize the ReviewProcessor.

        Args:
            store: Store handle the reviewed card is written back to
            scheduler: Scheduler computing the card's next state
        """
        self.store = store
        self.scheduler = scheduler

    def process_review(
        self,
        card: Card,
        rating: int,
        reviewed_at: Optional[datetime] = None,
    ) -> Card:
        """
        Process a review submission.

        Steps:
        1. Handle timestamp (use provided or current time)
        2. Apply the rating to the card through the scheduler
        3. Write the card back into the store by id

        Args:
            card: The card being reviewed; updated in place
            rating: User's rating (1-3: Hard, Good, Easy)
            reviewed_at: Review timestamp (defaults to current time)

        Returns:
            The updated Card

        Raises:
            ValueError: If the rating is invalid
            StoreError: If the store cannot be read or written
        """
        ts = reviewed_at or datetime.now(timezone.utc)

        logger.debug(f"Processing review for card {card.id} with rating {rating}")

        try:
            updated_card = self.scheduler.schedule(card, rating, now=ts)
            if not self.store.update_card(updated_card):
                logger.warning(
                    f"Reviewed card {card.id} was not found in the store; "
                    "its new schedule was not saved."
                )

            logger.debug(
                f"Review processed for card {card.id}. "
                f"Next review: {updated_card.next_review}, "
                f"interval: {updated_card.interval} days"
            )
            return updated_card

        except Exception:
            logger.exception(f"Failed to process review for card {card.id}")
            raise

    def process_review_by_id(
        self,
        card_id: str,
        rating: int,
        reviewed_at: Optional[datetime] = None,
    ) -> Card:
        """
        Process a review for the stored card with the given id.

        Raises:
            ValueError: If no stored card has this id, or the rating is invalid
        """
        data = self.store.load_card_data()
        idx = data.find_index(card_id) if data else None
        if idx is None:
            raise ValueError(f"Card {card_id} not found in the store")

        return self.process_review(
            card=data.cards[idx],
            rating=rating,
            reviewed_at=reviewed_at,
        )
