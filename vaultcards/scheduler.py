# vaultcards/scheduler.py

"""
Defines the BaseScheduler abstract class and the SM-2 style scheduler used to
compute a card's next review from a Hard/Good/Easy rating.
"""

import logging
import math
from abc import ABC, abstractmethod
import datetime
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, Field

from .constants import (
    DEFAULT_EASE_FACTOR,
    DEFAULT_EASY_BONUS,
    DEFAULT_INTERVAL_MODIFIER,
    DEFAULT_MAX_INTERVAL,
    EASE_STEP,
    EASY_BONUS_RANGE,
    FIRST_REVIEW_INTERVALS,
    INTERVAL_MODIFIER_RANGE,
    MAX_EASE_FACTOR,
    MAX_INTERVAL_RANGE,
    MIN_EASE_FACTOR,
)
from .models import Card, Rating, StudySettings, ensure_utc

logger = logging.getLogger(__name__)


@dataclass
class SchedulerOutput:
    ease_factor: float
    interval: int
    review_count: int
    last_reviewed: datetime.datetime
    next_review: datetime.datetime
    first_review: bool


class BaseScheduler(ABC):
    """
    Abstract base class for all schedulers in vaultcards.
    """

    @abstractmethod
    def compute_next_state(
        self, card: Card, rating: int, review_ts: datetime.datetime
    ) -> SchedulerOutput:
        """
        Computes the next scheduling state of a card from a new rating.

        Args:
            card: The Card whose current scheduling state is read (not modified).
            rating: The rating for this review (1=Hard, 2=Good, 3=Easy).
            review_ts: The UTC timestamp of the review.

        Returns:
            A SchedulerOutput object containing the new state.

        Raises:
            ValueError: If the rating is invalid.
        """
        pass

    def schedule(
        self,
        card: Card,
        rating: int,
        now: Optional[datetime.datetime] = None,
    ) -> Card:
        """
        Apply a rating to the card in place and return it.

        The caller is responsible for writing the card back to the store.
        """
        review_ts = now or datetime.datetime.now(datetime.timezone.utc)
        output = self.compute_next_state(card, rating, review_ts)
        card.ease_factor = output.ease_factor
        card.interval = output.interval
        card.review_count = output.review_count
        card.last_reviewed = output.last_reviewed
        card.next_review = output.next_review
        return card


class SM2SchedulerConfig(BaseModel):
    """Configuration for the SM-2 scheduler."""

    easy_bonus: float = Field(
        default=DEFAULT_EASY_BONUS,
        ge=EASY_BONUS_RANGE[0],
        le=EASY_BONUS_RANGE[1],
    )
    interval_modifier: float = Field(
        default=DEFAULT_INTERVAL_MODIFIER,
        ge=INTERVAL_MODIFIER_RANGE[0],
        le=INTERVAL_MODIFIER_RANGE[1],
    )
    max_interval: int = Field(
        default=DEFAULT_MAX_INTERVAL,
        ge=MAX_INTERVAL_RANGE[0],
        le=MAX_INTERVAL_RANGE[1],
    )

    @classmethod
    def from_settings(cls, settings: StudySettings) -> "SM2SchedulerConfig":
        return cls(
            easy_bonus=settings.easy_bonus,
            interval_modifier=settings.interval_modifier,
            max_interval=settings.max_interval,
        )


def _round_half_up(value: float) -> int:
    # Halves round up (3.5 -> 4), unlike the built-in round().
    return int(math.floor(value + 0.5))


class SM2Scheduler(BaseScheduler):
    """
    Minimal SM-2 style scheduler.

    A card's first scheduled review gets a fixed interval per rating. Later
    reviews grow the previous interval by the ease factor and the configured
    interval modifier, capped at ``max_interval``. Hard lowers the ease
    factor, Easy raises it, Good leaves it alone.
    """

    def __init__(self, config: Optional[SM2SchedulerConfig] = None):
        if config is None:
            config = SM2SchedulerConfig()
        self.config = config

    def _validate_rating(self, rating: int) -> Rating:
        """Maps a raw rating (1-3) to Rating and validates."""
        try:
            return Rating(rating)
        except ValueError:
            raise ValueError(
                f"Invalid rating: {rating}. Must be 1-3 (1=Hard, 2=Good, 3=Easy)."
            ) from None

    def _next_ease_factor(self, ease_factor: float, rating: Rating) -> float:
        if rating == Rating.Hard:
            return max(MIN_EASE_FACTOR, ease_factor - EASE_STEP)
        if rating == Rating.Easy:
            return min(
                MAX_EASE_FACTOR,
                ease_factor + EASE_STEP * self.config.easy_bonus,
            )
        return ease_factor

    def _next_interval(
        self, interval: int, ease_factor: float, rating: Rating
    ) -> int:
        if interval == 0:
            return FIRST_REVIEW_INTERVALS[int(rating)]
        grown = _round_half_up(
            interval * ease_factor * self.config.interval_modifier
        )
        return min(grown, self.config.max_interval)

    def compute_next_state(
        self, card: Card, rating: int, review_ts: datetime.datetime
    ) -> SchedulerOutput:
        """
        Computes the next state of a card from its current state and a rating.
        """
        validated = self._validate_rating(rating)
        utc_review_ts = ensure_utc(review_ts)

        ease_factor = card.ease_factor or DEFAULT_EASE_FACTOR
        interval = card.interval or 0
        review_count = card.review_count or 0

        # The first-review branch is gated on interval alone, not review_count.
        first_review = interval == 0
        new_ease = self._next_ease_factor(ease_factor, validated)
        new_interval = self._next_interval(interval, new_ease, validated)

        logger.debug(
            f"Card {card.id} rated {validated.name}: ease {ease_factor:.2f} -> "
            f"{new_ease:.2f}, interval {interval} -> {new_interval} days"
        )

        return SchedulerOutput(
            ease_factor=new_ease,
            interval=new_interval,
            review_count=review_count + 1,
            last_reviewed=utc_review_ts,
            next_review=utc_review_ts + datetime.timedelta(days=new_interval),
            first_review=first_review,
        )
