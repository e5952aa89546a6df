"""
Pydantic models for cards, the persisted card store, and study settings.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import IntEnum
from typing import List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)
from pydantic.alias_generators import to_camel

from .constants import (
    DEFAULT_EASY_BONUS,
    DEFAULT_INTERVAL_MODIFIER,
    DEFAULT_MAX_INTERVAL,
    EASY_BONUS_RANGE,
    INTERVAL_MODIFIER_RANGE,
    MAX_EASE_FACTOR,
    MAX_INTERVAL_RANGE,
    MIN_EASE_FACTOR,
    SETTINGS_VERSION,
)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def ensure_utc(ts: datetime) -> datetime:
    """Return ts as an aware UTC datetime. Naive values are assumed UTC."""
    if ts.tzinfo is None or ts.tzinfo.utcoffset(ts) is None:
        return ts.replace(tzinfo=timezone.utc)
    if ts.tzinfo != timezone.utc:
        return ts.astimezone(timezone.utc)
    return ts


def to_epoch_ms(ts: datetime) -> int:
    """Whole milliseconds since the Unix epoch, computed without float rounding."""
    return (ensure_utc(ts) - _EPOCH) // timedelta(milliseconds=1)


class Rating(IntEnum):
    """
    Represents the user's rating of how well they knew a card.
    """

    Hard = 1
    Good = 2
    Easy = 3


class Card(BaseModel):
    """
    Flashcard extracted from a fenced ``anki`` block.

    Text and provenance come from the parser; the scheduling sub-state
    (``last_reviewed`` through ``review_count``) stays unset until the card is
    merged into the store and is then owned by the scheduler.
    """

    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str = Field(
        ...,
        min_length=1,
        description="Content-derived identifier, e.g. 'card_a2rh4w'.",
    )
    front: str = Field(..., description="Question text (Markdown).")
    back: str = Field(..., description="Answer text (Markdown).")
    source_file: str = Field(
        ...,
        description="Name of the document the card was found in.",
    )
    position: int = Field(
        default=0,
        ge=0,
        description="Character offset of the card block in its document.",
    )

    last_reviewed: Optional[datetime] = Field(
        default=None,
        description="UTC timestamp of the most recent review.",
    )
    next_review: Optional[datetime] = Field(
        default=None,
        description="UTC timestamp at which the card becomes due again.",
    )
    ease_factor: Optional[float] = Field(
        default=None,
        ge=MIN_EASE_FACTOR,
        le=MAX_EASE_FACTOR,
        description="Interval growth multiplier.",
    )
    interval: Optional[int] = Field(
        default=None,
        ge=0,
        description="Days between the last review and the next one.",
    )
    review_count: Optional[int] = Field(
        default=None,
        ge=0,
        description="Number of times the card has been reviewed.",
    )

    @field_validator("last_reviewed", "next_review")
    @classmethod
    def normalize_timestamps(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Store every timestamp as aware UTC."""
        if v is None:
            return v
        return ensure_utc(v)

    @field_serializer(
        "last_reviewed", "next_review", when_used="json-unless-none"
    )
    def serialize_timestamp(self, v: datetime) -> int:
        """Timestamps are persisted as epoch milliseconds."""
        return to_epoch_ms(v)

    @property
    def is_new(self) -> bool:
        """True while the card has never been reviewed."""
        return not self.review_count

    def is_due(self, now: datetime) -> bool:
        """A card is due when it has no next review or that moment has passed."""
        if self.next_review is None:
            return True
        return self.next_review <= ensure_utc(now)


class CardStoreData(BaseModel):
    """
    The full persisted collection of cards as written by an indexing pass.
    """

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="UTC timestamp of the last save.",
    )
    total_cards: int = Field(default=0, ge=0)
    cards: List[Card] = Field(default_factory=list)

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @field_serializer("timestamp", when_used="json")
    def serialize_timestamp(self, v: datetime) -> str:
        """ISO-8601 UTC with millisecond precision, e.g. 2024-03-01T12:00:00.000Z."""
        return v.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    @classmethod
    def from_cards(
        cls, cards: List[Card], now: Optional[datetime] = None
    ) -> "CardStoreData":
        """Build store data whose count always matches its card list."""
        return cls(
            timestamp=ensure_utc(now or datetime.now(timezone.utc)),
            total_cards=len(cards),
            cards=list(cards),
        )

    def find_index(self, card_id: str) -> Optional[int]:
        """Index of the first card with the given id, or None."""
        for idx, card in enumerate(self.cards):
            if card.id == card_id:
                return idx
        return None


class StudySettings(BaseModel):
    """
    User-tunable review and scheduling settings.

    Defaults are applied once at load; unknown keys are rejected.
    """

    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    version: int = Field(default=SETTINGS_VERSION, ge=1, le=SETTINGS_VERSION)

    # Review session
    cards_per_session: int = Field(default=5, ge=1)
    new_cards_per_day: int = Field(default=10, ge=0)
    reviews_per_day: int = Field(default=50, ge=0)

    # Card display
    show_source_file: bool = True
    enable_markdown_rendering: bool = True

    # SRS algorithm
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

    # Interface
    dark_mode_buttons: bool = True

    # Indexing
    enable_automatic_indexing: bool = True
