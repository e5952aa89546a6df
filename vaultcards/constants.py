"""
SM-2 scheduling and card-syntax constants.

This module contains static algorithm parameters and the fenced-block syntax.
No runtime configuration or path defaults - pure constants only.
"""
from typing import Dict, Tuple

# Ease factor bounds and the default assigned to a card before its first review.
DEFAULT_EASE_FACTOR: float = 2.5
MIN_EASE_FACTOR: float = 1.3
MAX_EASE_FACTOR: float = 2.5

# Amount the ease factor moves on a Hard or Easy rating.
EASE_STEP: float = 0.15

# Fixed first-review intervals in days, keyed by rating (1=Hard, 2=Good, 3=Easy).
FIRST_REVIEW_INTERVALS: Dict[int, int] = {
    1: 1,
    2: 3,
    3: 7,
}

DEFAULT_EASY_BONUS: float = 1.3
DEFAULT_INTERVAL_MODIFIER: float = 1.0
DEFAULT_MAX_INTERVAL: int = 365

# Allowed ranges for the user-tunable algorithm settings.
EASY_BONUS_RANGE: Tuple[float, float] = (1.0, 2.0)
INTERVAL_MODIFIER_RANGE: Tuple[float, float] = (0.5, 2.0)
MAX_INTERVAL_RANGE: Tuple[int, int] = (30, 1000)

# Card block syntax.
CARD_BLOCK_TAG: str = "anki"
QA_SEPARATOR: str = "?"
CARD_ID_PREFIX: str = "card_"

# Seconds to wait before the automatic startup indexing pass.
DEFAULT_STARTUP_INDEX_DELAY: float = 5.0

SETTINGS_VERSION: int = 1
