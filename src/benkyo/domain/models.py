"""
Domain models for review scheduling.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from enum import Enum

from .constants import DEFAULT_INTERVAL_DAYS
from .errors import InvalidArgument


class Rating(str, Enum):
    """The learner's self-assessment of a single review."""

    AGAIN = "again"
    GOOD = "good"
    EASY = "easy"

    @classmethod
    def parse(cls, value: "Rating | str") -> "Rating":
        """
        Coerce a raw value into a Rating.

        Raises:
            InvalidArgument: If the value is not one of again/good/easy.
        """
        if isinstance(value, Rating):
            return value
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                pass
        allowed = ", ".join(r.value for r in cls)
        raise InvalidArgument(f"Invalid rating {value!r}; expected one of: {allowed}")


class CardKind(str, Enum):
    VOCABULARY = "vocabulary"
    KANJI = "kanji"
    GRAMMAR = "grammar"


def ensure_aware(value: datetime, name: str = "now") -> datetime:
    """Reject naive datetimes; scheduling arithmetic is only defined on aware ones."""
    if not isinstance(value, datetime):
        raise InvalidArgument(f"{name} must be a datetime, got {type(value).__name__}")
    if value.tzinfo is None or value.utcoffset() is None:
        raise InvalidArgument(f"{name} must be timezone-aware")
    return value


@dataclass(frozen=True)
class ReviewState:
    """
    Memory-strength state embedded in every card.

    Attributes:
        is_learned: True once the card has received any non-"again" rating.
        reviews: Total number of completed review events.
        correct_count: Number of ratings other than "again".
        incorrect_count: Number of "again" ratings.
        streak: Consecutive non-"again" ratings since the last lapse.
        interval_days: Current scheduling interval in days.
        last_reviewed_at: Time of the most recent review.
        next_review_at: Time at which the card becomes due again.
    """

    is_learned: bool = False
    reviews: int = 0
    correct_count: int = 0
    incorrect_count: int = 0
    streak: int = 0
    interval_days: int = DEFAULT_INTERVAL_DAYS
    last_reviewed_at: datetime | None = None
    next_review_at: datetime | None = None

    def __post_init__(self):
        for name in ("reviews", "correct_count", "incorrect_count", "streak"):
            if getattr(self, name) < 0:
                raise InvalidArgument(f"{name} must be >= 0")
        if self.interval_days <= 0:
            raise InvalidArgument("interval_days must be > 0")
        if self.reviews != self.correct_count + self.incorrect_count:
            raise InvalidArgument("reviews must equal correct_count + incorrect_count")

        if self.reviews == 0:
            if self.last_reviewed_at is not None or self.next_review_at is not None:
                raise InvalidArgument("a card with no reviews cannot carry review timestamps")
            return

        if self.last_reviewed_at is None or self.next_review_at is None:
            raise InvalidArgument("a reviewed card must carry both review timestamps")
        ensure_aware(self.last_reviewed_at, "last_reviewed_at")
        ensure_aware(self.next_review_at, "next_review_at")
        if self.next_review_at != self.last_reviewed_at + timedelta(days=self.interval_days):
            raise InvalidArgument("next_review_at must equal last_reviewed_at + interval_days")

    @property
    def is_new(self) -> bool:
        return self.reviews == 0


@dataclass(frozen=True)
class Card:
    """A unit of learnable content paired with its review state."""

    id: str
    front: str
    back: str = ""
    kind: CardKind = CardKind.VOCABULARY
    tags: tuple[str, ...] = ()
    is_bookmarked: bool = False
    state: ReviewState = field(default_factory=ReviewState)
    version: int = 0

    def with_state(self, state: ReviewState) -> "Card":
        return replace(self, state=state)


@dataclass(frozen=True)
class Stats:
    """Aggregate learning statistics over a card collection."""

    total_words: int = 0
    learned_words: int = 0
    due_today: int = 0
    total_reviews: int = 0
    accuracy: int = 0
    streak: int = 0
    mastery_percentage: int = 0


@dataclass(frozen=True)
class DailyActivity:
    """Review counts for one calendar day (UTC)."""

    day: date
    reviewed: int = 0
    learned: int = 0


@dataclass
class ActivitySummary:
    """Recent daily activity plus the consecutive-study-day streak."""

    days: list[DailyActivity]
    study_day_streak: int
