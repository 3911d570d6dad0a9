"""
Review scheduler: the one place where review state changes.

Implements a simplified three-bucket model:
1. "again" resets the interval to the minimum and breaks the streak
2. "good" doubles the interval
3. "easy" triples the interval

Every function here is pure. The caller supplies `now` and is responsible
for persisting the returned state.
"""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import datetime, timedelta

from benkyo.domain.constants import EASY_GROWTH, GOOD_GROWTH, MIN_INTERVAL_DAYS, STICKY_LEARNED
from benkyo.domain.errors import InvalidArgument
from benkyo.domain.models import Card, Rating, ReviewState, ensure_aware

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewPolicy:
    """
    Tunable scheduling constants.

    Growth factors must satisfy 1 <= good_growth <= easy_growth so that an
    "easy" rating never schedules a card sooner than "good" would.
    """

    good_growth: int = GOOD_GROWTH
    easy_growth: int = EASY_GROWTH
    sticky_learned: bool = STICKY_LEARNED

    def __post_init__(self):
        if not 1 <= self.good_growth <= self.easy_growth:
            raise InvalidArgument(
                f"growth factors must satisfy 1 <= good ({self.good_growth}) "
                f"<= easy ({self.easy_growth})"
            )

    def next_interval(self, interval_days: int, rating: Rating) -> int:
        if rating is Rating.AGAIN:
            return MIN_INTERVAL_DAYS
        growth = self.good_growth if rating is Rating.GOOD else self.easy_growth
        return max(MIN_INTERVAL_DAYS, interval_days * growth)


DEFAULT_POLICY = ReviewPolicy()


def apply_review(
    state: ReviewState,
    rating: Rating | str,
    now: datetime,
    policy: ReviewPolicy = DEFAULT_POLICY,
) -> ReviewState:
    """
    Compute the state that results from rating a card at `now`.

    Args:
        state: Current review state. Never mutated.
        rating: "again", "good" or "easy".
        now: Timezone-aware time of the review.
        policy: Growth factors and lapse policy.

    Returns:
        A new ReviewState with counters, interval and timestamps updated.

    Raises:
        InvalidArgument: If the rating is unknown or `now` is naive.
    """
    rating = Rating.parse(rating)
    ensure_aware(now)

    interval = policy.next_interval(state.interval_days, rating)

    if rating is Rating.AGAIN:
        correct = state.correct_count
        incorrect = state.incorrect_count + 1
        streak = 0
        is_learned = state.is_learned if policy.sticky_learned else False
    else:
        correct = state.correct_count + 1
        incorrect = state.incorrect_count
        streak = state.streak + 1
        is_learned = True

    return ReviewState(
        is_learned=is_learned,
        reviews=state.reviews + 1,
        correct_count=correct,
        incorrect_count=incorrect,
        streak=streak,
        interval_days=interval,
        last_reviewed_at=now,
        next_review_at=now + timedelta(days=interval),
    )


def is_due(state: ReviewState, now: datetime) -> bool:
    """A card is due if it was never reviewed or its next review time has arrived."""
    ensure_aware(now)
    if state.reviews == 0:
        return True
    return state.next_review_at is not None and state.next_review_at <= now


def _due_order_key(card: Card) -> tuple[int, datetime | None]:
    # New cards sort before any scheduled card.
    if card.state.next_review_at is None:
        return (0, None)
    return (1, card.state.next_review_at)


class DueQueue:
    """
    Lazy, restartable sequence of due cards.

    The card collection is snapshotted at construction. Ordering is computed
    on first use with a stable sort, so iterating any number of times yields
    the same order.
    """

    def __init__(self, cards: Iterable[Card], now: datetime):
        self._cards = tuple(cards)
        self._now = ensure_aware(now)
        self._ordered: list[Card] | None = None

    def _materialize(self) -> list[Card]:
        if self._ordered is None:
            due = [c for c in self._cards if is_due(c.state, self._now)]
            self._ordered = sorted(due, key=_due_order_key)
            logger.debug(f"Due queue: {len(self._ordered)}/{len(self._cards)} cards due")
        return self._ordered

    def __iter__(self) -> Iterator[Card]:
        return iter(self._materialize())

    def __len__(self) -> int:
        return len(self._materialize())

    def __getitem__(self, index):
        return self._materialize()[index]

    def take(self, limit: int | None) -> list[Card]:
        ordered = self._materialize()
        return list(ordered if limit is None else ordered[:limit])


def select_due_queue(cards: Iterable[Card], now: datetime) -> DueQueue:
    """
    Select due cards ordered by next review time, new cards first.

    Ties keep their input order.
    """
    return DueQueue(cards, now)
