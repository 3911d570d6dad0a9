"""
Stats calculator for aggregating review state across a card collection.

This is a pure computation module with no I/O.
"""

import math
from collections.abc import Iterable
from datetime import datetime

from benkyo.application.scheduler import is_due
from benkyo.domain.models import Card, Stats, ensure_aware


def percent(numerator: int, denominator: int) -> int:
    """
    Integer percentage rounded half up, 0 when the denominator is 0.

    Python's round() rounds half to even; progress figures round 12.5 to 13.
    """
    if denominator == 0:
        return 0
    return math.floor(numerator * 100 / denominator + 0.5)


class StatsCalculator:
    """
    Computes the Stats aggregate from a collection of cards.

    Stateless and side-effect free.
    """

    def aggregate(self, cards: Iterable[Card], now: datetime) -> Stats:
        ensure_aware(now)
        total = learned = due = reviews = correct = best_streak = 0

        for card in cards:
            state = card.state
            total += 1
            if state.is_learned:
                learned += 1
            if is_due(state, now):
                due += 1
            reviews += state.reviews
            correct += state.correct_count
            best_streak = max(best_streak, state.streak)

        return Stats(
            total_words=total,
            learned_words=learned,
            due_today=due,
            total_reviews=reviews,
            accuracy=percent(correct, reviews),
            streak=best_streak,
            mastery_percentage=percent(learned, total),
        )


def aggregate_stats(cards: Iterable[Card], now: datetime) -> Stats:
    return StatsCalculator().aggregate(cards, now)
