"""
Memory Card Store: process-local implementation of CardStore.

All reads and writes go through one lock, so a version check and the write
that follows it happen atomically.
"""

import logging
import threading
from dataclasses import replace
from datetime import date

from benkyo.domain.errors import ConcurrentUpdateConflict, InvalidArgument, NotFound
from benkyo.domain.models import Card, DailyActivity
from benkyo.domain.ports import CardStore

logger = logging.getLogger(__name__)


class MemoryCardStore(CardStore):
    def __init__(self, cards: list[Card] | None = None):
        self._lock = threading.RLock()
        self._cards: dict[str, Card] = {}
        self._activity: dict[date, DailyActivity] = {}
        for card in cards or []:
            self.add(card)

    def get(self, card_id: str) -> Card:
        with self._lock:
            try:
                return self._cards[card_id]
            except KeyError:
                raise NotFound(card_id) from None

    def list_cards(self) -> list[Card]:
        with self._lock:
            return list(self._cards.values())

    def add(self, card: Card) -> Card:
        with self._lock:
            if card.id in self._cards:
                raise InvalidArgument(f"Card already exists: {card.id}")
            self._cards[card.id] = card
            try:
                self._changed()
            except Exception:
                del self._cards[card.id]
                raise
            return card

    def save(self, card: Card, expected_version: int) -> Card:
        with self._lock:
            current = self.get(card.id)
            if current.version != expected_version:
                logger.warning(
                    f"Version conflict on {card.id}: "
                    f"expected {expected_version}, found {current.version}"
                )
                raise ConcurrentUpdateConflict(card.id, expected_version, current.version)

            stored = replace(card, version=current.version + 1)
            self._cards[card.id] = stored
            try:
                self._changed()
            except Exception:
                self._cards[card.id] = current
                raise
            return stored

    def record_activity(self, day: date, reviewed: int = 0, learned: int = 0) -> None:
        with self._lock:
            prev = self._activity.get(day)
            base = prev or DailyActivity(day=day)
            self._activity[day] = DailyActivity(
                day=day,
                reviewed=base.reviewed + reviewed,
                learned=base.learned + learned,
            )
            try:
                self._changed()
            except Exception:
                if prev is None:
                    del self._activity[day]
                else:
                    self._activity[day] = prev
                raise

    def get_activity(self) -> list[DailyActivity]:
        with self._lock:
            return sorted(self._activity.values(), key=lambda a: a.day)

    def _changed(self) -> None:
        """Hook for subclasses that persist after every mutation."""
