"""
Ports (interfaces) for card storage and time.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime

from .models import Card, DailyActivity


class CardStore(ABC):
    """
    Port for reading and persisting cards with their review state.

    The store is the single mutation authority for review state. Writes are
    guarded by the card's version so that two concurrent reviews of the same
    card cannot silently overwrite each other.

    Implementations:
        - MemoryCardStore: Process-local dictionary.
        - JsonCardStore: JSON document on disk.
    """

    @abstractmethod
    def get(self, card_id: str) -> Card:
        """
        Fetch a single card.

        Raises:
            NotFound: If no card has this id.
        """

    @abstractmethod
    def list_cards(self) -> list[Card]:
        """Return every card in insertion order."""

    @abstractmethod
    def add(self, card: Card) -> Card:
        """
        Insert a new card.

        Raises:
            InvalidArgument: If a card with the same id already exists.
        """

    @abstractmethod
    def save(self, card: Card, expected_version: int) -> Card:
        """
        Replace a card if its stored version still equals expected_version.

        Returns:
            The stored card with its version incremented.

        Raises:
            NotFound: If the card does not exist.
            ConcurrentUpdateConflict: If the stored version differs.
        """

    @abstractmethod
    def record_activity(self, day: date, reviewed: int = 0, learned: int = 0) -> None:
        """Add to the review counters of a calendar day."""

    @abstractmethod
    def get_activity(self) -> list[DailyActivity]:
        """Return recorded daily activity sorted by day ascending."""


class Clock(ABC):
    """Port supplying the current time."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current timezone-aware time."""
