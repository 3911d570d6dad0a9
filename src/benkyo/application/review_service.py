"""
Review Service: Application layer orchestrator.

The single writer path for review state: load from the store, apply the
scheduler at the clock's time, persist with a version check, record activity.
"""

import logging
from dataclasses import replace

from benkyo.application.id_service import generate_card_id
from benkyo.application.scheduler import DEFAULT_POLICY, ReviewPolicy, apply_review, select_due_queue
from benkyo.application.stats import StatsCalculator, summarize_activity
from benkyo.domain.constants import DEFAULT_ACTIVITY_DAYS, MAX_DUE_QUEUE_SIZE
from benkyo.domain.errors import InvalidArgument, StoreError
from benkyo.domain.models import ActivitySummary, Card, CardKind, Rating, Stats
from benkyo.domain.ports import CardStore, Clock

logger = logging.getLogger(__name__)


class ReviewService:
    """
    Application service for reviewing cards and querying progress.

    Depends on the CardStore and Clock abstractions, not concrete adapters.
    """

    def __init__(
        self,
        store: CardStore,
        clock: Clock,
        policy: ReviewPolicy | None = None,
        calculator: StatsCalculator | None = None,
    ):
        self._store = store
        self._clock = clock
        self._policy = policy or DEFAULT_POLICY
        self._calc = calculator or StatsCalculator()

    @property
    def store(self) -> CardStore:
        return self._store

    def review(
        self,
        card_id: str,
        rating: Rating | str,
        expected_version: int | None = None,
    ) -> Card:
        """
        Apply a rating to a card and persist the result.

        Args:
            card_id: Card to review.
            rating: "again", "good" or "easy".
            expected_version: Version the caller last saw. Defaults to the
                version loaded here, which still guards against a write that
                lands between this load and the save.

        Returns:
            The stored card with its new state and version.

        Raises:
            InvalidArgument: Unknown rating. The store is not touched.
            NotFound: Unknown card.
            ConcurrentUpdateConflict: The card changed since expected_version.
        """
        rating = Rating.parse(rating)
        card = self._store.get(card_id)
        version = card.version if expected_version is None else expected_version

        now = self._clock.now()
        new_state = apply_review(card.state, rating, now, self._policy)
        stored = self._store.save(card.with_state(new_state), expected_version=version)

        # The review is already durable; activity counters must not make it look failed.
        newly_learned = new_state.is_learned and not card.state.is_learned
        try:
            self._store.record_activity(now.date(), reviewed=1, learned=1 if newly_learned else 0)
        except StoreError as e:
            logger.error(f"Review of {card_id} saved but activity was not recorded: {e}")

        logger.info(
            f"Reviewed {card_id} as {rating.value}: interval {card.state.interval_days}d -> "
            f"{new_state.interval_days}d, next {new_state.next_review_at.isoformat()}"
        )
        return stored

    def get_card(self, card_id: str) -> Card:
        return self._store.get(card_id)

    def due_queue(self, limit: int | None = None) -> list[Card]:
        """Due cards in review order, new cards first."""
        if limit is not None and limit < 0:
            raise InvalidArgument("limit must be >= 0")
        limit = MAX_DUE_QUEUE_SIZE if limit is None else min(limit, MAX_DUE_QUEUE_SIZE)
        return select_due_queue(self._store.list_cards(), self._clock.now()).take(limit)

    def stats(self) -> Stats:
        return self._calc.aggregate(self._store.list_cards(), self._clock.now())

    def activity(self, days: int = DEFAULT_ACTIVITY_DAYS) -> ActivitySummary:
        if days <= 0:
            raise InvalidArgument("days must be > 0")
        return summarize_activity(self._store.get_activity(), self._clock.now().date(), days)

    def toggle_bookmark(self, card_id: str) -> Card:
        card = self._store.get(card_id)
        updated = replace(card, is_bookmarked=not card.is_bookmarked)
        return self._store.save(updated, expected_version=card.version)

    def add_card(
        self,
        front: str,
        back: str = "",
        kind: CardKind | str = CardKind.VOCABULARY,
        tags: list[str] | None = None,
        card_id: str | None = None,
    ) -> Card:
        if not front or not front.strip():
            raise InvalidArgument("front must not be empty")
        try:
            kind = CardKind(kind)
        except ValueError:
            raise InvalidArgument(f"Unknown card kind: {kind!r}") from None

        card = Card(
            id=card_id or generate_card_id(),
            front=front.strip(),
            back=back.strip(),
            kind=kind,
            tags=tuple(tags or ()),
        )
        stored = self._store.add(card)
        logger.info(f"Added {stored.kind.value} card {stored.id}")
        return stored

    def import_cards(self, cards: list[Card]) -> tuple[int, int]:
        """
        Add cards, skipping ids that already exist.

        Returns:
            (added, skipped)
        """
        existing = {c.id for c in self._store.list_cards()}
        added = skipped = 0
        for card in cards:
            if card.id in existing:
                skipped += 1
                continue
            self._store.add(card)
            existing.add(card.id)
            added += 1
        logger.info(f"Imported {added} cards ({skipped} already present)")
        return added, skipped
