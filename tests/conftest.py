from datetime import datetime, timedelta, timezone

import pytest

from benkyo.application.review_service import ReviewService
from benkyo.domain.models import Card, CardKind, ReviewState
from benkyo.infrastructure.clock import FixedClock
from benkyo.infrastructure.stores import MemoryCardStore

DAY0 = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


def day(n: int) -> datetime:
    """DAY0 shifted by n calendar days."""
    return DAY0 + timedelta(days=n)


def scheduled(card_id: str, next_day: int, interval: int = 1, **kwargs) -> Card:
    """A card that was last reviewed so that it comes due on day(next_day)."""
    reviewed_at = day(next_day) - timedelta(days=interval)
    state = ReviewState(
        is_learned=True,
        reviews=1,
        correct_count=1,
        streak=1,
        interval_days=interval,
        last_reviewed_at=reviewed_at,
        next_review_at=reviewed_at + timedelta(days=interval),
    )
    return Card(id=card_id, front=card_id, state=state, **kwargs)


@pytest.fixture(autouse=True)
def isolate_config(tmp_path, monkeypatch):
    """Keep tests away from the user's config file and BENKYO_* environment."""
    monkeypatch.setattr("benkyo.application.config.CONFIG_FILES", [])
    for var in (
        "BENKYO_STORE",
        "BENKYO_STORE_PATH",
        "BENKYO_GOOD_GROWTH",
        "BENKYO_EASY_GROWTH",
        "BENKYO_HOST",
        "BENKYO_PORT",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))


@pytest.fixture
def clock():
    return FixedClock(DAY0)


@pytest.fixture
def store():
    return MemoryCardStore(
        [
            Card(id="mizu", front="水", back="water"),
            Card(id="hi", front="火", back="fire", kind=CardKind.KANJI),
        ]
    )


@pytest.fixture
def service(store, clock):
    return ReviewService(store=store, clock=clock)
