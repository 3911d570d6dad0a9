import itertools
from datetime import datetime, timedelta, timezone

import pytest
from conftest import DAY0, day, scheduled

from benkyo.application.scheduler import (
    ReviewPolicy,
    apply_review,
    is_due,
    select_due_queue,
)
from benkyo.domain.errors import InvalidArgument
from benkyo.domain.models import Card, Rating, ReviewState


# --- apply_review: worked example ---


def test_new_card_rated_good():
    state = apply_review(ReviewState(), "good", DAY0)

    assert state.reviews == 1
    assert state.correct_count == 1
    assert state.incorrect_count == 0
    assert state.streak == 1
    assert state.is_learned is True
    assert state.interval_days == 2
    assert state.last_reviewed_at == DAY0
    assert state.next_review_at == day(2)


def test_good_then_easy_then_again():
    state = apply_review(ReviewState(), Rating.GOOD, DAY0)
    state = apply_review(state, Rating.EASY, day(2))

    assert state.interval_days == 6
    assert state.next_review_at == day(8)
    assert state.streak == 2

    state = apply_review(state, Rating.AGAIN, day(8))

    assert state.interval_days == 1
    assert state.streak == 0
    assert state.incorrect_count == 1
    assert state.correct_count == 2
    assert state.reviews == 3
    assert state.is_learned is True
    assert state.next_review_at == day(9)


def test_input_state_is_not_mutated():
    before = ReviewState()
    apply_review(before, "easy", DAY0)
    assert before == ReviewState()


# --- apply_review: properties ---


@pytest.mark.parametrize("ratings", list(itertools.product(list(Rating), repeat=4)))
def test_counters_and_next_review_hold_after_every_review(ratings):
    state = ReviewState()
    now = DAY0
    for rating in ratings:
        state = apply_review(state, rating, now)
        assert state.reviews == state.correct_count + state.incorrect_count
        assert state.interval_days >= 1
        assert state.next_review_at == state.last_reviewed_at + timedelta(days=state.interval_days)
        now = state.next_review_at


@pytest.mark.parametrize("interval", [1, 2, 5, 30, 365])
def test_easy_never_schedules_sooner_than_good(interval):
    state = scheduled("c", next_day=0, interval=interval).state
    good = apply_review(state, "good", DAY0)
    easy = apply_review(state, "easy", DAY0)
    assert easy.interval_days >= good.interval_days >= 1


@pytest.mark.parametrize("interval,streak", [(1, 0), (8, 3), (243, 12)])
def test_again_resets_interval_and_streak(interval, streak):
    last = day(-interval)
    state = ReviewState(
        is_learned=True,
        reviews=streak + 1,
        correct_count=streak + 1,
        streak=streak,
        interval_days=interval,
        last_reviewed_at=last,
        next_review_at=last + timedelta(days=interval),
    )
    after = apply_review(state, "again", DAY0)
    assert after.interval_days == 1
    assert after.streak == 0


def test_again_on_new_card_does_not_mark_learned():
    state = apply_review(ReviewState(), "again", DAY0)
    assert state.is_learned is False
    assert state.incorrect_count == 1
    assert state.next_review_at == day(1)


def test_non_sticky_policy_clears_learned_on_lapse():
    policy = ReviewPolicy(sticky_learned=False)
    state = apply_review(ReviewState(), "good", DAY0, policy)
    state = apply_review(state, "again", day(2), policy)
    assert state.is_learned is False


def test_custom_growth_factors():
    policy = ReviewPolicy(good_growth=3, easy_growth=5)
    state = apply_review(ReviewState(), "good", DAY0, policy)
    assert state.interval_days == 3
    state = apply_review(state, "easy", day(3), policy)
    assert state.interval_days == 15


def test_policy_rejects_easy_slower_than_good():
    with pytest.raises(InvalidArgument):
        ReviewPolicy(good_growth=3, easy_growth=2)


# --- apply_review: errors ---


@pytest.mark.parametrize("rating", ["GOOD", "Again", " easy ", "good\n"])
def test_rating_must_match_exactly(rating):
    state = ReviewState()
    with pytest.raises(InvalidArgument, match="Invalid rating"):
        apply_review(state, rating, DAY0)
    assert state == ReviewState()


@pytest.mark.parametrize("rating", ["hard", "", "0", "GOOD", None, 3])
def test_invalid_rating_is_rejected(rating):
    with pytest.raises(InvalidArgument, match="Invalid rating"):
        apply_review(ReviewState(), rating, DAY0)


def test_naive_now_is_rejected():
    with pytest.raises(InvalidArgument, match="timezone-aware"):
        apply_review(ReviewState(), "good", datetime(2026, 3, 1))


# --- is_due ---


@pytest.mark.parametrize("now", [DAY0, day(-10_000), day(10_000)])
def test_new_card_is_always_due(now):
    assert is_due(ReviewState(), now)


def test_scheduled_card_due_at_and_after_next_review():
    state = scheduled("c", next_day=5).state
    assert not is_due(state, day(5) - timedelta(seconds=1))
    assert is_due(state, day(5))
    assert is_due(state, day(6))


@pytest.mark.parametrize("state", [ReviewState(), scheduled("c", next_day=5).state])
def test_is_due_rejects_naive_now(state):
    with pytest.raises(InvalidArgument, match="timezone-aware"):
        is_due(state, datetime(2026, 3, 6))


# --- select_due_queue ---


def test_due_queue_orders_new_cards_first_then_by_next_review():
    a = scheduled("A", next_day=5)
    b = Card(id="B", front="B")
    c = scheduled("C", next_day=3)

    queue = select_due_queue([a, b, c], day(10))

    assert [card.id for card in queue] == ["B", "C", "A"]


def test_due_queue_excludes_cards_not_yet_due():
    cards = [scheduled("soon", next_day=1), scheduled("later", next_day=20)]
    assert [c.id for c in select_due_queue(cards, day(2))] == ["soon"]


def test_due_queue_ties_keep_input_order():
    cards = [
        Card(id="n1", front="n1"),
        scheduled("s1", next_day=2),
        Card(id="n2", front="n2"),
        scheduled("s2", next_day=2),
        Card(id="n3", front="n3"),
    ]
    assert [c.id for c in select_due_queue(cards, day(3))] == ["n1", "n2", "n3", "s1", "s2"]


def test_due_queue_orders_across_time_zones():
    tokyo = timezone(timedelta(hours=9))
    early = scheduled("early", next_day=2)
    # Due one hour before "early", stored in JST.
    reviewed_at = (day(1) - timedelta(hours=1)).astimezone(tokyo)
    earlier = Card(
        id="earlier",
        front="earlier",
        state=ReviewState(
            is_learned=True,
            reviews=1,
            correct_count=1,
            streak=1,
            interval_days=1,
            last_reviewed_at=reviewed_at,
            next_review_at=reviewed_at + timedelta(days=1),
        ),
    )
    assert [c.id for c in select_due_queue([early, earlier], day(3))] == ["earlier", "early"]


def test_due_queue_is_restartable_and_deterministic():
    cards = [scheduled(f"c{i}", next_day=i % 3) for i in range(10)] + [Card(id="new", front="x")]

    queue = select_due_queue(cards, day(5))
    first = [c.id for c in queue]
    second = [c.id for c in queue]
    again = [c.id for c in select_due_queue(cards, day(5))]

    assert first == second == again
    assert len(queue) == 11
    assert queue[0].id == "new"


def test_due_queue_snapshots_its_input():
    cards = [Card(id="a", front="a")]
    queue = select_due_queue(cards, DAY0)
    cards.append(Card(id="b", front="b"))
    assert [c.id for c in queue] == ["a"]


def test_due_queue_take_limits_results():
    cards = [Card(id=str(i), front=str(i)) for i in range(5)]
    queue = select_due_queue(cards, DAY0)
    assert [c.id for c in queue.take(2)] == ["0", "1"]
    assert len(queue.take(None)) == 5
