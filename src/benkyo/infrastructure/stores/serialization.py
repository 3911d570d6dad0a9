"""
Conversion between domain objects and plain JSON-compatible dicts.

Field names follow the persisted layout of the review state (camelCase),
timestamps are ISO-8601 strings with offset.
"""

from datetime import date, datetime
from typing import Any

from benkyo.domain.errors import InvalidArgument
from benkyo.domain.models import Card, CardKind, DailyActivity, ReviewState


def _dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def state_to_dict(state: ReviewState) -> dict[str, Any]:
    return {
        "isLearned": state.is_learned,
        "reviews": state.reviews,
        "correctCount": state.correct_count,
        "incorrectCount": state.incorrect_count,
        "streak": state.streak,
        "intervalDays": state.interval_days,
        "lastReviewedAt": _iso(state.last_reviewed_at),
        "nextReviewAt": _iso(state.next_review_at),
    }


def state_from_dict(data: dict[str, Any]) -> ReviewState:
    return ReviewState(
        is_learned=bool(data.get("isLearned", False)),
        reviews=int(data.get("reviews", 0)),
        correct_count=int(data.get("correctCount", 0)),
        incorrect_count=int(data.get("incorrectCount", 0)),
        streak=int(data.get("streak", 0)),
        interval_days=int(data.get("intervalDays", 1)),
        last_reviewed_at=_dt(data.get("lastReviewedAt")),
        next_review_at=_dt(data.get("nextReviewAt")),
    )


def card_to_dict(card: Card) -> dict[str, Any]:
    return {
        "id": card.id,
        "front": card.front,
        "back": card.back,
        "kind": card.kind.value,
        "tags": list(card.tags),
        "isBookmarked": card.is_bookmarked,
        "version": card.version,
        "state": state_to_dict(card.state),
    }


def card_from_dict(data: dict[str, Any]) -> Card:
    try:
        kind = CardKind(data.get("kind", CardKind.VOCABULARY.value))
    except ValueError:
        raise InvalidArgument(f"Unknown card kind: {data.get('kind')!r}") from None
    return Card(
        id=str(data["id"]),
        front=str(data["front"]),
        back=str(data.get("back", "")),
        kind=kind,
        tags=tuple(data.get("tags") or ()),
        is_bookmarked=bool(data.get("isBookmarked", False)),
        state=state_from_dict(data.get("state") or {}),
        version=int(data.get("version", 0)),
    )


def activity_to_dict(activity: DailyActivity) -> dict[str, Any]:
    return {
        "day": activity.day.isoformat(),
        "reviewed": activity.reviewed,
        "learned": activity.learned,
    }


def activity_from_dict(data: dict[str, Any]) -> DailyActivity:
    return DailyActivity(
        day=date.fromisoformat(data["day"]),
        reviewed=int(data.get("reviewed", 0)),
        learned=int(data.get("learned", 0)),
    )
