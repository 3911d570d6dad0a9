# Domain Package
from .errors import (
    BenkyoError,
    ConcurrentUpdateConflict,
    InvalidArgument,
    NotFound,
    StoreError,
)
from .models import ActivitySummary, Card, CardKind, DailyActivity, Rating, ReviewState, Stats

__all__ = [
    "BenkyoError",
    "InvalidArgument",
    "NotFound",
    "ConcurrentUpdateConflict",
    "StoreError",
    "Rating",
    "ReviewState",
    "Card",
    "CardKind",
    "Stats",
    "DailyActivity",
    "ActivitySummary",
]
