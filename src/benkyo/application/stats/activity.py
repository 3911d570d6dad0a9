"""
Daily activity summaries.

Tracks how many reviews happened on each calendar day and derives the
study-day streak: consecutive days, ending today, with at least one review.
If nothing has been reviewed yet today the streak still counts back from
yesterday so it does not drop to zero at midnight.
"""

from datetime import date, timedelta

from benkyo.domain.models import ActivitySummary, DailyActivity


def study_day_streak(activity: list[DailyActivity], today: date) -> int:
    active = {a.day for a in activity if a.reviewed > 0}

    cursor = today if today in active else today - timedelta(days=1)
    streak = 0
    while cursor in active:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def summarize_activity(activity: list[DailyActivity], today: date, days: int) -> ActivitySummary:
    """
    Build a window of `days` calendar days ending today, oldest first.

    Days without recorded activity appear with zero counts.
    """
    by_day = {a.day: a for a in activity}
    window = [
        by_day.get(day, DailyActivity(day=day))
        for day in (today - timedelta(days=offset) for offset in range(days - 1, -1, -1))
    ]
    return ActivitySummary(days=window, study_day_streak=study_day_streak(activity, today))
