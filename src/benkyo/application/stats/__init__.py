# Application Stats Package
from .activity import summarize_activity
from .calculator import StatsCalculator, aggregate_stats

__all__ = ["StatsCalculator", "aggregate_stats", "summarize_activity"]
