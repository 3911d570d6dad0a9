"""Centralized constants for the benkyo scheduler.

Scheduling policy defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Intervals ----------
MIN_INTERVAL_DAYS = 1
DEFAULT_INTERVAL_DAYS = 1

# ---------- Growth factors ----------
GOOD_GROWTH = 2
EASY_GROWTH = 3

# ---------- Lapse policy ----------
# An "again" rating keeps is_learned set once a card has been learned.
STICKY_LEARNED = True

# ---------- Queries ----------
DEFAULT_ACTIVITY_DAYS = 7
MAX_DUE_QUEUE_SIZE = 500
