"""benkyo: spaced-repetition review scheduler for Japanese study cards."""

from benkyo.consts import VERSION

__version__ = VERSION
