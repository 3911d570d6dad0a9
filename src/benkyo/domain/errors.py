"""
Error taxonomy shared by every layer.

The scheduler raises, the service propagates, and the interfaces translate
these into HTTP status codes or CLI exit codes.
"""


class BenkyoError(Exception):
    """Base class for all benkyo errors."""


class InvalidArgument(BenkyoError, ValueError):
    """A caller passed a value outside the operation's domain (e.g. an unknown rating)."""


class NotFound(BenkyoError, KeyError):
    """The requested card does not exist in the store."""

    def __init__(self, card_id: str):
        super().__init__(card_id)
        self.card_id = card_id

    def __str__(self) -> str:
        return f"Card not found: {self.card_id}"


class ConcurrentUpdateConflict(BenkyoError):
    """
    The card was modified by another writer since it was read.

    Recovery is to reload the card and ask again. Re-running the same review
    against the stale snapshot would double-count it.
    """

    def __init__(self, card_id: str, expected: int, actual: int):
        super().__init__(
            f"Card {card_id} changed concurrently (expected version {expected}, found {actual})"
        )
        self.card_id = card_id
        self.expected = expected
        self.actual = actual


class StoreError(BenkyoError):
    """The backing store could not be read or written."""
