"""Harness-originated errors.

Engine failures are never wrapped; they propagate to the caller unchanged.
"""

from __future__ import annotations

__all__ = [
    "AlreadyClosedError",
    "MergeContractViolationError",
    "RandomIndexWriterError",
]


class RandomIndexWriterError(RuntimeError):
    """Base class for errors raised by the randomized writer itself."""


class AlreadyClosedError(RandomIndexWriterError):
    """Raised when a closed RandomIndexWriter is used again."""


class MergeContractViolationError(AssertionError):
    """Raised when a partial force-merge leaves more segments than requested.

    This is a test oracle failure in the engine under test. It derives from
    ``AssertionError`` so test runners report it as a failed check, and it is
    raised explicitly so ``python -O`` cannot strip it.
    """

    def __init__(self, limit: int, actual: int) -> None:
        """Record the requested segment limit and the observed segment count."""
        super().__init__(f"limit={limit} actual={actual}")
        self.limit = limit
        self.actual = actual
