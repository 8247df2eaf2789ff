"""Error types and assertion helpers for the core engine."""

from __future__ import annotations

import logging

LOGGER = logging.getLogger(__name__)


class RangeInvariantError(RuntimeError):
    """Raised when validated input reaches a branch that cannot happen.

    The computation is aborted instead of producing a corrupted tree.
    """


def soft_assert(condition: bool, message: str, strict: bool = False) -> None:
    """Log a failed assertion, raising only in development mode."""

    if condition:
        return
    LOGGER.error("Soft assertion failed: %s", message)
    if strict:
        raise AssertionError(message)
