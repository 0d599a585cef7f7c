"""Hard-failure exception for fuzzers.

Exhaustion is never an exception: a fuzzer that runs out of recorded
choices returns ``None``. ``FuzzerError`` is reserved for generator-author
bugs and unsatisfiable constraints, and must surface as a test error.
"""

from __future__ import annotations

import logging

__all__ = ["FuzzerError", "fuzzer_error"]

logger = logging.getLogger(__name__)


class FuzzerError(RuntimeError):
    """Raised when a combinator cannot honour its contract."""

    def __init__(self, combinator: str, message: str):
        self.combinator = combinator
        self.message = message
        super().__init__(f"{combinator}: {message}")


def fuzzer_error(combinator: str, message: str) -> FuzzerError:
    """Log and build a ``FuzzerError``; callers ``raise`` the result."""
    logger.error("[FUZZ] %s failed: %s", combinator, message)
    return FuzzerError(combinator, message)
