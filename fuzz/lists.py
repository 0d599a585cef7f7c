"""
Collection fuzzers.

Lengths are not chosen up front. Before each element a single decision
byte says whether to continue; the byte is pinned (``with_choice``) while
the length is still below ``min`` and once it reaches ``max``, so that an
edited log cannot silently break the length bounds. Between the bounds,
with ``p = max - min`` and ``q = floor(log2(p))``, a draw ``n`` continues
iff ``n * (p + q) < 256 * p``. The per-step continuation probability
``p / (p + q)`` approximates ``(1 / (p + 1)) ** (1 / p)``, so reaching
``max`` has probability about ``1 / (p + 1)`` and short collections
dominate.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple, TypeVar

from fuzz.combinators import map
from fuzz.config import get_config
from fuzz.errors import fuzzer_error
from fuzz.prng import BYTE_DOMAIN, PRNG, Fuzzer, rand, with_choice
from fuzz.scalars import int_between

__all__ = [
    "CONTINUE_CHOICE",
    "STOP_CHOICE",
    "list_at_least",
    "list_at_most",
    "list_between",
    "list_of",
    "one_of",
    "set_at_least",
    "set_at_most",
    "set_between",
    "set_of",
    "sublist",
    "subset",
]

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONTINUE_CHOICE = 0
STOP_CHOICE = 255

_draw = rand()
_pin_continue = with_choice(CONTINUE_CHOICE)
_pin_stop = with_choice(STOP_CHOICE)


def _continuation_weight(p: int) -> int:
    """``q`` term of the continuation test; ``p == 1`` uses the sentinel 1."""
    q = p.bit_length() - 1
    return q if q > 0 else 1


def _normalize_bounds(min_len: int, max_len: int) -> Tuple[int, int]:
    if min_len > max_len:
        min_len, max_len = max_len, min_len
    return max(min_len, 0), max(max_len, 0)


def _grow(
    next_element: Callable[[List[Any]], Fuzzer[Any]],
    min_len: int,
    max_len: int,
) -> Fuzzer[List[Any]]:
    p = max_len - min_len
    q = _continuation_weight(p) if p > 0 else 0

    def run(prng: PRNG) -> Optional[Tuple[PRNG, List[Any]]]:
        items: List[Any] = []
        while True:
            length = len(items)
            if length < min_len:
                step = _pin_continue(prng)
                if step is None:
                    return None
                prng = step[0]
            elif length == max_len:
                step = _pin_stop(prng)
                if step is None:
                    return None
                return step[0], items
            else:
                step = _draw(prng)
                if step is None:
                    return None
                prng, n = step
                if n * (p + q) >= BYTE_DOMAIN * p:
                    return prng, items
            step = next_element(items)(prng)
            if step is None:
                return None
            prng, item = step
            items.append(item)

    return run


def list_between(fuzzer: Fuzzer[T], min_len: int, max_len: int) -> Fuzzer[List[T]]:
    """List of ``fuzzer`` values with ``min_len <= len <= max_len``.

    Args:
        fuzzer: Element fuzzer
        min_len: Minimum length (negative values are clamped to 0)
        max_len: Maximum length (swapped with ``min_len`` if smaller)

    Returns:
        Fuzzer of lists skewed towards short lengths
    """
    min_len, max_len = _normalize_bounds(min_len, max_len)
    return _grow(lambda items: fuzzer, min_len, max_len)


def list_at_least(fuzzer: Fuzzer[T], min_len: int) -> Fuzzer[List[T]]:
    return list_between(fuzzer, min_len, max(min_len, 0) + get_config().default_list_max)


def list_at_most(fuzzer: Fuzzer[T], max_len: int) -> Fuzzer[List[T]]:
    return list_between(fuzzer, 0, max_len)


def list_of(fuzzer: Fuzzer[T]) -> Fuzzer[List[T]]:
    return list_between(fuzzer, 0, get_config().default_list_max)


def _fresh(fuzzer: Fuzzer[T], seen: List[T], attempts: int) -> Fuzzer[T]:
    """Draw from ``fuzzer`` until a value not in ``seen`` comes out."""

    def run(prng: PRNG) -> Optional[Tuple[PRNG, T]]:
        for attempt in range(attempts):
            step = fuzzer(prng)
            if step is None:
                return None
            prng, value = step
            if value not in seen:
                if attempt * 2 > attempts:
                    logger.warning(
                        "set_between found a fresh element after %d of %d attempts",
                        attempt + 1,
                        attempts,
                    )
                return prng, value
        raise fuzzer_error(
            "set_between",
            f"no fresh element after {attempts} attempts with {len(seen)} distinct elements; "
            "the element fuzzer does not have enough entropy for the requested size",
        )

    return run


def set_between(
    fuzzer: Fuzzer[T],
    min_len: int,
    max_len: int,
    max_attempts: Optional[int] = None,
) -> Fuzzer[List[T]]:
    """Pairwise-distinct values, in draw order, with a bounded size.

    Same length distribution as ``list_between``. Each element is retried
    up to ``max_attempts`` times (default ``set_max_attempts``) until it
    differs from the elements already chosen; running out raises
    ``FuzzerError``.
    """
    attempts = max_attempts if max_attempts is not None else get_config().set_max_attempts
    if attempts <= 0:
        raise fuzzer_error("set_between", f"max_attempts must be >0, got {attempts}")
    min_len, max_len = _normalize_bounds(min_len, max_len)
    return _grow(lambda items: _fresh(fuzzer, items, attempts), min_len, max_len)


def set_at_least(fuzzer: Fuzzer[T], min_len: int) -> Fuzzer[List[T]]:
    return set_between(fuzzer, min_len, max(min_len, 0) + get_config().default_list_max)


def set_at_most(fuzzer: Fuzzer[T], max_len: int) -> Fuzzer[List[T]]:
    return set_between(fuzzer, 0, max_len)


def set_of(fuzzer: Fuzzer[T]) -> Fuzzer[List[T]]:
    return set_between(fuzzer, 0, get_config().default_list_max)


def one_of(xs: Iterable[T]) -> Fuzzer[T]:
    """Pick one element of a non-empty collection."""
    items = tuple(xs)
    if not items:
        raise fuzzer_error("one_of", "cannot pick from an empty collection")
    return map(int_between(0, len(items) - 1), items.__getitem__)


def sublist(xs: Iterable[T]) -> Fuzzer[List[T]]:
    """Order-preserving subsequence of ``xs``.

    One threshold byte ``t`` is drawn, then one byte per element; an
    element is kept iff its byte is below ``t``.
    """
    items = tuple(xs)

    def run(prng: PRNG) -> Optional[Tuple[PRNG, List[T]]]:
        step = _draw(prng)
        if step is None:
            return None
        prng, threshold = step
        kept: List[T] = []
        for item in items:
            step = _draw(prng)
            if step is None:
                return None
            prng, n = step
            if n < threshold:
                kept.append(item)
        return prng, kept

    return run


def _distinct(xs: Sequence[T]) -> List[T]:
    unique: List[T] = []
    for item in xs:
        if item not in unique:
            unique.append(item)
    return unique


def subset(xs: Iterable[T]) -> Fuzzer[List[T]]:
    """``sublist`` over the distinct elements of ``xs``."""
    return sublist(_distinct(tuple(xs)))
