"""
Combinator algebra over fuzzers.

A fuzzer is a function ``PRNG -> Optional[(PRNG, value)]``. Every
combinator here composes fuzzers sequentially, threading the state from
one step to the next; a ``None`` from any step makes the whole composite
return ``None``.

Evaluation order is strictly left to right. It is part of the replay
contract: the same fuzzer replayed against the same log must perform the
same draws in the same order.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Sequence, Tuple, TypeVar

from fuzz.config import get_config
from fuzz.errors import fuzzer_error
from fuzz.prng import BYTE_DOMAIN, PRNG, Fuzzer, rand

__all__ = [
    "and_then",
    "constant",
    "either",
    "either3",
    "either4",
    "either5",
    "either6",
    "either7",
    "either8",
    "either9",
    "fail",
    "map",
    "map2",
    "map3",
    "map4",
    "map5",
    "map6",
    "map7",
    "map8",
    "map9",
    "option",
    "such_that",
    "tuple2",
    "tuple3",
    "tuple4",
    "tuple5",
    "tuple6",
    "tuple7",
    "tuple8",
    "tuple9",
]

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")


# ---------------------------------------------------------------------------
# Basics
# ---------------------------------------------------------------------------


def constant(value: T) -> Fuzzer[T]:
    """Fuzzer producing ``value`` without drawing anything."""

    def run(prng: PRNG) -> Optional[Tuple[PRNG, T]]:
        return prng, value

    return run


def fail() -> Fuzzer[Any]:
    """Fuzzer that always exhausts."""

    def run(prng: PRNG) -> None:
        return None

    return run


def map(fuzzer: Fuzzer[T], f: Callable[[T], U]) -> Fuzzer[U]:
    """Transform the produced value; draws are those of ``fuzzer``."""

    def run(prng: PRNG) -> Optional[Tuple[PRNG, U]]:
        step = fuzzer(prng)
        if step is None:
            return None
        prng, value = step
        return prng, f(value)

    return run


def and_then(fuzzer: Fuzzer[T], f: Callable[[T], Fuzzer[U]]) -> Fuzzer[U]:
    """Monadic bind: the produced value selects the next fuzzer."""

    def run(prng: PRNG) -> Optional[Tuple[PRNG, U]]:
        step = fuzzer(prng)
        if step is None:
            return None
        prng, value = step
        return f(value)(prng)

    return run


# ---------------------------------------------------------------------------
# N-ary mapping
# ---------------------------------------------------------------------------


def _map_n(fuzzers: Sequence[Fuzzer[Any]], f: Callable[..., U]) -> Fuzzer[U]:
    fuzzers = tuple(fuzzers)

    def run(prng: PRNG) -> Optional[Tuple[PRNG, U]]:
        values = []
        for fuzzer in fuzzers:
            step = fuzzer(prng)
            if step is None:
                return None
            prng, value = step
            values.append(value)
        return prng, f(*values)

    return run


def map2(a: Fuzzer[Any], b: Fuzzer[Any], f: Callable[..., U]) -> Fuzzer[U]:
    return _map_n((a, b), f)


def map3(a: Fuzzer[Any], b: Fuzzer[Any], c: Fuzzer[Any], f: Callable[..., U]) -> Fuzzer[U]:
    return _map_n((a, b, c), f)


def map4(
    a: Fuzzer[Any],
    b: Fuzzer[Any],
    c: Fuzzer[Any],
    d: Fuzzer[Any],
    f: Callable[..., U],
) -> Fuzzer[U]:
    return _map_n((a, b, c, d), f)


def map5(
    a: Fuzzer[Any],
    b: Fuzzer[Any],
    c: Fuzzer[Any],
    d: Fuzzer[Any],
    e: Fuzzer[Any],
    f: Callable[..., U],
) -> Fuzzer[U]:
    return _map_n((a, b, c, d, e), f)


def map6(
    a: Fuzzer[Any],
    b: Fuzzer[Any],
    c: Fuzzer[Any],
    d: Fuzzer[Any],
    e: Fuzzer[Any],
    g: Fuzzer[Any],
    f: Callable[..., U],
) -> Fuzzer[U]:
    return _map_n((a, b, c, d, e, g), f)


def map7(
    a: Fuzzer[Any],
    b: Fuzzer[Any],
    c: Fuzzer[Any],
    d: Fuzzer[Any],
    e: Fuzzer[Any],
    g: Fuzzer[Any],
    h: Fuzzer[Any],
    f: Callable[..., U],
) -> Fuzzer[U]:
    return _map_n((a, b, c, d, e, g, h), f)


def map8(
    a: Fuzzer[Any],
    b: Fuzzer[Any],
    c: Fuzzer[Any],
    d: Fuzzer[Any],
    e: Fuzzer[Any],
    g: Fuzzer[Any],
    h: Fuzzer[Any],
    i: Fuzzer[Any],
    f: Callable[..., U],
) -> Fuzzer[U]:
    return _map_n((a, b, c, d, e, g, h, i), f)


def map9(
    a: Fuzzer[Any],
    b: Fuzzer[Any],
    c: Fuzzer[Any],
    d: Fuzzer[Any],
    e: Fuzzer[Any],
    g: Fuzzer[Any],
    h: Fuzzer[Any],
    i: Fuzzer[Any],
    j: Fuzzer[Any],
    f: Callable[..., U],
) -> Fuzzer[U]:
    return _map_n((a, b, c, d, e, g, h, i, j), f)


def _as_tuple(*values: Any) -> Tuple[Any, ...]:
    return values


def tuple2(a: Fuzzer[Any], b: Fuzzer[Any]) -> Fuzzer[Tuple[Any, Any]]:
    return _map_n((a, b), _as_tuple)


def tuple3(a: Fuzzer[Any], b: Fuzzer[Any], c: Fuzzer[Any]) -> Fuzzer[Tuple[Any, ...]]:
    return _map_n((a, b, c), _as_tuple)


def tuple4(
    a: Fuzzer[Any],
    b: Fuzzer[Any],
    c: Fuzzer[Any],
    d: Fuzzer[Any],
) -> Fuzzer[Tuple[Any, ...]]:
    return _map_n((a, b, c, d), _as_tuple)


def tuple5(
    a: Fuzzer[Any],
    b: Fuzzer[Any],
    c: Fuzzer[Any],
    d: Fuzzer[Any],
    e: Fuzzer[Any],
) -> Fuzzer[Tuple[Any, ...]]:
    return _map_n((a, b, c, d, e), _as_tuple)


def tuple6(
    a: Fuzzer[Any],
    b: Fuzzer[Any],
    c: Fuzzer[Any],
    d: Fuzzer[Any],
    e: Fuzzer[Any],
    g: Fuzzer[Any],
) -> Fuzzer[Tuple[Any, ...]]:
    return _map_n((a, b, c, d, e, g), _as_tuple)


def tuple7(
    a: Fuzzer[Any],
    b: Fuzzer[Any],
    c: Fuzzer[Any],
    d: Fuzzer[Any],
    e: Fuzzer[Any],
    g: Fuzzer[Any],
    h: Fuzzer[Any],
) -> Fuzzer[Tuple[Any, ...]]:
    return _map_n((a, b, c, d, e, g, h), _as_tuple)


def tuple8(
    a: Fuzzer[Any],
    b: Fuzzer[Any],
    c: Fuzzer[Any],
    d: Fuzzer[Any],
    e: Fuzzer[Any],
    g: Fuzzer[Any],
    h: Fuzzer[Any],
    i: Fuzzer[Any],
) -> Fuzzer[Tuple[Any, ...]]:
    return _map_n((a, b, c, d, e, g, h, i), _as_tuple)


def tuple9(
    a: Fuzzer[Any],
    b: Fuzzer[Any],
    c: Fuzzer[Any],
    d: Fuzzer[Any],
    e: Fuzzer[Any],
    g: Fuzzer[Any],
    h: Fuzzer[Any],
    i: Fuzzer[Any],
    j: Fuzzer[Any],
) -> Fuzzer[Tuple[Any, ...]]:
    return _map_n((a, b, c, d, e, g, h, i, j), _as_tuple)


# ---------------------------------------------------------------------------
# Alternation
# ---------------------------------------------------------------------------


def _either_n(branches: Sequence[Fuzzer[Any]]) -> Fuzzer[Any]:
    """Pick a branch from one draw.

    Branch ``i`` owns the bytes ``n`` with ``n * N // 256 == i``: contiguous
    ranges whose widths differ by at most one.
    """
    branches = tuple(branches)
    arity = len(branches)
    draw = rand()

    def run(prng: PRNG) -> Optional[Tuple[PRNG, Any]]:
        step = draw(prng)
        if step is None:
            return None
        prng, n = step
        return branches[n * arity // BYTE_DOMAIN](prng)

    return run


def either(left: Fuzzer[T], right: Fuzzer[U]) -> Fuzzer[Any]:
    """Equal-probability choice; bytes below 128 select ``left``."""
    return _either_n((left, right))


def either3(a: Fuzzer[Any], b: Fuzzer[Any], c: Fuzzer[Any]) -> Fuzzer[Any]:
    return _either_n((a, b, c))


def either4(a: Fuzzer[Any], b: Fuzzer[Any], c: Fuzzer[Any], d: Fuzzer[Any]) -> Fuzzer[Any]:
    return _either_n((a, b, c, d))


def either5(
    a: Fuzzer[Any],
    b: Fuzzer[Any],
    c: Fuzzer[Any],
    d: Fuzzer[Any],
    e: Fuzzer[Any],
) -> Fuzzer[Any]:
    return _either_n((a, b, c, d, e))


def either6(
    a: Fuzzer[Any],
    b: Fuzzer[Any],
    c: Fuzzer[Any],
    d: Fuzzer[Any],
    e: Fuzzer[Any],
    f: Fuzzer[Any],
) -> Fuzzer[Any]:
    return _either_n((a, b, c, d, e, f))


def either7(
    a: Fuzzer[Any],
    b: Fuzzer[Any],
    c: Fuzzer[Any],
    d: Fuzzer[Any],
    e: Fuzzer[Any],
    f: Fuzzer[Any],
    g: Fuzzer[Any],
) -> Fuzzer[Any]:
    return _either_n((a, b, c, d, e, f, g))


def either8(
    a: Fuzzer[Any],
    b: Fuzzer[Any],
    c: Fuzzer[Any],
    d: Fuzzer[Any],
    e: Fuzzer[Any],
    f: Fuzzer[Any],
    g: Fuzzer[Any],
    h: Fuzzer[Any],
) -> Fuzzer[Any]:
    return _either_n((a, b, c, d, e, f, g, h))


def either9(
    a: Fuzzer[Any],
    b: Fuzzer[Any],
    c: Fuzzer[Any],
    d: Fuzzer[Any],
    e: Fuzzer[Any],
    f: Fuzzer[Any],
    g: Fuzzer[Any],
    h: Fuzzer[Any],
    i: Fuzzer[Any],
) -> Fuzzer[Any]:
    return _either_n((a, b, c, d, e, f, g, h, i))


def option(fuzzer: Fuzzer[T]) -> Fuzzer[Optional[T]]:
    """``None`` or a value of ``fuzzer``, with equal probability."""
    return either(constant(None), fuzzer)


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------


def such_that(
    fuzzer: Fuzzer[T],
    predicate: Callable[[T], bool],
    max_attempts: Optional[int] = None,
) -> Fuzzer[T]:
    """Retry ``fuzzer`` until ``predicate`` holds.

    Rejected attempts stay in the choice log, so replay retraces them.
    Running out of attempts raises ``FuzzerError``: constrain the
    underlying fuzzer instead of filtering most of its output away.

    Args:
        fuzzer: Source of candidate values
        predicate: Acceptance test
        max_attempts: Retry budget (defaults to ``such_that_max_attempts``)

    Returns:
        Fuzzer producing the first accepted value
    """
    attempts = max_attempts if max_attempts is not None else get_config().such_that_max_attempts
    if attempts <= 0:
        raise fuzzer_error("such_that", f"max_attempts must be >0, got {attempts}")

    def run(prng: PRNG) -> Optional[Tuple[PRNG, T]]:
        for attempt in range(attempts):
            step = fuzzer(prng)
            if step is None:
                return None
            prng, value = step
            if predicate(value):
                if attempt * 2 > attempts:
                    logger.warning(
                        "such_that accepted a value after %d of %d attempts", attempt + 1, attempts
                    )
                return prng, value
        raise fuzzer_error(
            "such_that", f"no value satisfied the predicate after {attempts} attempts"
        )

    return run
