"""
Scalar fuzzers: bytes, booleans, integers and byte strings.

All arithmetic is on integers. A draw is one byte; ``BYTE_DOMAIN`` (256)
is the size of its domain.
"""

from __future__ import annotations

from typing import Optional, Tuple

from fuzz.combinators import and_then, constant, map, map2
from fuzz.errors import fuzzer_error
from fuzz.prng import BYTE_DOMAIN, PRNG, Fuzzer, blake2b_256, rand

__all__ = [
    "BLOCK_SIZE",
    "boolean",
    "byte",
    "byte_string",
    "byte_string_between",
    "byte_string_fixed",
    "int_at_least",
    "int_at_most",
    "int_between",
    "integer",
]

BLOCK_SIZE = 32
ZERO_BLOCK = bytes(BLOCK_SIZE)

# Bucket boundaries of ``integer()`` over the first byte.
SMALL_POSITIVE_END = 128
ZERO_END = 132
NEGATIVE_END = 192

SINGLE_BYTE_CEILING = BYTE_DOMAIN - 1
AT_LEAST_SPREAD = 5

_draw = rand()


def byte() -> Fuzzer[int]:
    """One raw draw in ``[0, 255]``."""
    return _draw


def boolean() -> Fuzzer[bool]:
    """``True`` for the upper half of the byte domain."""
    return map(_draw, lambda n: n >= BYTE_DOMAIN // 2)


def _bits(count: int) -> Fuzzer[int]:
    """Draw exactly ``count`` bits, most significant byte first.

    Each draw contributes ``min(8, remaining)`` bits; the last byte is
    truncated modulo ``2 ** remaining``.
    """

    def run(prng: PRNG) -> Optional[Tuple[PRNG, int]]:
        value = 0
        left = count
        while left > 0:
            step = _draw(prng)
            if step is None:
                return None
            prng, n = step
            width = min(8, left)
            value = (value << width) | (n % (1 << width))
            left -= width
        return prng, value

    return run


def int_between(min_value: int, max_value: int) -> Fuzzer[int]:
    """Uniform-ish integer in ``[min_value, max_value]``, both inclusive.

    With ``range = max - min + 1`` and ``threshold`` the largest power of
    two not above ``range``, one byte ``n`` decides between the low part
    ``[0, threshold)`` (taken when ``n * range <= 256 * threshold``, then
    filled with exactly ``log2(threshold)`` bits) and the remainder
    ``[threshold, range)``, which is sampled the same way. No floating
    point and no modulo bias on the power-of-two part.

    Args:
        min_value: Lower bound
        max_value: Upper bound (swapped with ``min_value`` if smaller)

    Returns:
        Fuzzer of integers within the bounds
    """
    if min_value > max_value:
        min_value, max_value = max_value, min_value
    if min_value == max_value:
        return constant(min_value)

    full_span = max_value - min_value + 1

    def run(prng: PRNG) -> Optional[Tuple[PRNG, int]]:
        offset = min_value
        span = full_span
        # Each remainder step strips the top bit of span; a span of 1 is a constant.
        while span > 1:
            step = _draw(prng)
            if step is None:
                return None
            prng, n = step
            k = span.bit_length() - 1
            threshold = 1 << k
            if span == threshold or n * span <= BYTE_DOMAIN * threshold:
                step = _bits(k)(prng)
                if step is None:
                    return None
                prng, low = step
                return prng, offset + low
            offset += threshold
            span -= threshold
        return prng, offset

    return run


def int_at_least(min_value: int) -> Fuzzer[int]:
    """Integer ``>= min_value``, magnitude loosely proportional to the bound."""
    bound = abs(min_value)
    if bound > SINGLE_BYTE_CEILING:
        return int_between(min_value, min_value + AT_LEAST_SPREAD * bound)
    return map(_draw, lambda n: min_value + n)


def int_at_most(max_value: int) -> Fuzzer[int]:
    """Integer ``<= max_value``, mirror image of ``int_at_least``."""
    bound = abs(max_value)
    if bound > SINGLE_BYTE_CEILING:
        return int_between(max_value - AT_LEAST_SPREAD * bound, max_value)
    return map(_draw, lambda n: max_value - n)


def _integer(prng: PRNG) -> Optional[Tuple[PRNG, int]]:
    step = _draw(prng)
    if step is None:
        return None
    prng, head = step
    if head < SMALL_POSITIVE_END:
        return prng, head
    if head < ZERO_END:
        return prng, 0
    step = _draw(prng)
    if step is None:
        return None
    prng, tail = step
    if head < NEGATIVE_END:
        return prng, -tail
    return prng, ((head - NEGATIVE_END) << 8) + tail


def integer() -> Fuzzer[int]:
    """Integer skewed towards small magnitudes.

    First byte ``b0``:

    - ``b0 < 128``: ``b0``
    - ``128 <= b0 < 132``: ``0``
    - ``132 <= b0 < 192``: ``-b1`` for a second byte ``b1``
    - ``b0 >= 192``: ``(b0 - 192) * 256 + b1``

    Values stay within ``[-255, 16383]``.
    """
    return _integer


def _block(a: int, b: int) -> bytes:
    if a == 0 and b == 0:
        return ZERO_BLOCK
    return blake2b_256(bytes((a, b)))


def byte_string() -> Fuzzer[bytes]:
    """A 32-byte block derived from two draws.

    Two zero draws give the all-zero block; anything else is mixed through
    BLAKE2b-256.
    """
    return map2(_draw, _draw, _block)


def byte_string_fixed(length: int) -> Fuzzer[bytes]:
    """Exactly ``length`` bytes, one 32-byte block per started chunk."""
    if length < 0:
        raise fuzzer_error("byte_string_fixed", f"length must be >=0, got {length}")
    block = byte_string()

    def run(prng: PRNG) -> Optional[Tuple[PRNG, bytes]]:
        chunks = []
        left = length
        while left > 0:
            step = block(prng)
            if step is None:
                return None
            prng, chunk = step
            chunks.append(chunk[:left])
            left -= BLOCK_SIZE
        return prng, b"".join(chunks)

    return run


def byte_string_between(min_length: int, max_length: int) -> Fuzzer[bytes]:
    """Byte string whose length is drawn with ``int_between``."""
    if min_length < 0 or max_length < 0:
        raise fuzzer_error(
            "byte_string_between",
            f"bounds must be >=0, got [{min_length}, {max_length}]",
        )
    return and_then(int_between(min_length, max_length), byte_string_fixed)
