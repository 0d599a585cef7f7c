"""
Entropy source for fuzzers.

A generator state is one of two variants:

- ``Seeded``: fresh generation. The seed is mixed forward by a one-way
  function on every draw, and each drawn byte is prepended to ``choices``.
- ``Replayed``: replay of a recorded choice log. ``cursor`` counts the
  bytes not yet consumed, measured from the end of ``choices``.

Because a Seeded log is built by prepending, the first drawn byte sits at
the last position of the buffer. Replay therefore consumes from the end
towards the start, and a log captured from a Seeded run can be handed to
``Replayed.from_choices`` unchanged.

States are immutable: every draw returns a new state.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple, TypeVar, Union

from fuzz.errors import fuzzer_error

__all__ = [
    "BYTE_DOMAIN",
    "Fuzzer",
    "PRNG",
    "Replayed",
    "Seeded",
    "blake2b_256",
    "choices_of",
    "int_to_hex_seed",
    "rand",
    "remaining",
    "seed_from",
    "with_choice",
]

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Number of distinct values a single draw can take.
BYTE_DOMAIN = 256


def blake2b_256(data: bytes) -> bytes:
    """Default one-way mixing function (BLAKE2b with a 32-byte digest)."""
    return hashlib.blake2b(data, digest_size=32).digest()


def int_to_hex_seed(seed: int) -> str:
    """Convert integer seed to hex string.

    Args:
        seed: Non-negative integer seed

    Returns:
        Zero-padded hex string representation
    """
    return f"{seed:016x}"


def seed_from(seed: Union[int, str, bytes]) -> bytes:
    """Derive a 32-byte seed from an integer, string or byte string.

    Integers go through ``int_to_hex_seed`` first, so ``12345`` and
    ``"0000000000003039"`` yield the same seed.

    Args:
        seed: Seed material

    Returns:
        32 bytes suitable for ``Seeded.seed``
    """
    if isinstance(seed, bool):
        raise fuzzer_error("seed_from", "boolean seeds are not accepted")
    if isinstance(seed, int):
        if seed < 0:
            raise fuzzer_error("seed_from", f"integer seed must be >= 0, got {seed}")
        seed = int_to_hex_seed(seed)
    if isinstance(seed, str):
        seed = seed.encode("utf-8")
    if not isinstance(seed, (bytes, bytearray)):
        raise fuzzer_error("seed_from", f"unsupported seed type {type(seed).__name__}")
    return blake2b_256(bytes(seed))


@dataclass(frozen=True, slots=True)
class Seeded:
    """Fresh-generation state.

    ``mix`` must return a non-empty byte string; only its first byte is
    ever used as a draw.
    """

    seed: bytes
    choices: bytes = b""
    mix: Callable[[bytes], bytes] = field(default=blake2b_256, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.seed:
            raise fuzzer_error("Seeded", "seed must be a non-empty byte string")

    @classmethod
    def create(
        cls,
        seed: Union[int, str, bytes],
        mix: Callable[[bytes], bytes] = blake2b_256,
    ) -> "Seeded":
        """Build a fresh state with an empty choice log."""
        return cls(seed=seed_from(seed), choices=b"", mix=mix)


@dataclass(frozen=True, slots=True)
class Replayed:
    """Replay state over an immutable choice log."""

    choices: bytes
    cursor: int

    def __post_init__(self) -> None:
        if not 0 <= self.cursor <= len(self.choices):
            raise fuzzer_error(
                "Replayed",
                f"cursor must be within [0, {len(self.choices)}], got {self.cursor}",
            )

    @classmethod
    def from_choices(cls, choices: bytes) -> "Replayed":
        """Wrap a recorded log so that replay starts with its first draw."""
        choices = bytes(choices)
        return cls(choices=choices, cursor=len(choices))


PRNG = Union[Seeded, Replayed]

Fuzzer = Callable[[PRNG], Optional[Tuple[PRNG, T]]]


def choices_of(prng: PRNG) -> bytes:
    """Return the choice log carried by ``prng``."""
    return prng.choices


def remaining(prng: PRNG) -> Optional[int]:
    """Number of unconsumed bytes of a Replayed state; ``None`` when Seeded."""
    if isinstance(prng, Replayed):
        return prng.cursor
    return None


def _draw(prng: PRNG) -> Optional[Tuple[PRNG, int]]:
    if isinstance(prng, Seeded):
        choice = prng.seed[0]
        return (
            Seeded(seed=prng.mix(prng.seed), choices=bytes((choice,)) + prng.choices, mix=prng.mix),
            choice,
        )
    if prng.cursor >= 1:
        cursor = prng.cursor - 1
        return Replayed(choices=prng.choices, cursor=cursor), prng.choices[cursor]
    return None


def rand() -> Fuzzer[int]:
    """Fuzzer drawing one raw byte in ``[0, 255]``."""
    return _draw


def with_choice(choice: int) -> Fuzzer[int]:
    """Pin a structurally implied value into the choice log.

    In Seeded mode ``choice`` is recorded without advancing the seed. In
    Replayed mode the next logged byte must equal ``choice``; a mismatch
    means the log was edited at a structural position and the fuzzer
    exhausts.

    Args:
        choice: Byte value in ``[0, 255]``

    Returns:
        Fuzzer producing ``choice``
    """
    if not 0 <= choice < BYTE_DOMAIN:
        raise fuzzer_error("with_choice", f"pinned choice must be a byte, got {choice}")

    def pinned(prng: PRNG) -> Optional[Tuple[PRNG, int]]:
        if isinstance(prng, Seeded):
            return (
                Seeded(seed=prng.seed, choices=bytes((choice,)) + prng.choices, mix=prng.mix),
                choice,
            )
        if prng.cursor >= 1:
            cursor = prng.cursor - 1
            if prng.choices[cursor] == choice:
                return Replayed(choices=prng.choices, cursor=cursor), choice
            logger.debug(
                "pinned choice mismatch at cursor %d: expected %d, found %d",
                cursor,
                choice,
                prng.choices[cursor],
            )
        return None

    return pinned
