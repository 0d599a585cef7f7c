"""
Entry points for an external test runner.

The runner owns seeding, shrinking and reporting. These helpers only
build the initial state, run a fuzzer against it and hand back the final
state so its ``choices`` can be stored and replayed later.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple, TypeVar, Union

from fuzz.errors import fuzzer_error
from fuzz.prng import PRNG, Fuzzer, Replayed, Seeded, blake2b_256

__all__ = ["generate", "replay", "sample"]

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _run_fresh(fuzzer: Fuzzer[T], state: Seeded) -> Tuple[PRNG, T]:
    step = fuzzer(state)
    if step is None:
        # The entropy source never runs dry, so this is a fuzzer bug.
        raise fuzzer_error("generate", "fuzzer exhausted while generating from a fresh seed")
    return step


def generate(
    fuzzer: Fuzzer[T],
    seed: Union[int, str, bytes],
    mix: Callable[[bytes], bytes] = blake2b_256,
) -> Tuple[PRNG, T]:
    """Run ``fuzzer`` once from a fresh seed.

    Args:
        fuzzer: Fuzzer to run
        seed: Seed material (see ``seed_from``)
        mix: One-way mixing function for the entropy source

    Returns:
        ``(final_state, value)``; ``final_state.choices`` replays ``value``
    """
    return _run_fresh(fuzzer, Seeded.create(seed, mix))


def replay(fuzzer: Fuzzer[T], choices: bytes) -> Optional[Tuple[PRNG, T]]:
    """Run ``fuzzer`` against a recorded (possibly edited) choice log.

    Returns ``None`` when the log is not a valid replay of ``fuzzer``.
    """
    state = Replayed.from_choices(choices)
    step = fuzzer(state)
    if step is None:
        logger.debug("replay of %d recorded choices exhausted", len(state.choices))
    return step


def sample(
    fuzzer: Fuzzer[T],
    seed: Union[int, str, bytes],
    count: int,
    mix: Callable[[bytes], bytes] = blake2b_256,
) -> List[T]:
    """Generate ``count`` values.

    Each case starts with an empty log from the seed where the previous
    case stopped, so the sequence is fully determined by ``seed``.
    """
    state = Seeded.create(seed, mix)
    values: List[T] = []
    for _ in range(count):
        final, value = _run_fresh(fuzzer, state)
        values.append(value)
        state = Seeded(seed=final.seed, choices=b"", mix=mix)
    return values
