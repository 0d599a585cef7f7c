"""
Labelling side channel.

Labels are free-text tags attached to a generated case so that a runner
can report how generated values are distributed. Recording a label never
draws from the entropy source and never changes a produced value.

Labels go to the collector installed by ``collect_labels()`` in the
current context, and are logged at DEBUG level. Without a collector they
are only logged.
"""

from __future__ import annotations

import logging
from collections import Counter
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, Optional, TypeVar

from fuzz.combinators import map
from fuzz.prng import Fuzzer

__all__ = [
    "LabelCollector",
    "collect_labels",
    "label",
    "label_if",
    "label_when",
    "labelled",
]

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class LabelCollector:
    """Counts labels recorded while it is active."""

    counts: Counter = field(default_factory=Counter)

    def record(self, text: str) -> None:
        self.counts[text] += 1

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def fractions(self) -> Dict[str, float]:
        """Share of each label among all recorded labels, sorted by label."""
        total = self.total
        if total == 0:
            return {}
        return {text: self.counts[text] / total for text in sorted(self.counts)}

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "total": self.total,
            "counts": dict(sorted(self.counts.items())),
            "fractions": self.fractions(),
        }


_active: ContextVar[Optional[LabelCollector]] = ContextVar("fuzz_label_collector", default=None)


@contextmanager
def collect_labels() -> Iterator[LabelCollector]:
    """Install a fresh ``LabelCollector`` for the duration of the block."""
    collector = LabelCollector()
    token = _active.set(collector)
    try:
        yield collector
    finally:
        _active.reset(token)


def label(text: str) -> None:
    """Record ``text`` for the current case."""
    logger.debug("label: %s", text)
    collector = _active.get()
    if collector is not None:
        collector.record(text)


def label_if(condition: bool, text: str) -> None:
    if condition:
        label(text)


def label_when(condition: bool, yes: str, no: str) -> None:
    label(yes if condition else no)


def labelled(fuzzer: Fuzzer[T], classify: Callable[[T], str]) -> Fuzzer[T]:
    """Label every value produced by ``fuzzer`` with ``classify(value)``."""

    def tag(value: T) -> T:
        label(classify(value))
        return value

    return map(fuzzer, tag)
