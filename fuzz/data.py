"""
Structured values: a generic tagged union for opaque payloads.

A value is one of:

- ``int``
- ``bytes``
- ``Constr(index, fields)``: tagged constructor; booleans are
  ``Constr(0)`` (false) and ``Constr(1)`` (true)
- ``DataList(items)``
- ``DataMap(pairs)``: association list, keys may repeat

All variants are immutable and hashable, so values can be used with
``set_between``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

from fuzz.combinators import either3, either6, map, map2, tuple2
from fuzz.config import get_config
from fuzz.lists import list_between
from fuzz.prng import Fuzzer
from fuzz.scalars import boolean, byte, byte_string_between, integer

__all__ = [
    "Constr",
    "Data",
    "DataList",
    "DataMap",
    "FALSE",
    "TRUE",
    "MAX_LEAF_BYTES",
    "data",
    "depth_of",
    "from_bool",
]

MAX_LEAF_BYTES = 64


@dataclass(frozen=True)
class Constr:
    index: int
    fields: Tuple["Data", ...] = ()


@dataclass(frozen=True)
class DataList:
    items: Tuple["Data", ...] = ()


@dataclass(frozen=True)
class DataMap:
    pairs: Tuple[Tuple["Data", "Data"], ...] = ()


Data = Union[int, bytes, Constr, DataList, DataMap]

FALSE = Constr(0)
TRUE = Constr(1)


def from_bool(flag: bool) -> Constr:
    return TRUE if flag else FALSE


def _to_list(items: Sequence[Data]) -> DataList:
    return DataList(tuple(items))


def _to_map(pairs: Sequence[Tuple[Data, Data]]) -> DataMap:
    return DataMap(tuple(pairs))


def _to_constr(index: int, fields: Sequence[Data]) -> Constr:
    return Constr(index, tuple(fields))


def data(max_depth: Optional[int] = None, max_children: Optional[int] = None) -> Fuzzer[Data]:
    """Fuzzer of structured values nested at most ``max_depth`` levels.

    One byte picks the variant. At depth 0 only leaves (int, bytes,
    boolean) are possible; above that, lists, maps and constructors hold
    up to ``max_children`` children built one level shallower, so the
    recursion always terminates.

    Args:
        max_depth: Nesting fuel (defaults to ``data_max_depth``)
        max_children: Maximum children per node (defaults to ``data_max_children``)

    Returns:
        Fuzzer of ``Data`` values
    """
    config = get_config()
    depth = config.data_max_depth if max_depth is None else max_depth
    width = config.data_max_children if max_children is None else max_children

    leaf_int = integer()
    leaf_bytes = byte_string_between(0, MAX_LEAF_BYTES)
    leaf_bool = map(boolean(), from_bool)
    if depth <= 0:
        return either3(leaf_int, leaf_bytes, leaf_bool)

    child = data(depth - 1, width)
    children = list_between(child, 0, width)
    return either6(
        leaf_int,
        leaf_bytes,
        leaf_bool,
        map(children, _to_list),
        map(list_between(tuple2(child, child), 0, width), _to_map),
        map2(byte(), children, _to_constr),
    )


def depth_of(value: Data) -> int:
    """Nesting depth of ``value``; leaves have depth 0."""
    if isinstance(value, Constr):
        inner = value.fields
    elif isinstance(value, DataList):
        inner = value.items
    elif isinstance(value, DataMap):
        inner = tuple(item for pair in value.pairs for item in pair)
    else:
        return 0
    # Empty containers and booleans count as leaves.
    if not inner:
        return 0
    return 1 + max(depth_of(item) for item in inner)
