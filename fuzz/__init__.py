"""
Property-based test-case generation for Kompact.

Fuzzers are pure functions from a generator state to an optional
``(state, value)`` pair. A fresh run records every byte it draws; the
recorded log replays the same value, and a truncated or edited log either
replays faithfully or exhausts.
"""

from fuzz.combinators import (
    and_then,
    constant,
    either,
    either3,
    either4,
    either5,
    either6,
    either7,
    either8,
    either9,
    fail,
    map,
    map2,
    map3,
    map4,
    map5,
    map6,
    map7,
    map8,
    map9,
    option,
    such_that,
    tuple2,
    tuple3,
    tuple4,
    tuple5,
    tuple6,
    tuple7,
    tuple8,
    tuple9,
)
from fuzz.config import FuzzConfig, get_config, load_config_from_env, reset_config
from fuzz.data import FALSE, TRUE, Constr, Data, DataList, DataMap, data, depth_of
from fuzz.driver import generate, replay, sample
from fuzz.errors import FuzzerError
from fuzz.labels import LabelCollector, collect_labels, label, label_if, label_when, labelled
from fuzz.lists import (
    list_at_least,
    list_at_most,
    list_between,
    list_of,
    one_of,
    set_at_least,
    set_at_most,
    set_between,
    set_of,
    sublist,
    subset,
)
from fuzz.prng import (
    PRNG,
    Fuzzer,
    Replayed,
    Seeded,
    blake2b_256,
    choices_of,
    rand,
    remaining,
    seed_from,
    with_choice,
)
from fuzz.scalars import (
    boolean,
    byte,
    byte_string,
    byte_string_between,
    byte_string_fixed,
    int_at_least,
    int_at_most,
    int_between,
    integer,
)

__all__ = [
    # Entropy source
    "PRNG",
    "Fuzzer",
    "Seeded",
    "Replayed",
    "blake2b_256",
    "choices_of",
    "rand",
    "remaining",
    "seed_from",
    "with_choice",
    # Combinators
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
    # Scalars
    "boolean",
    "byte",
    "byte_string",
    "byte_string_between",
    "byte_string_fixed",
    "int_at_least",
    "int_at_most",
    "int_between",
    "integer",
    # Collections
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
    # Structured values
    "Constr",
    "Data",
    "DataList",
    "DataMap",
    "FALSE",
    "TRUE",
    "data",
    "depth_of",
    # Labels
    "LabelCollector",
    "collect_labels",
    "label",
    "label_if",
    "label_when",
    "labelled",
    # Driver
    "generate",
    "replay",
    "sample",
    # Config & errors
    "FuzzConfig",
    "FuzzerError",
    "get_config",
    "load_config_from_env",
    "reset_config",
]
