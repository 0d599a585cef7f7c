"""
Collection fuzzer tests.

Verifies:
- Length bounds for lists and sets, with pinned bookkeeping choices
- The integer continuation test between the bounds
- Set elements are pairwise distinct; dedup failure is loud
- one_of, sublist and subset selections
"""

import logging

import numpy as np
import pytest
from hypothesis import given
from hypothesis import strategies as st

from fuzz.combinators import constant
from fuzz.driver import generate, replay, sample
from fuzz.errors import FuzzerError
from fuzz.lists import (
    CONTINUE_CHOICE,
    STOP_CHOICE,
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
from fuzz.scalars import boolean, byte, int_between, integer

seeds = st.integers(min_value=0, max_value=2**32)


def is_subsequence(candidate, source):
    it = iter(source)
    return all(any(item == other for other in it) for item in candidate)


class TestListBetween:
    """Bounded lists."""

    @given(st.integers(0, 12), st.integers(0, 12), seeds)
    def test_length_within_bounds(self, a, b, seed):
        _, value = generate(list_between(byte(), a, b), seed)
        assert min(a, b) <= len(value) <= max(a, b)

    @given(seeds)
    def test_exact_length(self, seed):
        _, value = generate(list_between(integer(), 3, 3), seed)
        assert len(value) == 3

    def test_exact_length_log_layout(self, replay_log):
        log = replay_log(
            CONTINUE_CHOICE, 10,
            CONTINUE_CHOICE, 11,
            CONTINUE_CHOICE, 12,
            STOP_CHOICE,
        )

        state, value = list_between(byte(), 3, 3)(log)

        assert value == [10, 11, 12]
        assert state.cursor == 0

    def test_fresh_log_pins_bookkeeping(self):
        final, value = generate(list_between(byte(), 2, 2), 4)

        drawn = list(reversed(final.choices))
        assert drawn[0] == CONTINUE_CHOICE
        assert drawn[2] == CONTINUE_CHOICE
        assert drawn[4] == STOP_CHOICE
        assert drawn[1::2][:2] == value

    def test_corrupted_pin_exhausts(self, replay_log):
        assert list_between(byte(), 1, 1)(replay_log(7, 10, STOP_CHOICE)) is None
        assert list_between(byte(), 1, 1)(replay_log(CONTINUE_CHOICE, 10, 254)) is None

    def test_continuation_threshold(self, replay_log):
        # p = 4, q = 2: continue iff n * 6 < 1024, i.e. n <= 170
        fuzzer = list_between(byte(), 0, 4)

        assert fuzzer(replay_log(170, 9, 171))[1] == [9]
        assert fuzzer(replay_log(171))[1] == []

    def test_one_step_range_stops_half_the_time(self, replay_log):
        fuzzer = list_between(byte(), 0, 1)

        assert fuzzer(replay_log(127, 5, STOP_CHOICE))[1] == [5]
        assert fuzzer(replay_log(128))[1] == []

    def test_negative_min_clamped(self):
        _, value = generate(list_between(byte(), -3, 0), 1)
        assert value == []

    def test_short_lists_dominate(self):
        lengths = np.array([len(xs) for xs in sample(list_between(byte(), 0, 10), "skew", 3000)])

        assert np.mean(lengths <= 5) > np.mean(lengths > 5)
        assert np.mean(lengths == 10) < 0.2

    @given(seeds)
    def test_wrappers_respect_bounds(self, seed):
        assert len(generate(list_at_least(byte(), 4), seed)[1]) >= 4
        assert len(generate(list_at_most(byte(), 4), seed)[1]) <= 4
        assert len(generate(list_of(byte()), seed)[1]) <= 32

    @given(seeds)
    def test_replay_reproduces_list(self, seed):
        fuzzer = list_between(integer(), 0, 8)
        final, value = generate(fuzzer, seed)

        assert replay(fuzzer, final.choices)[1] == value


class TestSetBetween:
    """Bounded sets."""

    @given(st.integers(0, 6), st.integers(0, 6), seeds)
    def test_distinct_and_bounded(self, a, b, seed):
        _, value = generate(set_between(int_between(0, 50), a, b), seed)

        assert min(a, b) <= len(value) <= max(a, b)
        assert len(set(value)) == len(value)

    def test_full_domain(self):
        _, value = generate(set_between(boolean(), 2, 2), 3)
        assert sorted(value) == [False, True]

    def test_duplicates_are_retried(self, replay_log):
        log = replay_log(CONTINUE_CHOICE, 7, CONTINUE_CHOICE, 7, 7, 8, STOP_CHOICE)

        state, value = set_between(byte(), 2, 2)(log)

        assert value == [7, 8]
        assert state.cursor == 0

    def test_not_enough_entropy_is_hard_failure(self):
        with pytest.raises(FuzzerError, match="set_between"):
            generate(set_between(constant(1), 2, 2), 1)

    def test_custom_budget(self):
        calls = []

        def counting(prng):
            calls.append(prng)
            return prng, 1

        with pytest.raises(FuzzerError):
            generate(set_between(counting, 2, 2, max_attempts=3), 1)
        assert len(calls) == 1 + 3

    def test_late_fresh_element_warns(self, replay_log, caplog):
        log = replay_log(CONTINUE_CHOICE, 7, CONTINUE_CHOICE, 7, 7, 8, STOP_CHOICE)

        with caplog.at_level(logging.WARNING, logger="fuzz.lists"):
            _, value = set_between(byte(), 2, 2, max_attempts=3)(log)

        assert value == [7, 8]
        assert "after 3 of 3 attempts" in caplog.text

    def test_early_fresh_element_is_quiet(self, replay_log, caplog):
        log = replay_log(CONTINUE_CHOICE, 7, CONTINUE_CHOICE, 7, 8, STOP_CHOICE)

        with caplog.at_level(logging.WARNING, logger="fuzz.lists"):
            set_between(byte(), 2, 2, max_attempts=3)(log)

        assert caplog.records == []

    @given(seeds)
    def test_wrappers(self, seed):
        assert len(generate(set_at_least(int_between(0, 100), 2), seed)[1]) >= 2
        assert len(generate(set_at_most(int_between(0, 100), 2), seed)[1]) <= 2
        value = generate(set_of(integer()), seed)[1]
        assert len(set(value)) == len(value)


class TestSelections:
    """one_of, sublist and subset."""

    @given(st.lists(st.integers(), min_size=1, max_size=20), seeds)
    def test_one_of_membership(self, xs, seed):
        assert generate(one_of(xs), seed)[1] in xs

    def test_one_of_empty_is_hard_failure(self):
        with pytest.raises(FuzzerError, match="one_of"):
            one_of([])

    def test_one_of_indexes(self, replay_log):
        assert one_of(["a", "b", "c", "d"])(replay_log(0, 2))[1] == "c"

    @given(st.lists(st.integers(0, 5), max_size=15), seeds)
    def test_sublist_is_subsequence(self, xs, seed):
        final, value = generate(sublist(xs), seed)

        assert is_subsequence(value, xs)
        assert len(final.choices) == len(xs) + 1

    def test_sublist_threshold(self, replay_log):
        assert sublist("abc")(replay_log(100, 5, 200, 99))[1] == ["a", "c"]
        assert sublist("abc")(replay_log(0, 0, 0, 0))[1] == []
        assert sublist("abc")(replay_log(255, 0, 1, 254))[1] == ["a", "b", "c"]

    def test_sublist_exhausts_mid_way(self, replay_log):
        assert sublist("abc")(replay_log(100, 5)) is None

    @given(st.lists(st.integers(0, 3), max_size=12), seeds)
    def test_subset_is_distinct(self, xs, seed):
        _, value = generate(subset(xs), seed)

        assert len(set(value)) == len(value)
        assert set(value) <= set(xs)
