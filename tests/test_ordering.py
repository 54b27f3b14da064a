"""Tests for ordering repair."""

import pytest

from lazyflow.core.ordering import (
    apply_ordering,
    clamp,
    is_permutation,
    max_displacement_of,
    repair,
    sanitize,
)


class TestSanitize:
    def test_all_out_of_range(self):
        assert sanitize([99, -1, 0], 5) == [1, 2, 3, 4, 5]

    def test_duplicates(self):
        assert sanitize([1, 1, 1, 1], 4) == [1, 2, 3, 4]

    def test_keeps_first_occurrence_then_fills_missing(self):
        assert sanitize([3, 3, 1], 4) == [3, 1, 2, 4]

    def test_truncates_extra_values(self):
        assert sanitize([2, 1, 3, 4, 5], 3) == [2, 1, 3]

    def test_empty_candidate(self):
        assert sanitize([], 3) == [1, 2, 3]

    def test_valid_permutation_unchanged(self):
        assert sanitize([4, 2, 3, 1], 4) == [4, 2, 3, 1]


class TestDisplacement:
    def test_max_displacement(self):
        assert max_displacement_of([3, 1, 2]) == 2
        assert max_displacement_of([1, 2, 3]) == 0
        assert max_displacement_of([]) == 0

    def test_is_permutation(self):
        assert is_permutation([2, 1, 3], 3)
        assert not is_permutation([2, 2, 3], 3)
        assert not is_permutation([1, 2], 3)


class TestClamp:
    def test_within_bound_unchanged(self):
        assert clamp([2, 1, 3, 4, 5], 1) == [2, 1, 3, 4, 5]

    def test_reversal(self):
        assert clamp([5, 4, 3, 2, 1], 2) == [3, 4, 1, 2, 5]

    def test_pulls_back_only_as_far_as_needed(self):
        assert clamp([4, 1, 2, 3], 1) == [1, 2, 4, 3]

    def test_zero_bound_gives_identity(self):
        assert clamp([3, 1, 2], 0) == [1, 2, 3]

    def test_negative_bound_acts_as_zero(self):
        assert clamp([3, 1, 2], -1) == [1, 2, 3]

    @pytest.mark.parametrize("bound", [0, 1, 2, 5])
    def test_identity_is_fixed_point(self, bound):
        assert clamp([1, 2, 3, 4, 5, 6], bound) == [1, 2, 3, 4, 5, 6]

    def test_single_item(self):
        assert clamp([1], 0) == [1]


class TestRepair:
    def test_sanitizes_then_clamps(self):
        result = repair([6, 6, 5, 99, 1], 6, 2)
        assert is_permutation(result, 6)
        assert max_displacement_of(result) <= 2

    def test_garbage_gives_identity(self):
        assert repair([-3, 0, 42], 4, 2) == [1, 2, 3, 4]

    def test_negative_bound_keeps_every_item(self):
        assert repair([3, 1, 2], 3, -1) == [1, 2, 3]


class TestApplyOrdering:
    def test_reorders_items(self):
        assert apply_ordering(["a", "b", "c"], [3, 1, 2]) == ["c", "a", "b"]
