"""Tests for umbrella_search.ranges."""

from __future__ import annotations

import pytest

from umbrella_search.predicates import Eq, MemberOf, Range
from umbrella_search.ranges import parse_uid_range


class TestSingleUid:
    def test_single_number(self):
        assert parse_uid_range("5") == Eq("uid", 5)

    def test_zero(self):
        assert parse_uid_range("0") == Eq("uid", 0)


class TestUidList:
    def test_sorted_ascending(self):
        assert parse_uid_range("5,3,10") == MemberOf("uid", (3, 5, 10))

    def test_duplicates_kept(self):
        assert parse_uid_range("3,1,3") == MemberOf("uid", (1, 3, 3))

    def test_sorted_numerically_not_lexically(self):
        assert parse_uid_range("100,20,3") == MemberOf("uid", (3, 20, 100))


class TestUidRange:
    def test_closed_range(self):
        assert parse_uid_range("5:10") == Range("uid", gte=5, lte=10)

    def test_reversed_bounds_are_ordered(self):
        assert parse_uid_range("10:5") == Range("uid", gte=5, lte=10)

    def test_open_ended(self):
        predicate = parse_uid_range("5:*")
        assert predicate == Range("uid", gte=5)
        assert predicate.lte is None

    def test_equal_bounds_collapse(self):
        assert parse_uid_range("7:7") == Eq("uid", 7)

    def test_custom_field(self):
        assert parse_uid_range("1:2", field="modseq") == Range("modseq", gte=1, lte=2)


class TestUnrecognised:
    @pytest.mark.parametrize(
        "expr",
        [None, "", "abc", "1:", ":5", "*:5", "*", "-1", "1, 2", "1,,2", "1:2:3", "5\n", " 5", "٣", "١:٢", "1,٢"],
    )
    def test_no_constraint(self, expr):
        assert parse_uid_range(expr) is None
