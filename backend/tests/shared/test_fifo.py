"""Tests for shared/fifo.py."""

from shared.fifo import append_bounded, remove_where


class TestAppendBounded:
    def test_appends_below_capacity(self):
        assert append_bounded([1, 2], 3, capacity=5) == [1, 2, 3]

    def test_evicts_oldest_at_capacity(self):
        """Appending to a full list should drop the oldest entry."""
        assert append_bounded([1, 2, 3, 4, 5], 6, capacity=5) == [2, 3, 4, 5, 6]

    def test_trims_over_capacity_input(self):
        """A list already over the cap should be trimmed to the newest entries."""
        assert append_bounded([1, 2, 3, 4, 5, 6, 7], 8, capacity=5) == [4, 5, 6, 7, 8]

    def test_does_not_mutate_input(self):
        items = [1, 2, 3]
        append_bounded(items, 4, capacity=3)
        assert items == [1, 2, 3]

    def test_zero_capacity(self):
        assert append_bounded([1], 2, capacity=0) == []

    def test_sequence_of_appends_keeps_last_n(self):
        items: list[int] = []
        for i in range(1, 7):
            items = append_bounded(items, i, capacity=5)
        assert items == [2, 3, 4, 5, 6]


class TestRemoveWhere:
    def test_removes_matching(self):
        assert remove_where(["a", "b", "a"], lambda x: x == "a") == ["b"]

    def test_no_match_returns_copy(self):
        items = ["a", "b"]
        result = remove_where(items, lambda x: x == "z")
        assert result == items
        assert result is not items
