"""Tests for snapshot reconciliation."""

import pytest

from journalyst.reconcile import (
    Delete,
    Insert,
    Move,
    ReconcileError,
    Update,
    apply_operations,
    reconcile,
)


def by_id(entry):
    return entry.id


class TestEntryScenarios:
    """Store-shaped scenarios keyed by entry ID."""

    def test_append(self, abc):
        """Appending B to [A] is a single insert at 1."""
        a, b, _ = abc
        assert reconcile([a], [a, b], key=by_id) == [Insert(1, b)]

    def test_favorite_is_update(self, abc):
        """Changing content of a matched entry is an in-place update."""
        a = abc[0]
        favorite = a.copy()
        favorite.is_favorite = True
        assert reconcile([a], [favorite], key=by_id) == [Update(0, favorite)]

    def test_remove_middle(self, abc):
        """Removing B from [A, B, C] is a single delete at 1."""
        a, b, c = abc
        assert reconcile([a, b, c], [a, c], key=by_id) == [Delete(1)]

    def test_same_list_is_empty(self, abc):
        """Reconciling a list against itself yields nothing."""
        assert reconcile(list(abc), list(abc), key=by_id) == []

    def test_equal_content_different_ids_are_distinct(self, make_entry):
        """Keying by ID keeps value-equal entries apart."""
        a = make_entry("same")
        twin = a.copy()
        twin.id = "TWIN"
        operations = reconcile([a], [twin], key=by_id)
        assert operations == [Delete(0), Insert(0, twin)]


class TestValueKeys:
    """Items without a key function are matched by value."""

    def test_insert_into_middle(self):
        operations = reconcile([b"1", b"3"], [b"1", b"2", b"3"])
        assert operations == [Insert(1, b"2")]

    def test_duplicates(self):
        """Equal items are interchangeable."""
        previous = [b"x", b"y", b"x"]
        current = [b"x", b"x"]
        operations = reconcile(previous, current)
        assert apply_operations(previous, operations) == current
        assert operations == [Delete(1)]

    def test_clear(self):
        """Emptying a list deletes from the back."""
        assert reconcile([1, 2, 3], []) == [Delete(2), Delete(1), Delete(0)]

    def test_fill(self):
        """Filling an empty list inserts in ascending order."""
        assert reconcile([], [1, 2]) == [Insert(0, 1), Insert(1, 2)]


class TestMoves:
    """Reordering is reported as moves of the items that left the common order."""

    def test_move_to_front(self):
        """Dragging the last image to the front is one move."""
        previous = ["a", "b", "c", "d"]
        current = ["d", "a", "b", "c"]
        operations = reconcile(previous, current)
        assert operations == [Move(3, 0)]
        assert apply_operations(previous, operations) == current

    def test_move_to_back(self):
        previous = ["a", "b", "c"]
        current = ["b", "c", "a"]
        operations = reconcile(previous, current)
        assert operations == [Move(0, 2)]

    def test_swap_is_one_move(self):
        """Swapping neighbours moves only one of them."""
        operations = reconcile(["a", "b"], ["b", "a"])
        assert len(operations) == 1
        assert isinstance(operations[0], Move)

    def test_reverse(self):
        """Reversal needs n-1 moves and lands exactly."""
        previous = list("abcdef")
        current = list(reversed(previous))
        operations = reconcile(previous, current)
        assert all(isinstance(op, Move) for op in operations)
        assert len(operations) == 5
        assert apply_operations(previous, operations) == current

    def test_moves_disabled(self):
        """Without move detection a reorder is delete plus insert."""
        operations = reconcile(["a", "b", "c"], ["c", "a", "b"], detect_moves=False)
        assert operations == [Delete(2), Insert(0, "c")]

    def test_moved_and_changed(self):
        """A moved item whose content changed also gets an update at its new place."""
        previous = [("a", 1), ("b", 1), ("c", 1)]
        current = [("c", 2), ("a", 1), ("b", 1)]
        operations = reconcile(previous, current, key=lambda item: item[0])
        assert operations == [Move(2, 0), Update(0, ("c", 2))]
        assert apply_operations(previous, operations) == current

    def test_mixed_changes(self):
        """Deletes, moves, inserts and updates combine in one script."""
        previous = [("a", 1), ("b", 1), ("c", 1), ("d", 1)]
        current = [("d", 1), ("a", 2), ("e", 1), ("c", 1)]
        operations = reconcile(previous, current, key=lambda item: item[0])

        kinds = [type(op) for op in operations]
        assert kinds == sorted(kinds, key=[Delete, Move, Insert, Update].index)
        assert apply_operations(previous, operations) == current


class TestApplyOperations:
    """Tests for apply_operations."""

    def test_does_not_modify_input(self):
        """The input sequence is left alone."""
        items = [1, 2, 3]
        apply_operations(items, [Delete(0)])
        assert items == [1, 2, 3]

    @pytest.mark.parametrize(
        "operation",
        [Insert(5, "x"), Delete(3), Move(0, 3), Move(-1, 0), Update(3, "x")],
    )
    def test_out_of_range_operation(self, operation):
        """Operations that do not fit raise ReconcileError."""
        with pytest.raises(ReconcileError):
            apply_operations([1, 2, 3], [operation])
