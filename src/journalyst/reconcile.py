"""Snapshot reconciliation - minimal edit scripts between two ordered lists.

``reconcile`` compares a previously displayed list with the current one and
returns the inserts, deletes, moves and updates that turn the first into the
second. Items are matched by key (identity); content is compared with ``==``
only to decide whether a matched item needs an update.

Operations are applied in the order returned, each against the list as left
by the previous one:

1. deletes, highest index first
2. moves (pop ``from_index``, then insert at ``to_index``)
3. inserts, lowest final index first
4. updates, at final indices
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Optional, Sequence, Union

from .store import JournalystError


class ReconcileError(JournalystError):
    """Raised when an operation does not fit the list it is applied to."""
    pass


def _check(condition: bool, message: str) -> None:
    if not condition:
        raise ReconcileError(message)


@dataclass(frozen=True)
class Insert:
    index: int
    item: Any

    def apply_to(self, items: list) -> None:
        _check(0 <= self.index <= len(items), f"insert at {self.index} outside 0..{len(items)}")
        items.insert(self.index, self.item)


@dataclass(frozen=True)
class Delete:
    index: int

    def apply_to(self, items: list) -> None:
        _check(0 <= self.index < len(items), f"delete at {self.index} outside list of {len(items)}")
        del items[self.index]


@dataclass(frozen=True)
class Move:
    from_index: int
    to_index: int

    def apply_to(self, items: list) -> None:
        size = len(items)
        _check(0 <= self.from_index < size, f"move from {self.from_index} outside list of {size}")
        _check(0 <= self.to_index < size, f"move to {self.to_index} outside list of {size}")
        items.insert(self.to_index, items.pop(self.from_index))


@dataclass(frozen=True)
class Update:
    index: int
    item: Any

    def apply_to(self, items: list) -> None:
        _check(0 <= self.index < len(items), f"update at {self.index} outside list of {len(items)}")
        items[self.index] = self.item


Operation = Union[Insert, Delete, Move, Update]
KeyFunc = Callable[[Any], Hashable]


def _value_key(item: Any) -> Hashable:
    return item


def _lcs_pairs(a: Sequence[Hashable], b: Sequence[Hashable]) -> list[tuple[int, int]]:
    """Index pairs of a longest common subsequence of ``a`` and ``b``."""
    n, m = len(a), len(b)

    start = 0
    while start < n and start < m and a[start] == b[start]:
        start += 1
    end_a, end_b = n, m
    while end_a > start and end_b > start and a[end_a - 1] == b[end_b - 1]:
        end_a -= 1
        end_b -= 1

    pairs = [(i, i) for i in range(start)]

    mid_a = a[start:end_a]
    mid_b = b[start:end_b]
    rows, cols = len(mid_a), len(mid_b)
    # lengths[i][j] = LCS length of mid_a[i:] and mid_b[j:]
    lengths = [[0] * (cols + 1) for _ in range(rows + 1)]
    for i in range(rows - 1, -1, -1):
        for j in range(cols - 1, -1, -1):
            if mid_a[i] == mid_b[j]:
                lengths[i][j] = lengths[i + 1][j + 1] + 1
            else:
                lengths[i][j] = max(lengths[i + 1][j], lengths[i][j + 1])

    i = j = 0
    while i < rows and j < cols:
        if mid_a[i] == mid_b[j]:
            pairs.append((start + i, start + j))
            i += 1
            j += 1
        elif lengths[i + 1][j] >= lengths[i][j + 1]:
            i += 1
        else:
            j += 1

    pairs.extend((end_a + k, end_b + k) for k in range(n - end_a))
    return pairs


def reconcile(
    previous: Sequence[Any],
    current: Sequence[Any],
    key: Optional[KeyFunc] = None,
    detect_moves: bool = True,
) -> list[Operation]:
    """Compute the edit script turning ``previous`` into ``current``.

    Args:
        previous: Last rendered items
        current: Items to render now
        key: Identity of an item; defaults to the item itself. Must be hashable.
        detect_moves: Pair up removed and re-added keys as moves. When False
            such items are reported as a delete plus an insert.

    Returns:
        Ordered operations; empty when nothing changed.
    """
    key = key or _value_key
    prev_keys = [key(item) for item in previous]
    curr_keys = [key(item) for item in current]

    # origin[j] = index in previous that becomes current[j], None for inserts
    origin: list[Optional[int]] = [None] * len(current)
    matched_prev: set[int] = set()
    for i, j in _lcs_pairs(prev_keys, curr_keys):
        origin[j] = i
        matched_prev.add(i)

    moved: set[int] = set()
    if detect_moves:
        unmatched: dict[Hashable, deque[int]] = {}
        for i, k in enumerate(prev_keys):
            if i not in matched_prev:
                unmatched.setdefault(k, deque()).append(i)
        for j, k in enumerate(curr_keys):
            if origin[j] is not None:
                continue
            candidates = unmatched.get(k)
            if candidates:
                origin[j] = candidates.popleft()
                moved.add(j)

    survivors = {i for i in origin if i is not None}
    operations: list[Operation] = []

    for i in range(len(previous) - 1, -1, -1):
        if i not in survivors:
            operations.append(Delete(i))

    # Track survivors by their previous index while moving them into place.
    working = [i for i in range(len(previous)) if i in survivors]
    targets = [j for j in range(len(current)) if origin[j] is not None]
    for t, j in enumerate(targets):
        if j not in moved:
            continue
        token = origin[j]
        from_index = working.index(token)
        working.pop(from_index)
        to_index = 0 if t == 0 else working.index(origin[targets[t - 1]]) + 1
        working.insert(to_index, token)
        if from_index != to_index:
            operations.append(Move(from_index, to_index))

    for j, source in enumerate(origin):
        if source is None:
            operations.append(Insert(j, current[j]))

    for j, source in enumerate(origin):
        if source is not None and previous[source] != current[j]:
            operations.append(Update(j, current[j]))

    return operations


def apply_operations(items: Sequence[Any], operations: Sequence[Operation]) -> list:
    """Apply an edit script to a copy of ``items``.

    Raises:
        ReconcileError: If an operation's index does not fit.
    """
    result = list(items)
    for operation in operations:
        operation.apply_to(result)
    return result
