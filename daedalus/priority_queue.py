"""
Min-first priority queue with lookup and replacement by key.
"""

import heapq
import itertools
from typing import Any, Callable, Dict, Generic, Hashable, List, Optional, TypeVar

T = TypeVar("T")

_REMOVED = object()  # Placeholder for an entry that was replaced


class PriorityQueue(Generic[T]):
    """
    Binary heap ordered by priority(item), smallest first.

    key(item) identifies entries for contains_key / find / replace, e.g. an
    A* node's grid index. Several entries may share a key; all of them stay in
    the queue until popped or individually replaced. Entries with equal
    priority come out in insertion order, but callers should not depend on it.
    """

    def __init__(
        self,
        priority: Callable[[T], Any],
        key: Optional[Callable[[T], Hashable]] = None,
    ) -> None:
        self._priority = priority
        self._key = key
        self._heap: List[list] = []
        self._entries_by_key: Dict[Hashable, List[list]] = {}
        self._counter = itertools.count()
        self._count = 0

    def __len__(self) -> int:
        return self._count

    def empty(self) -> bool:
        return self._count == 0

    def push(self, item: T) -> None:
        entry = [self._priority(item), next(self._counter), item]
        heapq.heappush(self._heap, entry)
        if self._key is not None:
            self._entries_by_key.setdefault(self._key(item), []).append(entry)
        self._count += 1

    def top(self) -> T:
        """Returns the smallest item without removing it. Raises IndexError if empty."""
        self._discard_removed()
        if not self._heap:
            raise IndexError("top from an empty priority queue")
        return self._heap[0][2]

    def pop(self) -> T:
        """Removes and returns the smallest item. Raises IndexError if empty."""
        self._discard_removed()
        if not self._heap:
            raise IndexError("pop from an empty priority queue")
        entry = heapq.heappop(self._heap)
        item = entry[2]
        self._forget(entry)
        self._count -= 1
        return item

    def contains_key(self, key: Hashable) -> bool:
        return bool(self._entries_by_key.get(key))

    def find(self, key: Hashable) -> Optional[T]:
        """Returns the smallest item with this key, or None if there is none."""
        entry = self._best_entry(key)
        return None if entry is None else entry[2]

    def replace(self, key: Hashable, item: T) -> None:
        """
        Swap the smallest entry with this key for item.

        Raises:
            KeyError: If no entry has this key
        """
        entry = self._best_entry(key)
        if entry is None:
            raise KeyError(key)
        self._forget(entry)
        entry[2] = _REMOVED
        self._count -= 1
        self.push(item)

    def items(self) -> List[T]:
        """Snapshot of the queued items, smallest first."""
        return [entry[2] for entry in sorted(self._heap) if entry[2] is not _REMOVED]

    def clear(self) -> None:
        self._heap.clear()
        self._entries_by_key.clear()
        self._count = 0

    def _best_entry(self, key: Hashable) -> Optional[list]:
        entries = self._entries_by_key.get(key)
        if not entries:
            return None
        return min(entries, key=lambda entry: (entry[0], entry[1]))

    def _forget(self, entry: list) -> None:
        if self._key is None:
            return
        key = self._key(entry[2])
        entries = self._entries_by_key.get(key, [])
        entries.remove(entry)
        if not entries:
            del self._entries_by_key[key]

    def _discard_removed(self) -> None:
        while self._heap and self._heap[0][2] is _REMOVED:
            heapq.heappop(self._heap)
