"""
In-memory FIFO store of work items.

Not thread-safe: a single controller owns each queue.
"""

from typing import List, Optional

from work_queue.models import WorkItem


class WorkQueue:
    """
    Ordered queue of work items with an optional capacity.

    Capacity is a soft admission check: enqueue reports refusal with a
    boolean and never raises.
    """

    def __init__(self, max_size: Optional[int] = None):
        """
        Initialize the queue.

        Args:
            max_size: Maximum number of items. None or 0 means unlimited.
        """
        self.max_size = max_size
        self._items: List[WorkItem] = []

    def enqueue(self, item: WorkItem) -> bool:
        """
        Add a work item to the end of the queue.

        Returns:
            True if the item was added, False if the queue is full
        """
        if self.max_size and len(self._items) >= self.max_size:
            return False
        self._items.append(item)
        return True

    def dequeue(self) -> Optional[WorkItem]:
        """Remove and return the first item, or None when empty."""
        if not self._items:
            return None
        return self._items.pop(0)

    def get(self, index: int) -> Optional[WorkItem]:
        """Get the item at a position, None when out of range."""
        if index < 0 or index >= len(self._items):
            return None
        return self._items[index]

    def remove_range(self, start: int, count: int, *items: WorkItem) -> List[WorkItem]:
        """
        Remove `count` items at `start` and insert `items` in their place.

        Negative start counts from the tail; both bounds are clamped to
        the queue.

        Returns:
            The removed items
        """
        length = len(self._items)
        if start < 0:
            start = max(length + start, 0)
        start = min(start, length)
        count = max(0, min(count, length - start))

        removed = self._items[start:start + count]
        self._items[start:start + count] = list(items)
        return removed

    def size(self) -> int:
        return len(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def is_empty(self) -> bool:
        return not self._items

    def clear(self) -> None:
        """Remove all items from the queue."""
        self._items = []

    def snapshot_all(self) -> List[WorkItem]:
        """Return a copy of all queued items without removing them."""
        return list(self._items)
