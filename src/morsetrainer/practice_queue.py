"""Retry-until-correct worklist for one practice session."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Iterator

from loguru import logger


class PracticeQueue:
    """FIFO of practice items where failed items move to the tail.

    An item only leaves the queue through `resolve(True)` while it is the head,
    so an empty queue means every seeded item was answered correctly at least once.
    """

    def __init__(self, items: Iterable[str] = ()) -> None:
        """Initialize queue with optional seed items."""
        self._items: deque[str] = deque()
        self.seed(items)

    def seed(self, items: Iterable[str]) -> None:
        """Replace queue contents, keeping the caller's order."""
        self._items = deque(items)
        logger.debug("Queue seeded with {} items", len(self._items))

    def peek(self) -> str | None:
        """Return head item without removing it, or None when exhausted."""
        if not self._items:
            return None
        return self._items[0]

    def resolve(self, correct: bool) -> None:
        """Remove head on success, otherwise move it to the tail."""
        if not self._items:
            raise IndexError("resolve() on an empty practice queue")
        head = self._items.popleft()
        if not correct:
            self._items.append(head)

    @property
    def remaining(self) -> tuple[str, ...]:
        """Snapshot of queued items in presentation order."""
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(tuple(self._items))

    def __bool__(self) -> bool:
        return bool(self._items)
