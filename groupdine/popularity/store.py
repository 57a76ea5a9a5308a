from __future__ import annotations

import threading
from collections import Counter
from typing import Protocol


class ChoiceStore(Protocol):
    def increment(self, place_id: str) -> int:
        """Atomically add one choice for ``place_id`` and return the new count."""
        ...

    def top(self, n: int) -> list[tuple[str, int]]: ...


class InMemoryChoiceStore:
    def __init__(self) -> None:
        self._counts: Counter[str] = Counter()
        self._lock = threading.Lock()

    def increment(self, place_id: str) -> int:
        with self._lock:
            self._counts[place_id] += 1
            return self._counts[place_id]

    def top(self, n: int) -> list[tuple[str, int]]:
        with self._lock:
            return self._counts.most_common(n)

    def clear(self) -> None:
        with self._lock:
            self._counts.clear()
