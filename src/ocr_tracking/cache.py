"""
Bounded translation cache.

Constructed once by the caller and handed to each tracker; there is no
module-level instance.
"""

from collections import OrderedDict
from threading import Lock

DEFAULT_CAPACITY = 100


class TranslationCache:
    """Source text to translation map with FIFO eviction.

    When full, the entry inserted first is evicted. Overwriting an existing
    key keeps its original position.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._lock = Lock()
        self._entries: OrderedDict[str, str] = OrderedDict()

    def get(self, text: str) -> str | None:
        """Cached translation for an exact source text."""
        with self._lock:
            return self._entries.get(text)

    def set(self, text: str, translation: str):
        """Store a translation, evicting the oldest entries beyond capacity."""
        with self._lock:
            self._entries[text] = translation
            while len(self._entries) > self.capacity:
                self._entries.popitem(last=False)

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __contains__(self, text: object) -> bool:
        with self._lock:
            return text in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
