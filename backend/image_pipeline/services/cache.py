"""
In-process cache of resolved word images.

Entries live for the lifetime of the server process and are never evicted;
the vocabulary set is small and fixed.
"""
import logging
from typing import Dict, Optional

from image_pipeline.types import CacheEntry

logger = logging.getLogger(__name__)


class ImageCache:
    """Case-insensitive word -> CacheEntry map"""

    def __init__(self):
        self._entries: Dict[str, CacheEntry] = {}

    @staticmethod
    def _key(word: str) -> str:
        return word.strip().lower()

    def lookup(self, word: str) -> Optional[CacheEntry]:
        return self._entries.get(self._key(word))

    def store(self, word: str, entry: CacheEntry) -> None:
        self._entries[self._key(word)] = entry
        logger.debug(f"Cached image for '{word}' from {entry.source}")

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, word: str) -> bool:
        return self._key(word) in self._entries
