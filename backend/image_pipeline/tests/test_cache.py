import unittest

from image_pipeline.services.cache import ImageCache
from image_pipeline.types import CacheEntry


class ImageCacheTests(unittest.TestCase):
    def setUp(self) -> None:
        self.cache = ImageCache()

    def test_lookup_is_case_insensitive(self):
        entry = CacheEntry(url="https://example.com/cat.jpg", confidence=0.9, source="curated")
        self.cache.store("Cat", entry)

        self.assertIs(self.cache.lookup("cat"), entry)
        self.assertIs(self.cache.lookup("CAT "), entry)
        self.assertIn("cAt", self.cache)

    def test_missing_word_returns_none(self):
        self.assertIsNone(self.cache.lookup("dog"))
        self.assertEqual(len(self.cache), 0)

    def test_store_overwrites(self):
        self.cache.store("dog", CacheEntry(url="https://a.jpg", confidence=0.5, source="curated-default"))
        self.cache.store("DOG", CacheEntry(url="https://b.jpg", confidence=0.9, source="unsplash"))

        self.assertEqual(len(self.cache), 1)
        self.assertEqual(self.cache.lookup("dog").url, "https://b.jpg")

    def test_entries_carry_timestamp(self):
        entry = CacheEntry(url="https://a.jpg", confidence=0.5, source="curated")
        self.assertTrue(entry.generated_at)

    def test_clear(self):
        self.cache.store("dog", CacheEntry(url="https://a.jpg", confidence=0.5, source="curated"))
        self.cache.clear()
        self.assertIsNone(self.cache.lookup("dog"))


if __name__ == "__main__":
    unittest.main()
