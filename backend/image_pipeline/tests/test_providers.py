"""
Unit tests for image_pipeline/services/providers.py

All HTTP calls are mocked; no provider is contacted.

Run with: python -m pytest image_pipeline/tests/test_providers.py -v
"""
import unittest
from unittest.mock import patch, MagicMock
from typing import Any, Dict, List

import requests

from image_pipeline.config import AppConfig
from image_pipeline.types import ImageCandidate, WordRequest
from image_pipeline.services.catalog import get_catalog
from image_pipeline.services.providers import (
    PexelsProvider,
    PixabayProvider,
    ProviderChain,
    ProviderError,
    SearchProvider,
    UnsplashProvider,
    dedupe_by_url,
    rank_candidates,
    score_candidate,
)


# =============================================================================
# Test Fixtures
# =============================================================================

def make_response(data: Dict[str, Any], status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.reason = "OK" if status_code < 400 else "Error"
    response.json.return_value = data
    return response


def unsplash_item(idx: int, likes: int = 100, width: int = 4000, height: int = 3000) -> Dict[str, Any]:
    return {
        "id": f"u{idx}",
        "urls": {"regular": f"https://images.unsplash.com/photo-{idx}"},
        "alt_description": f"photo {idx}",
        "likes": likes,
        "width": width,
        "height": height,
        "user": {"name": "Jane"},
    }


def pixabay_hit(idx: int, downloads: int = 5000, likes: int = 50) -> Dict[str, Any]:
    return {
        "id": idx,
        "webformatURL": f"https://pixabay.com/get/{idx}.jpg",
        "tags": "cat, pet",
        "downloads": downloads,
        "likes": likes,
        "imageWidth": 4000,
        "imageHeight": 3000,
        "user": "pixuser",
    }


def make_config(**overrides) -> AppConfig:
    cfg = AppConfig(query_pause_seconds=0.2, max_ranked_candidates=8)
    for key, value in overrides.items():
        setattr(cfg, key, value)
    return cfg


class FakeProvider(SearchProvider):
    """Provider returning canned results per call"""

    def __init__(self, name: str, results=None, error: Exception = None, api_key: str = "key"):
        super().__init__(api_key)
        self.name = name
        self.results = results or []
        self.error = error
        self.queries: List[str] = []

    def search(self, query: str) -> List[ImageCandidate]:
        self.queries.append(query)
        if self.error:
            raise self.error
        return list(self.results)


# =============================================================================
# Test Cases
# =============================================================================

class TestScoring(unittest.TestCase):
    def test_linear_score(self):
        candidate = ImageCandidate(url="u", downloads=1000, likes=100, width=1000, height=1000)
        self.assertAlmostEqual(score_candidate(candidate), 1.0 + 1.0 + 1.0)

    def test_missing_metrics_count_as_zero(self):
        candidate = ImageCandidate(url="u", width=2000, height=1000)
        self.assertAlmostEqual(score_candidate(candidate), 2.0)

    def test_dedupe_keeps_first(self):
        a = ImageCandidate(url="https://x/1", provider="first")
        b = ImageCandidate(url="https://x/1", provider="second")
        c = ImageCandidate(url="https://x/2")
        self.assertEqual(dedupe_by_url([a, b, c]), [a, c])

    def test_rank_sorts_and_limits(self):
        low = ImageCandidate(url="low", likes=1)
        high = ImageCandidate(url="high", likes=500)
        mid = ImageCandidate(url="mid", likes=50)
        ranked = rank_candidates([low, high, mid, high], limit=2)
        self.assertEqual([c.url for c in ranked], ["high", "mid"])


class TestUnsplashProvider(unittest.TestCase):
    def setUp(self) -> None:
        self.provider = UnsplashProvider("access-key", timeout=5, per_page=5)

    @patch("image_pipeline.services.providers.requests.get")
    def test_parses_and_filters(self, mock_get):
        mock_get.return_value = make_response({
            "results": [
                unsplash_item(1),
                unsplash_item(2, likes=1),          # too few likes
                unsplash_item(3, width=640),        # too small
                unsplash_item(1),                   # duplicate URL
            ]
        })

        candidates = self.provider.search("cat")

        self.assertEqual(len(candidates), 1)
        self.assertEqual(candidates[0].url, "https://images.unsplash.com/photo-1")
        self.assertEqual(candidates[0].provider, "unsplash")
        self.assertEqual(candidates[0].photographer, "Jane")
        self.assertIsNone(candidates[0].downloads)

        _, kwargs = mock_get.call_args
        self.assertEqual(kwargs["headers"]["Authorization"], "Client-ID access-key")
        self.assertEqual(kwargs["params"]["query"], "cat")
        self.assertEqual(kwargs["timeout"], 5)

    @patch("image_pipeline.services.providers.requests.get")
    def test_non_2xx_raises(self, mock_get):
        mock_get.return_value = make_response({}, status_code=403)

        with self.assertRaises(ProviderError) as ctx:
            self.provider.search("cat")
        self.assertEqual(ctx.exception.status_code, 403)
        self.assertEqual(ctx.exception.provider, "unsplash")

    @patch("image_pipeline.services.providers.requests.get")
    def test_transport_error_raises(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("connection refused")

        with self.assertRaises(ProviderError):
            self.provider.search("cat")

    @patch("image_pipeline.services.providers.requests.get")
    def test_invalid_json_raises(self, mock_get):
        response = make_response({})
        response.json.side_effect = ValueError("not json")
        mock_get.return_value = response

        with self.assertRaises(ProviderError):
            self.provider.search("cat")

    def test_unavailable_without_key(self):
        self.assertFalse(UnsplashProvider("").available)


class TestPixabayProvider(unittest.TestCase):
    @patch("image_pipeline.services.providers.requests.get")
    def test_filters_on_downloads_and_likes(self, mock_get):
        mock_get.return_value = make_response({
            "hits": [
                pixabay_hit(1),
                pixabay_hit(2, downloads=10),
                pixabay_hit(3, likes=2),
            ]
        })
        provider = PixabayProvider("pix-key", per_page=2)

        candidates = provider.search("cat")

        self.assertEqual([c.url for c in candidates], ["https://pixabay.com/get/1.jpg"])
        self.assertEqual(candidates[0].downloads, 5000)
        _, kwargs = mock_get.call_args
        self.assertEqual(kwargs["params"]["key"], "pix-key")
        self.assertEqual(kwargs["params"]["per_page"], 3)


class TestPexelsProvider(unittest.TestCase):
    @patch("image_pipeline.services.providers.requests.get")
    def test_parses_photos(self, mock_get):
        mock_get.return_value = make_response({
            "photos": [
                {
                    "id": 7,
                    "src": {"large": "https://images.pexels.com/7.jpg"},
                    "alt": "a cat",
                    "width": 5000,
                    "height": 3000,
                    "photographer": "Sam",
                },
                {
                    "id": 8,
                    "src": {"large": "https://images.pexels.com/8.jpg"},
                    "width": 300,
                    "height": 200,
                },
            ]
        })
        provider = PexelsProvider("pexels-key")

        candidates = provider.search("cat")

        self.assertEqual(len(candidates), 1)
        self.assertEqual(candidates[0].provider_id, "7")
        self.assertIsNone(candidates[0].likes)
        _, kwargs = mock_get.call_args
        self.assertEqual(kwargs["headers"]["Authorization"], "pexels-key")


class TestProviderChain(unittest.TestCase):
    def setUp(self) -> None:
        self.request = WordRequest(word="cat", translation="Katze", category="animals")
        self.sleep = MagicMock()

    def _chain(self, providers, **cfg_overrides) -> ProviderChain:
        return ProviderChain(
            providers=providers,
            catalog=get_catalog(),
            cfg=make_config(**cfg_overrides),
            sleep=self.sleep,
        )

    def test_first_provider_with_results_wins(self):
        first = FakeProvider("unsplash", results=[ImageCandidate(url="https://a/1", likes=10)])
        second = FakeProvider("pixabay", results=[ImageCandidate(url="https://b/1")])

        name, candidates = self._chain([first, second]).search_candidates(self.request)

        self.assertEqual(name, "unsplash")
        self.assertEqual([c.url for c in candidates], ["https://a/1"])
        self.assertEqual(second.queries, [])

    def test_runs_five_queries_with_pause_between(self):
        first = FakeProvider("unsplash", results=[ImageCandidate(url="https://a/1")])

        self._chain([first]).search_candidates(self.request)

        self.assertEqual(len(first.queries), 5)
        self.assertEqual(self.sleep.call_count, 4)
        self.sleep.assert_called_with(0.2)

    def test_duplicate_urls_across_queries_appear_once(self):
        shared = ImageCandidate(url="https://a/shared", likes=20)
        first = FakeProvider("unsplash", results=[shared])

        _, candidates = self._chain([first]).search_candidates(self.request)

        self.assertEqual([c.url for c in candidates], ["https://a/shared"])

    def test_error_falls_through_to_next_provider(self):
        failing = FakeProvider("unsplash", error=ProviderError("unsplash", "HTTP 500", status_code=500))
        empty = FakeProvider("pixabay", results=[])
        working = FakeProvider("pexels", results=[ImageCandidate(url="https://c/1")])

        name, candidates = self._chain([failing, empty, working]).search_candidates(self.request)

        self.assertEqual(name, "pexels")
        self.assertEqual(len(candidates), 1)
        self.assertEqual(len(failing.queries), 1)
        self.assertEqual(len(empty.queries), 5)

    def test_unavailable_providers_are_skipped(self):
        keyless = FakeProvider("unsplash", results=[ImageCandidate(url="https://a/1")], api_key="")
        working = FakeProvider("pixabay", results=[ImageCandidate(url="https://b/1")])

        name, _ = self._chain([keyless, working]).search_candidates(self.request)

        self.assertEqual(name, "pixabay")
        self.assertEqual(keyless.queries, [])

    def test_all_failing_returns_empty(self):
        chain = self._chain([
            FakeProvider("unsplash", results=[]),
            FakeProvider("pixabay", error=ProviderError("pixabay", "boom")),
        ])
        self.assertEqual(chain.search_candidates(self.request), (None, []))

    def test_keeps_top_ranked_candidates(self):
        results = [ImageCandidate(url=f"https://a/{i}", likes=i) for i in range(12)]
        first = FakeProvider("unsplash", results=results)

        _, candidates = self._chain([first], max_ranked_candidates=3).search_candidates(self.request)

        self.assertEqual([c.url for c in candidates], ["https://a/11", "https://a/10", "https://a/9"])

    def test_search_urls_single_query(self):
        failing = FakeProvider("unsplash", error=ProviderError("unsplash", "boom"))
        working = FakeProvider("pixabay", results=[ImageCandidate(url=f"https://b/{i}", likes=i) for i in range(5)])

        urls = self._chain([failing, working]).search_urls("cat for kids", limit=2)

        self.assertEqual(urls, ["https://b/4", "https://b/3"])
        self.assertEqual(working.queries, ["cat for kids"])


if __name__ == "__main__":
    unittest.main()
