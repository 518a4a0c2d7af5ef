"""
Photo-search provider adapters (Unsplash, Pixabay, Pexels) and the
fixed-priority chain that queries them.
"""
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests

from image_pipeline.config import AppConfig, config as default_config
from image_pipeline.types import ImageCandidate, WordRequest
from image_pipeline.services.catalog import ImageCatalog, get_catalog

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """Transport error, non-2xx response or unreadable body from a provider"""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


def score_candidate(candidate: ImageCandidate) -> float:
    """Linear popularity/size score; unreported metrics count as zero."""
    downloads = candidate.downloads or 0
    likes = candidate.likes or 0
    return downloads * 0.001 + likes * 0.01 + candidate.pixel_area / 1_000_000


def dedupe_by_url(candidates: List[ImageCandidate]) -> List[ImageCandidate]:
    seen = set()
    unique = []
    for candidate in candidates:
        if not candidate.url or candidate.url in seen:
            continue
        seen.add(candidate.url)
        unique.append(candidate)
    return unique


def rank_candidates(candidates: List[ImageCandidate], limit: int) -> List[ImageCandidate]:
    """Deduplicate, sort by score (stable for ties) and keep the top ``limit``."""
    unique = dedupe_by_url(candidates)
    return sorted(unique, key=score_candidate, reverse=True)[:limit]


class SearchProvider:
    """Base class for a single photo-search HTTP API"""

    name = "provider"
    endpoint = ""

    # Minimum quality thresholds; checks are skipped for metrics the
    # provider does not report
    MIN_DOWNLOADS = 0
    MIN_LIKES = 0
    MIN_WIDTH = 0
    MIN_HEIGHT = 0

    def __init__(self, api_key: str, timeout: int = 10, per_page: int = 5):
        self.api_key = api_key
        self.timeout = timeout
        self.per_page = per_page

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    def _headers(self) -> Dict[str, str]:
        return {}

    def _params(self, query: str) -> Dict[str, Any]:
        raise NotImplementedError

    def _parse(self, data: Dict[str, Any]) -> List[ImageCandidate]:
        raise NotImplementedError

    def _get(self, query: str) -> Dict[str, Any]:
        try:
            response = requests.get(
                self.endpoint,
                params=self._params(query),
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise ProviderError(self.name, f"request failed: {exc}")

        if not 200 <= response.status_code < 300:
            raise ProviderError(
                self.name,
                f"HTTP {response.status_code} {response.reason}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError(self.name, f"invalid JSON: {exc}", status_code=response.status_code)

    def passes_quality(self, candidate: ImageCandidate) -> bool:
        if candidate.downloads is not None and candidate.downloads < self.MIN_DOWNLOADS:
            return False
        if candidate.likes is not None and candidate.likes < self.MIN_LIKES:
            return False
        if candidate.width < self.MIN_WIDTH or candidate.height < self.MIN_HEIGHT:
            return False
        return True

    def search(self, query: str) -> List[ImageCandidate]:
        """
        Search the provider for ``query``.

        Returns:
            Candidates that meet the quality thresholds, deduplicated by URL

        Raises:
            ProviderError: on transport errors, non-2xx or malformed responses
        """
        data = self._get(query)
        try:
            parsed = self._parse(data)
        except (KeyError, TypeError, AttributeError) as exc:
            raise ProviderError(self.name, f"unexpected response shape: {exc}")

        filtered = [c for c in parsed if self.passes_quality(c)]
        logger.debug(f"{self.name}: '{query}' -> {len(parsed)} results, {len(filtered)} pass quality")
        return dedupe_by_url(filtered)

    @staticmethod
    def _safe_int(value: Any) -> Optional[int]:
        if value is None:
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None


class UnsplashProvider(SearchProvider):
    name = "unsplash"
    endpoint = "https://api.unsplash.com/search/photos"

    MIN_LIKES = 5
    MIN_WIDTH = 1000
    MIN_HEIGHT = 600

    def _headers(self) -> Dict[str, str]:
        return {
            'Authorization': f'Client-ID {self.api_key}',
            'Accept-Version': 'v1',
        }

    def _params(self, query: str) -> Dict[str, Any]:
        return {
            'query': query,
            'per_page': self.per_page,
            'orientation': 'landscape',
            'content_filter': 'high',
        }

    def _parse(self, data: Dict[str, Any]) -> List[ImageCandidate]:
        candidates = []
        for item in data.get('results', []):
            url = (item.get('urls') or {}).get('regular')
            if not url:
                continue
            candidates.append(ImageCandidate(
                url=url,
                provider=self.name,
                description=item.get('alt_description') or item.get('description') or '',
                downloads=self._safe_int(item.get('downloads')),
                likes=self._safe_int(item.get('likes')),
                width=self._safe_int(item.get('width')) or 0,
                height=self._safe_int(item.get('height')) or 0,
                provider_id=item.get('id'),
                photographer=(item.get('user') or {}).get('name'),
            ))
        return candidates


class PixabayProvider(SearchProvider):
    name = "pixabay"
    endpoint = "https://pixabay.com/api/"

    MIN_DOWNLOADS = 100
    MIN_LIKES = 10
    MIN_WIDTH = 1000
    MIN_HEIGHT = 600

    def _params(self, query: str) -> Dict[str, Any]:
        return {
            'key': self.api_key,
            'q': query[:100],
            'image_type': 'photo',
            'safesearch': 'true',
            # Pixabay rejects per_page below 3
            'per_page': max(3, self.per_page),
        }

    def _parse(self, data: Dict[str, Any]) -> List[ImageCandidate]:
        candidates = []
        for hit in data.get('hits', []):
            url = hit.get('webformatURL') or hit.get('largeImageURL')
            if not url:
                continue
            candidates.append(ImageCandidate(
                url=url,
                provider=self.name,
                description=hit.get('tags', ''),
                downloads=self._safe_int(hit.get('downloads')),
                likes=self._safe_int(hit.get('likes')),
                width=self._safe_int(hit.get('imageWidth')) or 0,
                height=self._safe_int(hit.get('imageHeight')) or 0,
                provider_id=str(hit.get('id')) if hit.get('id') is not None else None,
                photographer=hit.get('user'),
            ))
        return candidates


class PexelsProvider(SearchProvider):
    name = "pexels"
    endpoint = "https://api.pexels.com/v1/search"

    MIN_WIDTH = 1000
    MIN_HEIGHT = 600

    def _headers(self) -> Dict[str, str]:
        return {'Authorization': self.api_key}

    def _params(self, query: str) -> Dict[str, Any]:
        return {
            'query': query,
            'per_page': self.per_page,
            'orientation': 'landscape',
        }

    def _parse(self, data: Dict[str, Any]) -> List[ImageCandidate]:
        candidates = []
        for photo in data.get('photos', []):
            src = photo.get('src') or {}
            url = src.get('large') or src.get('original')
            if not url:
                continue
            candidates.append(ImageCandidate(
                url=url,
                provider=self.name,
                description=photo.get('alt') or '',
                width=self._safe_int(photo.get('width')) or 0,
                height=self._safe_int(photo.get('height')) or 0,
                provider_id=str(photo.get('id')) if photo.get('id') is not None else None,
                photographer=photo.get('photographer'),
            ))
        return candidates


def build_default_providers(cfg: AppConfig) -> List[SearchProvider]:
    """Providers in fixed priority order"""
    return [
        UnsplashProvider(cfg.unsplash_access_key, cfg.provider_timeout, cfg.results_per_query),
        PixabayProvider(cfg.pixabay_api_key, cfg.provider_timeout, cfg.results_per_query),
        PexelsProvider(cfg.pexels_api_key, cfg.provider_timeout, cfg.results_per_query),
    ]


class ProviderChain:
    """Queries providers in order and returns the first non-empty result"""

    def __init__(
        self,
        providers: Optional[List[SearchProvider]] = None,
        catalog: Optional[ImageCatalog] = None,
        cfg: Optional[AppConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.cfg = cfg or default_config
        self.providers = providers if providers is not None else build_default_providers(self.cfg)
        self.catalog = catalog or get_catalog()
        self.sleep = sleep

    def _run_queries(self, provider: SearchProvider, queries: List[str]) -> List[ImageCandidate]:
        collected: List[ImageCandidate] = []
        for i, query in enumerate(queries):
            if i > 0 and self.cfg.query_pause_seconds > 0:
                # Stay under provider rate limits
                self.sleep(self.cfg.query_pause_seconds)
            collected.extend(provider.search(query))
        return collected

    def search_candidates(self, request: WordRequest) -> Tuple[Optional[str], List[ImageCandidate]]:
        """
        Run the word's query templates against each provider in turn.

        Returns:
            (provider name, ranked candidates) or (None, []) when every
            provider is unavailable, failing or empty
        """
        queries = self.catalog.queries('pipeline', request.word, request.translation, request.category)

        for provider in self.providers:
            if not provider.available:
                logger.info(f"Skipping {provider.name}: no API key configured")
                continue

            try:
                collected = self._run_queries(provider, queries)
            except ProviderError as exc:
                logger.warning(
                    f"{provider.name} failed for '{request.word}' "
                    f"(status={exc.status_code}): {exc}"
                )
                continue

            ranked = rank_candidates(collected, self.cfg.max_ranked_candidates)
            if ranked:
                logger.info(f"✅ {len(ranked)} candidates from {provider.name} for '{request.word}'")
                return provider.name, ranked

            logger.info(f"{provider.name} returned no usable candidates for '{request.word}'")

        return None, []

    def search_urls(self, query: str, limit: int) -> List[str]:
        """URLs for a single free-text query from the first provider with results"""
        for provider in self.providers:
            if not provider.available:
                continue
            try:
                candidates = provider.search(query)
            except ProviderError as exc:
                logger.warning(f"{provider.name} failed for query '{query}' (status={exc.status_code}): {exc}")
                continue
            if candidates:
                return [c.url for c in rank_candidates(candidates, limit)]
        return []
