"""
Image resolution pipeline.

Resolves a vocabulary word to one flashcard image:
1. Process cache
2. Generated illustration
3. Photo search (Unsplash -> Pixabay -> Pexels) ranked by the vision model
4. Curated fallback table

Every step after the cache is a strategy with ``attempt(request)``; the first
one that returns a result wins. The curated fallback always answers, so the
pipeline never comes back empty-handed.
"""
import logging
import threading
from typing import List, Optional

from image_pipeline.types import (
    ImageSearchResult,
    WordRequest,
    cache_entry_from_result,
    result_from_cache_entry,
    search_result_to_dict,
)
from image_pipeline.services.cache import ImageCache
from image_pipeline.services.catalog import ImageCatalog, get_catalog
from image_pipeline.services.evaluator import SemanticEvaluator
from image_pipeline.services.image_generator import ImageGeneratorService
from image_pipeline.services.providers import ProviderChain

logger = logging.getLogger(__name__)


GENERATED_CONFIDENCE = 0.9
CURATED_CONFIDENCE = 0.95
CURATED_DEFAULT_CONFIDENCE = 0.5


class ResolutionStrategy:
    """One tier of the fallback chain"""

    name = "strategy"

    def attempt(self, request: WordRequest) -> Optional[ImageSearchResult]:
        raise NotImplementedError


class GenerationStrategy(ResolutionStrategy):
    """Purpose-built illustration from the image model"""

    name = "generated"

    def __init__(self, generator: ImageGeneratorService, evaluator: SemanticEvaluator, catalog: ImageCatalog):
        self.generator = generator
        self.evaluator = evaluator
        self.catalog = catalog

    def attempt(self, request: WordRequest) -> Optional[ImageSearchResult]:
        url = self.generator.generate(request.word, request.translation, request.category)
        if not url:
            return None

        # Words with a hand-written rule (kinship terms etc.) get checked
        if self.catalog.semantic_rule(request.word):
            verdict = self.evaluator.judge_image(url, request.word, request.translation, request.category)
            if not verdict.accepted:
                logger.info(f"Generated image for '{request.word}' rejected: {verdict.reasoning}")
                return None
            return ImageSearchResult(
                url=url,
                confidence=verdict.confidence,
                reasoning=f"Generated illustration passed the semantic check: {verdict.reasoning}",
                logic_check=True,
                source=self.name,
            )

        return ImageSearchResult(
            url=url,
            confidence=GENERATED_CONFIDENCE,
            reasoning=f"Generated illustration for '{request.word}' ({request.category})",
            logic_check=True,
            source=self.name,
        )


class SearchStrategy(ResolutionStrategy):
    """Provider search with vision-model ranking"""

    name = "search"

    def __init__(self, chain: ProviderChain, evaluator: SemanticEvaluator):
        self.chain = chain
        self.evaluator = evaluator

    def attempt(self, request: WordRequest) -> Optional[ImageSearchResult]:
        # Without the vision model nothing could be accepted, so skip the provider calls
        if not self.evaluator.available:
            logger.info(f"Search skipped for '{request.word}': semantic evaluation unavailable")
            return None

        provider_name, candidates = self.chain.search_candidates(request)
        if not candidates:
            logger.info(f"No search candidates for '{request.word}'")
            return None

        verdict = self.evaluator.rank_candidates(
            candidates, request.word, request.translation, request.category
        )
        if not verdict.accepted:
            logger.info(
                f"Search candidates for '{request.word}' rejected "
                f"(confidence={verdict.confidence:.2f}, logic={verdict.logic_check}): {verdict.reasoning}"
            )
            return None

        best = candidates[verdict.best_index]
        return ImageSearchResult(
            url=best.url,
            confidence=verdict.confidence,
            reasoning=verdict.reasoning,
            logic_check=True,
            source=provider_name or best.provider,
        )


class CuratedFallbackStrategy(ResolutionStrategy):
    """Hand-picked URL from the static table; always answers"""

    name = "curated"

    def __init__(self, catalog: ImageCatalog):
        self.catalog = catalog

    def attempt(self, request: WordRequest) -> Optional[ImageSearchResult]:
        url, per_word = self.catalog.get_curated_fallback_image(request.word, request.category)
        if per_word:
            return ImageSearchResult(
                url=url,
                confidence=CURATED_CONFIDENCE,
                reasoning=f"Curated image for '{request.word}'",
                logic_check=True,
                source=self.name,
            )
        return ImageSearchResult(
            url=url,
            confidence=CURATED_DEFAULT_CONFIDENCE,
            reasoning=f"No specific image for '{request.word}', using the '{request.category}' default",
            logic_check=False,
            source=f"{self.name}-default",
        )


class ImageResolver:
    """Cache lookup followed by the ordered strategies"""

    def __init__(self, cache: ImageCache, strategies: List[ResolutionStrategy]):
        self.cache = cache
        self.strategies = strategies

    def find_best_image(self, category: str, word: str, translation: str) -> ImageSearchResult:
        request = WordRequest(word=word, translation=translation, category=category)

        cached = self.cache.lookup(request.key)
        if cached is not None:
            logger.info(f"Cache hit for '{request.word}' ({cached.source})")
            return result_from_cache_entry(cached)

        logger.info(f"=== Resolving image for '{request.word}' ({category}) ===")
        for strategy in self.strategies:
            try:
                result = strategy.attempt(request)
            except Exception as e:
                logger.error(f"{strategy.name} failed for '{request.word}': {e}", exc_info=True)
                continue
            if result is not None:
                logger.info(f"Resolved '{request.word}' via {strategy.name}: {result.url[:60]}")
                self.cache.store(request.key, cache_entry_from_result(result))
                return result
            logger.info(f"{strategy.name} gave no image for '{request.word}', trying next tier")

        raise RuntimeError(f"No strategy produced an image for '{request.word}'")


def build_image_resolver(
    cache: Optional[ImageCache] = None,
    catalog: Optional[ImageCatalog] = None,
    generator: Optional[ImageGeneratorService] = None,
    evaluator: Optional[SemanticEvaluator] = None,
    chain: Optional[ProviderChain] = None,
) -> ImageResolver:
    """Wire the default strategy order around ``cache``"""
    catalog = catalog or get_catalog()
    evaluator = evaluator or SemanticEvaluator(catalog=catalog)
    return ImageResolver(
        cache=cache if cache is not None else ImageCache(),
        strategies=[
            GenerationStrategy(generator or ImageGeneratorService(catalog=catalog), evaluator, catalog),
            SearchStrategy(chain or ProviderChain(catalog=catalog), evaluator),
            CuratedFallbackStrategy(catalog),
        ],
    )


# Global singleton; owns the one process-wide cache
_image_resolver: Optional[ImageResolver] = None
_image_resolver_lock = threading.Lock()


def get_image_resolver() -> ImageResolver:
    """Get or create the global image resolver"""
    global _image_resolver
    if _image_resolver is not None:
        return _image_resolver

    with _image_resolver_lock:
        # Another request thread may have built it while we waited
        if _image_resolver is None:
            _image_resolver = build_image_resolver()
    return _image_resolver


def find_best_image_json(category: str, word: str, translation: str) -> dict:
    """Resolve a word and return the client payload"""
    result = get_image_resolver().find_best_image(category, word, translation)
    return search_result_to_dict(result)
