"""
Validation of existing flashcard images and search for validated replacements.
"""
import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional

from image_pipeline.config import AppConfig, config as default_config
from image_pipeline.types import ValidationResult, VocabularyItem, validation_result_to_dict
from image_pipeline.services.catalog import ImageCatalog, get_catalog
from image_pipeline.services.providers import ProviderChain
from image_pipeline.services.validator import ImageValidatorService
from image_pipeline.pipelines.resolver import ImageResolver, get_image_resolver

logger = logging.getLogger(__name__)


REPLACEMENT_MIN_CONFIDENCE = 0.7
FAMILY_RECHECK_CONFIDENCE = 0.8


class CategoryValidator:
    """Validates vocabulary images and looks for better ones"""

    def __init__(
        self,
        validator: Optional[ImageValidatorService] = None,
        chain: Optional[ProviderChain] = None,
        catalog: Optional[ImageCatalog] = None,
        resolver: Optional[ImageResolver] = None,
        cfg: Optional[AppConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.cfg = cfg or default_config
        self.catalog = catalog or get_catalog()
        self.validator = validator or ImageValidatorService(cfg=self.cfg)
        self.chain = chain or ProviderChain(catalog=self.catalog, cfg=self.cfg)
        self._resolver = resolver
        self.sleep = sleep

    @property
    def resolver(self) -> ImageResolver:
        if self._resolver is None:
            self._resolver = get_image_resolver()
        return self._resolver

    def _candidate_urls(self, query: str, english_word: str) -> List[str]:
        urls = list(self.chain.search_urls(query, self.cfg.validator_candidates_per_query))
        for url in self.catalog.educational_urls(english_word):
            if url not in urls:
                urls.append(url)
        return urls

    def find_validated_image(
        self,
        english_word: str,
        german_translation: str,
        category: str,
    ) -> Optional[Dict[str, Any]]:
        """
        Search for an image that passes validation.

        Returns:
            {"imageUrl": ..., "validation": ValidationResult} or None
        """
        queries = self.catalog.queries('validator', english_word, german_translation, category)
        checked = set()

        for query in queries:
            for image_url in self._candidate_urls(query, english_word):
                if image_url in checked:
                    continue
                checked.add(image_url)

                validation = self.validator.validate_image(
                    image_url, english_word, german_translation, category
                )
                if (
                    validation.is_valid
                    and validation.child_friendly
                    and validation.confidence > REPLACEMENT_MIN_CONFIDENCE
                ):
                    logger.info(f"✅ Validated replacement for '{english_word}': {image_url[:60]}")
                    return {'imageUrl': image_url, 'validation': validation}

        logger.info(f"No validated image found for '{english_word}' after {len(checked)} checks")
        return None

    def validate_category(self, items: List[VocabularyItem], category: str) -> List[Dict[str, Any]]:
        """Validate every item; unacceptable images get a replacement search."""
        results = []

        for i, item in enumerate(items):
            if i > 0 and self.cfg.validation_pause_seconds > 0:
                # Respect API rate limits
                self.sleep(self.cfg.validation_pause_seconds)

            logger.info(f"🔍 Checking image for '{item.word}'...")
            try:
                validation = self.validator.validate_image(
                    item.image_url, item.word, item.translation, category
                )
                entry: Dict[str, Any] = {
                    'word': item.word,
                    'validation': validation_result_to_dict(validation),
                }

                if not validation.acceptable:
                    logger.info(f"❌ Image for '{item.word}' is unsuitable: {validation.reasoning}")
                    better = self.find_validated_image(item.word, item.translation, category)
                    if better:
                        entry['newImageUrl'] = better['imageUrl']
                else:
                    logger.info(f"✅ Image for '{item.word}' is fine")

                results.append(entry)
            except Exception as e:
                logger.error(f"Validation of '{item.word}' failed: {e}", exc_info=True)
                results.append({
                    'word': item.word,
                    'validation': validation_result_to_dict(ValidationResult(
                        is_valid=False,
                        confidence=0.0,
                        reasoning='Validierung fehlgeschlagen',
                        child_friendly=False,
                    )),
                })

        return results

    def validate_family_category(self) -> Dict[str, Any]:
        """Validate the built-in family vocabulary and re-resolve weak images."""
        logger.info("🔍 Starting family category validation")
        vocabulary = self.catalog.family_vocabulary
        translations = {item.word: item.translation for item in vocabulary}
        validation_results = self.validate_category(vocabulary, 'family')

        improved_results = []
        for result in validation_results:
            word = result['word']
            validation = result['validation']
            good = (
                validation['isValid']
                and validation['childFriendly']
                and validation['confidence'] >= FAMILY_RECHECK_CONFIDENCE
            )
            if good:
                improved_results.append({
                    'word': word,
                    'originalValidation': validation,
                    'newImageUrl': None,
                    'alreadyGood': True,
                })
                continue

            logger.info(f"🔄 Looking for a better image for '{word}'")
            try:
                improved = self.resolver.find_best_image('family', word, translations.get(word, word))
                improved_results.append({
                    'word': word,
                    'originalValidation': validation,
                    'newImageUrl': improved.url,
                    'newImageConfidence': improved.confidence,
                    'logicCheckPassed': improved.logic_check,
                    'reasoning': improved.reasoning,
                })
            except Exception as e:
                logger.error(f"Could not find a better image for '{word}': {e}")
                improved_results.append({
                    'word': word,
                    'originalValidation': validation,
                    'newImageUrl': None,
                    'error': str(e),
                })

        summary = {
            'alreadyGood': sum(1 for r in improved_results if r.get('alreadyGood')),
            'improved': sum(1 for r in improved_results if r.get('newImageUrl') and not r.get('alreadyGood')),
            'failed': sum(
                1 for r in improved_results
                if r.get('error') or (not r.get('newImageUrl') and not r.get('alreadyGood'))
            ),
        }
        logger.info(f"🎯 Family validation done: {summary}")

        return {
            'totalWords': len(vocabulary),
            'validationResults': improved_results,
            'summary': summary,
        }


# Global singleton
_category_validator: Optional[CategoryValidator] = None
_category_validator_lock = threading.Lock()


def get_category_validator() -> CategoryValidator:
    """Get or create the global category validator"""
    global _category_validator
    if _category_validator is not None:
        return _category_validator

    with _category_validator_lock:
        if _category_validator is None:
            _category_validator = CategoryValidator()
    return _category_validator
