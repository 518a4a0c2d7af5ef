"""
Static lookup tables for the image pipeline.

Prompts, semantic rules, query templates and curated fallback URLs are kept as
JSON resource files under ``image_pipeline/data`` and loaded once per process.
"""
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from image_pipeline.types import VocabularyItem

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent.parent / 'data'


@dataclass
class ImageCatalog:
    """Hand-curated tables keyed by lowercased word and category"""
    generation_prompts: Dict[str, Any] = field(default_factory=dict)
    semantic_rules: Dict[str, str] = field(default_factory=dict)
    curated_fallbacks: Dict[str, Any] = field(default_factory=dict)
    educational_images: Dict[str, Any] = field(default_factory=dict)
    search_queries: Dict[str, List[str]] = field(default_factory=dict)
    family_vocabulary: List[VocabularyItem] = field(default_factory=list)

    def generation_prompt(self, word: str, translation: str, category: str) -> str:
        """Per-word prompt if one exists, otherwise the generic template."""
        prompts = self.generation_prompts.get('words', {})
        prompt = prompts.get(word.strip().lower())
        if prompt:
            return prompt
        template = self.generation_prompts.get('generic', 'A children\'s illustration of a {word}.')
        return template.format(word=word, translation=translation or word, category=category)

    def semantic_rule(self, word: str) -> Optional[str]:
        return self.semantic_rules.get(word.strip().lower())

    def queries(self, kind: str, word: str, translation: str, category: str) -> List[str]:
        templates = self.search_queries.get(kind, [])
        return [
            t.format(word=word, translation=translation or word, category=category).strip()
            for t in templates
        ]

    def educational_urls(self, word: str) -> List[str]:
        """Known-good candidate URLs used by the validator search."""
        urls = self.educational_images.get('words', {}).get(word.strip().lower())
        if urls:
            return list(urls)
        return [u.format(word=word) for u in self.educational_images.get('generic', [])]

    def get_curated_fallback_image(self, word: str, category: str) -> Tuple[str, bool]:
        """
        Look up the hand-picked image for a word.

        Order: word in its category, word in any category, category default,
        global default.

        Returns:
            (url, per_word) where per_word tells whether the URL was picked for
            this specific word.
        """
        word_key = word.strip().lower()
        category_key = (category or '').strip().lower()
        categories = self.curated_fallbacks.get('categories', {})

        category_table = categories.get(category_key, {})
        urls = category_table.get('words', {}).get(word_key)
        if urls:
            return urls[0], True

        for name, table in categories.items():
            urls = table.get('words', {}).get(word_key)
            if urls:
                logger.debug(f"Curated fallback for '{word}' found under category '{name}'")
                return urls[0], True

        if category_table.get('default'):
            return category_table['default'], False

        return self.curated_fallbacks.get('default', ''), False


def _read_json(name: str, data_dir: Path) -> Any:
    path = data_dir / name
    with path.open(encoding='utf-8') as fh:
        return json.load(fh)


def load_catalog(data_dir: Path = DATA_DIR) -> ImageCatalog:
    """Load all resource tables from ``data_dir``"""
    family = [
        VocabularyItem(
            word=entry['word'],
            translation=entry['translation'],
            image_url=entry['imageUrl'],
        )
        for entry in _read_json('family_vocabulary.json', data_dir)
    ]
    catalog = ImageCatalog(
        generation_prompts=_read_json('generation_prompts.json', data_dir),
        semantic_rules=_read_json('semantic_rules.json', data_dir),
        curated_fallbacks=_read_json('curated_fallbacks.json', data_dir),
        educational_images=_read_json('educational_images.json', data_dir),
        search_queries=_read_json('search_queries.json', data_dir),
        family_vocabulary=family,
    )
    logger.info(
        f"Loaded image catalog: {len(catalog.semantic_rules)} rules, "
        f"{len(catalog.curated_fallbacks.get('categories', {}))} curated categories"
    )
    return catalog


# Global singleton
_catalog: Optional[ImageCatalog] = None


def get_catalog() -> ImageCatalog:
    """Get or load the global image catalog"""
    global _catalog
    if _catalog is None:
        _catalog = load_catalog()
    return _catalog


# Convenience function
def get_curated_fallback_image(word: str, category: str) -> str:
    """Curated fallback URL for a word"""
    url, _ = get_catalog().get_curated_fallback_image(word, category)
    return url
