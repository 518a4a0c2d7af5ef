"""
Image generation service (OpenAI Images API).
"""
import logging
from typing import Optional

from image_pipeline.config import AppConfig, config as default_config
from image_pipeline.services.catalog import ImageCatalog, get_catalog
from image_pipeline.services.openai_client import build_openai_client

logger = logging.getLogger(__name__)


class ImageGeneratorService:
    """Requests a purpose-built flashcard illustration for a word"""

    def __init__(self, client=None, catalog: Optional[ImageCatalog] = None, cfg: Optional[AppConfig] = None):
        self.cfg = cfg or default_config
        self.client = client if client is not None else build_openai_client(self.cfg)
        self.catalog = catalog or get_catalog()
        self.model = self.cfg.image_model
        self.size = self.cfg.image_size

    @property
    def available(self) -> bool:
        return self.client is not None

    def generate(self, word: str, translation: str, category: str) -> Optional[str]:
        """
        Generate an illustration for ``word``.

        A single attempt is made; any failure returns None so the caller can
        move on to photo search.
        """
        if not self.available:
            logger.debug("Image generation skipped: no OpenAI client")
            return None

        prompt = self.catalog.generation_prompt(word, translation, category)
        logger.info(f"Generating image for '{word}' with {self.model}")

        try:
            response = self.client.images.generate(
                model=self.model,
                prompt=prompt,
                size=self.size,
                n=1,
            )
            url = response.data[0].url
        except Exception as e:
            logger.error(f"Image generation failed for '{word}': {e}")
            return None

        if not url:
            logger.warning(f"Image generation for '{word}' returned no URL")
            return None

        return url
