"""
Flashcard image validation with the vision model.
"""
import json
import logging
from typing import Optional

from image_pipeline.config import AppConfig, config as default_config
from image_pipeline.types import ValidationResult
from image_pipeline.services.openai_client import build_openai_client

logger = logging.getLogger(__name__)


VALIDATION_SYSTEM_PROMPT = """Du bist ein Experte für Bildvalidierung in Kinder-Lern-Apps.
Analysiere das Bild und prüfe ob es perfekt für deutsche Kinder (6-11 Jahre) geeignet ist, die Englisch lernen.

Bewerte streng nach diesen Kriterien:
1. Zeigt das Bild GENAU das englische Wort "{word}" (deutsch: "{translation}")?
2. Ist es für Kinder klar erkennbar und eindeutig?
3. Ist es kinderfreundlich (keine Gewalt, nichts Verstörendes)?
4. Ist das Hauptobjekt groß und deutlich sichtbar?
5. Passt es zur Kategorie "{category}"?

Antworte nur mit JSON in diesem Format:
{{
  "isValid": boolean,
  "confidence": number (0-1),
  "reasoning": "Detaillierte Begründung auf Deutsch",
  "childFriendly": boolean,
  "suggestedReplacement": "Falls ungültig, bessere Suchbegriffe vorschlagen"
}}"""


class ImageValidatorService:
    """Checks whether an image matches a word and is child friendly"""

    def __init__(self, client=None, cfg: Optional[AppConfig] = None):
        self.cfg = cfg or default_config
        self.client = client if client is not None else build_openai_client(self.cfg)
        self.model = self.cfg.vision_model

    @property
    def available(self) -> bool:
        return self.client is not None

    @staticmethod
    def failure_result(english_word: str) -> ValidationResult:
        return ValidationResult(
            is_valid=False,
            confidence=0.0,
            reasoning='Technischer Fehler bei der Bildanalyse',
            child_friendly=False,
            suggested_replacement=f'{english_word} for children clear simple',
        )

    def validate_image(
        self,
        image_url: str,
        english_word: str,
        german_translation: str,
        category: str,
    ) -> ValidationResult:
        """
        Validate a single image.

        Never raises: API and parse errors produce a conservative invalid
        result with a suggested search phrase.
        """
        if not self.available:
            return self.failure_result(english_word)

        system_prompt = VALIDATION_SYSTEM_PROMPT.format(
            word=english_word,
            translation=german_translation,
            category=category,
        )
        user_text = (
            f'Prüfe dieses Bild für das englische Wort "{english_word}" '
            f'(deutsch: "{german_translation}") in der Kategorie "{category}"'
        )

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": user_text},
                            {"type": "image_url", "image_url": {"url": image_url}},
                        ],
                    },
                ],
                response_format={"type": "json_object"},
                max_tokens=500,
            )
            result = json.loads(response.choices[0].message.content or '{}')
            confidence = max(0.0, min(1.0, float(result.get('confidence') or 0)))
        except Exception as e:
            logger.error(f"Image validation failed for '{english_word}': {e}")
            return self.failure_result(english_word)

        return ValidationResult(
            is_valid=result.get('isValid') is True,
            confidence=confidence,
            reasoning=result.get('reasoning') or 'Keine Analyse verfügbar',
            child_friendly=result.get('childFriendly') is True,
            suggested_replacement=result.get('suggestedReplacement') or None,
        )
