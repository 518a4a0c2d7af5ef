"""
Semantic evaluator: asks a vision-capable LLM to pick or judge flashcard images.
"""
import json
import logging
from typing import Any, Dict, List, Optional

from image_pipeline.config import AppConfig, config as default_config
from image_pipeline.types import EvaluationRecord, ImageCandidate
from image_pipeline.services.catalog import ImageCatalog, get_catalog
from image_pipeline.services.openai_client import build_openai_client

logger = logging.getLogger(__name__)


RANKING_PROMPT = """You are evaluating images for a children's English learning app.

Context:
- Category: "{category}"
- English word: "{word}"
- German translation: "{translation}"
- Target audience: German children aged 6-11

Task: Look at the {count} numbered images and determine which one is MOST suitable.

Evaluation criteria:
1. Semantic match: Does the image clearly show "{word}" in the context of "{category}"?
2. Child-appropriate: Is it safe and appropriate for children?
3. Clear and recognizable: Can a child easily identify what it shows?
4. Context accuracy: if the category is "motorcycle" and the word is "wheel", it must show a MOTORCYCLE wheel, not a bicycle or car wheel.
5. Visual quality: Is the image clear, well-lit and high quality?
{rule_block}
Candidates:
{listing}

Respond with JSON in this exact format:
{{
  "bestImageIndex": 1,
  "confidence": 0.9,
  "reasoning": "Why this image is the best match and what is wrong with the others",
  "logicCheck": true,
  "childFriendly": true
}}
"logicCheck" must be false if the chosen image breaks the rule above."""


JUDGE_PROMPT = """You are checking a single illustration for a children's English learning app.

- Category: "{category}"
- English word: "{word}"
- German translation: "{translation}"
{rule_block}
Does the image show exactly what the word means, and is it suitable for children aged 6-11?

Respond with JSON in this exact format:
{{
  "confidence": 0.9,
  "reasoning": "Short explanation",
  "logicCheck": true,
  "childFriendly": true
}}"""


def _rule_block(rule: Optional[str]) -> str:
    if not rule:
        return ""
    return f"\nMandatory rule for this word: {rule}\n"


def reject_record(reason: str) -> EvaluationRecord:
    """Conservative verdict used whenever the evaluator cannot decide"""
    return EvaluationRecord(
        best_index=0,
        confidence=0.0,
        reasoning=reason,
        logic_check=False,
        child_friendly=False,
        accepted=False,
    )


class SemanticEvaluator:
    """Vision-model judgement combined with fixed acceptance thresholds"""

    MIN_CONFIDENCE = 0.9
    MIN_DOWNLOADS = 50
    MIN_LIKES = 5

    def __init__(self, client=None, catalog: Optional[ImageCatalog] = None, cfg: Optional[AppConfig] = None):
        self.cfg = cfg or default_config
        self.client = client if client is not None else build_openai_client(self.cfg)
        self.catalog = catalog or get_catalog()
        self.model = self.cfg.vision_model

    @property
    def available(self) -> bool:
        return self.client is not None

    def _complete_json(self, prompt: str, image_urls: List[str]) -> Dict[str, Any]:
        content: List[Dict[str, Any]] = [{"type": "text", "text": prompt}]
        for url in image_urls:
            content.append({"type": "image_url", "image_url": {"url": url}})

        response = self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": content}],
            response_format={"type": "json_object"},
            max_tokens=500,
        )
        data = json.loads(response.choices[0].message.content or "{}")
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return data

    @staticmethod
    def _clamp(value: Any) -> float:
        try:
            return max(0.0, min(1.0, float(value)))
        except (TypeError, ValueError):
            return 0.0

    def meets_popularity(self, candidate: ImageCandidate) -> bool:
        if candidate.downloads is not None and candidate.downloads < self.MIN_DOWNLOADS:
            return False
        if candidate.likes is not None and candidate.likes < self.MIN_LIKES:
            return False
        return True

    def _accept(self, record: EvaluationRecord) -> bool:
        return (
            record.confidence >= self.MIN_CONFIDENCE
            and record.logic_check
            and record.child_friendly
        )

    def rank_candidates(
        self,
        candidates: List[ImageCandidate],
        word: str,
        translation: str,
        category: str,
    ) -> EvaluationRecord:
        """Pick the best candidate for ``word``; reject on any failure."""
        if not candidates:
            return reject_record("No candidates to evaluate")
        if not self.available:
            return reject_record("Semantic evaluation unavailable: OPENAI_API_KEY not configured")

        listing = "\n".join(
            f"{i + 1}. {c.url} (Description: {c.description or 'n/a'})"
            for i, c in enumerate(candidates)
        )
        prompt = RANKING_PROMPT.format(
            category=category,
            word=word,
            translation=translation,
            count=len(candidates),
            rule_block=_rule_block(self.catalog.semantic_rule(word)),
            listing=listing,
        )

        try:
            data = self._complete_json(prompt, [c.url for c in candidates])
            best_index = int(data.get("bestImageIndex", 0)) - 1
        except Exception as e:
            logger.error(f"Candidate ranking failed for '{word}': {e}")
            return reject_record(f"Evaluation error: {e}")

        if not 0 <= best_index < len(candidates):
            logger.error(f"Ranking for '{word}' returned out-of-range index {best_index + 1}")
            return reject_record("Evaluator returned an invalid image index")

        record = EvaluationRecord(
            best_index=best_index,
            confidence=self._clamp(data.get("confidence")),
            reasoning=str(data.get("reasoning") or f"Selected image {best_index + 1} for {category} - {word}"),
            logic_check=data.get("logicCheck") is True,
            child_friendly=data.get("childFriendly") is True,
        )
        record.accepted = self._accept(record) and self.meets_popularity(candidates[best_index])
        return record

    def judge_image(self, image_url: str, word: str, translation: str, category: str) -> EvaluationRecord:
        """Pass/fail a single image against the word's rule."""
        if not self.available:
            return reject_record("Semantic evaluation unavailable: OPENAI_API_KEY not configured")

        prompt = JUDGE_PROMPT.format(
            category=category,
            word=word,
            translation=translation,
            rule_block=_rule_block(self.catalog.semantic_rule(word)),
        )

        try:
            data = self._complete_json(prompt, [image_url])
        except Exception as e:
            logger.error(f"Image judgement failed for '{word}': {e}")
            return reject_record(f"Evaluation error: {e}")

        record = EvaluationRecord(
            best_index=0,
            confidence=self._clamp(data.get("confidence")),
            reasoning=str(data.get("reasoning") or ""),
            logic_check=data.get("logicCheck") is True,
            child_friendly=data.get("childFriendly") is True,
        )
        record.accepted = self._accept(record)
        return record
