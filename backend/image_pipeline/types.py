"""
Shared types for the vocabulary image pipeline.
"""
from typing import Optional, Dict, Any
from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass
class WordRequest:
    """A vocabulary word that needs an illustration"""
    word: str
    translation: str = ""
    category: str = ""

    @property
    def key(self) -> str:
        return self.word.strip().lower()


@dataclass
class ImageCandidate:
    """Photo returned by one of the search providers"""
    url: str
    provider: str = ""
    description: str = ""
    downloads: Optional[int] = None  # None when the provider does not report it
    likes: Optional[int] = None
    width: int = 0
    height: int = 0
    provider_id: Optional[str] = None
    photographer: Optional[str] = None

    @property
    def pixel_area(self) -> int:
        return (self.width or 0) * (self.height or 0)


@dataclass
class ImageSearchResult:
    """Final answer of the resolution pipeline"""
    url: str
    confidence: float
    reasoning: str
    logic_check: bool
    source: str = ""


@dataclass
class CacheEntry:
    """Resolved image remembered for the lifetime of the process"""
    url: str
    confidence: float
    source: str
    reasoning: str = ""
    logic_check: bool = False
    generated_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


@dataclass
class EvaluationRecord:
    """Structured verdict from the vision model"""
    best_index: int = 0
    confidence: float = 0.0
    reasoning: str = ""
    logic_check: bool = False
    child_friendly: bool = False
    accepted: bool = False


@dataclass
class ValidationResult:
    """Verdict on an existing flashcard image"""
    is_valid: bool
    confidence: float
    reasoning: str
    child_friendly: bool
    suggested_replacement: Optional[str] = None

    @property
    def acceptable(self) -> bool:
        return self.is_valid and self.child_friendly and self.confidence >= 0.7


@dataclass
class VocabularyItem:
    """Word, translation and the image currently shown for it"""
    word: str
    translation: str
    image_url: str


# Helper functions for type conversions
def search_result_to_dict(result: ImageSearchResult) -> Dict[str, Any]:
    """Convert ImageSearchResult to the camelCase payload the client expects"""
    return {
        'bestImageUrl': result.url,
        'confidence': result.confidence,
        'reasoning': result.reasoning,
        'logicCheck': result.logic_check,
        'source': result.source,
    }


def cache_entry_from_result(result: ImageSearchResult) -> CacheEntry:
    return CacheEntry(
        url=result.url,
        confidence=result.confidence,
        source=result.source,
        reasoning=result.reasoning,
        logic_check=result.logic_check,
    )


def result_from_cache_entry(entry: CacheEntry) -> ImageSearchResult:
    return ImageSearchResult(
        url=entry.url,
        confidence=entry.confidence,
        reasoning=entry.reasoning,
        logic_check=entry.logic_check,
        source=entry.source,
    )


def validation_result_to_dict(validation: ValidationResult) -> Dict[str, Any]:
    """Convert ValidationResult to dict for serialization"""
    data = {
        'isValid': validation.is_valid,
        'confidence': validation.confidence,
        'reasoning': validation.reasoning,
        'childFriendly': validation.child_friendly,
    }
    if validation.suggested_replacement:
        data['suggestedReplacement'] = validation.suggested_replacement
    return data
