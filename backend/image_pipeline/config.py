"""
Configuration for the vocabulary image pipeline.
"""
import os
from dataclasses import dataclass


@dataclass
class AppConfig:
    """Application configuration loaded from environment variables"""

    # API keys (empty string means the step/provider is skipped)
    openai_api_key: str = ""
    unsplash_access_key: str = ""
    pixabay_api_key: str = ""
    pexels_api_key: str = ""

    # OpenAI models
    vision_model: str = "gpt-4o"
    image_model: str = "dall-e-3"
    image_size: str = "1024x1024"

    # Search
    results_per_query: int = 5
    max_ranked_candidates: int = 8
    query_pause_seconds: float = 0.2

    # Validation
    validation_pause_seconds: float = 1.0
    validator_candidates_per_query: int = 3

    # API timeouts (seconds)
    provider_timeout: int = 10
    openai_timeout: int = 60


def load_config() -> AppConfig:
    """Load configuration from environment variables"""
    return AppConfig(
        openai_api_key=os.getenv('OPENAI_API_KEY', ''),
        unsplash_access_key=os.getenv('UNSPLASH_ACCESS_KEY', ''),
        pixabay_api_key=os.getenv('PIXABAY_API_KEY', ''),
        pexels_api_key=os.getenv('PEXELS_API_KEY', ''),

        vision_model=os.getenv('OPENAI_VISION_MODEL', 'gpt-4o'),
        image_model=os.getenv('OPENAI_IMAGE_MODEL', 'dall-e-3'),
        image_size=os.getenv('OPENAI_IMAGE_SIZE', '1024x1024'),

        results_per_query=int(os.getenv('RESULTS_PER_QUERY', '5')),
        max_ranked_candidates=int(os.getenv('MAX_RANKED_CANDIDATES', '8')),
        query_pause_seconds=float(os.getenv('QUERY_PAUSE_SECONDS', '0.2')),

        validation_pause_seconds=float(os.getenv('VALIDATION_PAUSE_SECONDS', '1.0')),
        validator_candidates_per_query=int(os.getenv('VALIDATOR_CANDIDATES_PER_QUERY', '3')),

        provider_timeout=int(os.getenv('PROVIDER_TIMEOUT', '10')),
        openai_timeout=int(os.getenv('OPENAI_TIMEOUT', '60')),
    )


# Global config instance
config = load_config()
