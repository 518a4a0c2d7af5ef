"""
Shared OpenAI client construction.
"""
import logging
from typing import Optional

from openai import OpenAI

from image_pipeline.config import AppConfig

logger = logging.getLogger(__name__)


def build_openai_client(cfg: AppConfig) -> Optional[OpenAI]:
    """Return a client, or None when OPENAI_API_KEY is not configured"""
    if not cfg.openai_api_key:
        logger.warning("OPENAI_API_KEY not set, LLM steps will be skipped")
        return None
    try:
        return OpenAI(api_key=cfg.openai_api_key, timeout=cfg.openai_timeout)
    except Exception as e:
        logger.error(f"Failed to initialize OpenAI client: {e}")
        return None
