import logging
from typing import Optional

from app.config import Settings, get_settings
from app.services.llm.interface import LLMClient
from app.services.llm.openai_client import OpenAIClient

logger = logging.getLogger(__name__)


def get_llm_client(settings: Optional[Settings] = None) -> Optional[LLMClient]:
    """
    Returns the configured LLM client, or None when no API key is set.
    Callers treat None as an unavailable provider and use their static fallbacks.
    """
    settings = settings or get_settings()
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set; AI features will use static fallbacks")
        return None
    return OpenAIClient(
        settings.openai_api_key,
        model=settings.openai_model,
        api_base=settings.openai_api_base,
        proxy_url=settings.llm_proxy_url,
        timeout=settings.llm_timeout_seconds,
    )
