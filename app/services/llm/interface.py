import json
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class Message(BaseModel):
    role: str
    content: str


class LLMResponse(BaseModel):
    content: str
    model: Optional[str] = None
    raw_response: Any = None
    usage: Dict[str, int] = {}


class LLMError(Exception):
    """Base class for failures talking to a language model."""


class LLMUnavailable(LLMError):
    """Provider could not be reached, rejected the request or is not configured."""


class MalformedResponse(LLMError):
    """Provider answered, but not with the JSON shape that was asked for."""


class LLMClient(ABC):
    """
    Abstract interface for LLM providers.
    """

    @abstractmethod
    async def generate_text(
        self,
        messages: List[Message],
        model: Optional[str] = None,
        system_prompt: Optional[str] = None,
        max_tokens: int = 1000,
        temperature: float = 0.7,
        json_mode: bool = False,
    ) -> LLMResponse:
        """
        Generates text based on the provided messages.
        """


_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*|\s*```$")


def parse_json_object(content: Optional[str]) -> Dict[str, Any]:
    """Decode a completion that must be a single JSON object."""
    if not content or not content.strip():
        raise MalformedResponse("Empty completion")
    text = _FENCE_PATTERN.sub("", content.strip())
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedResponse(f"Completion is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise MalformedResponse("Completion JSON is not an object")
    return data
