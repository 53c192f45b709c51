import logging
from typing import List, Optional

import httpx

from app.services.llm.interface import LLMClient, LLMResponse, LLMUnavailable, MalformedResponse, Message
from app.services.llm.proxy import build_async_client

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.openai.com/v1"


class OpenAIClient(LLMClient):
    """OpenAI chat-completions adapter over httpx. Single attempt, bounded by ``timeout``."""

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "gpt-4o",
        api_base: str = DEFAULT_API_BASE,
        proxy_url: Optional[str] = None,
        timeout: float = 30.0,
    ):
        if not api_key:
            raise ValueError("OPENAI_API_KEY not configured")
        self.api_key = api_key
        self.model = model
        self.endpoint = f"{api_base.rstrip('/')}/chat/completions"
        self.proxy_url = proxy_url
        self.timeout = timeout

    async def generate_text(
        self,
        messages: List[Message],
        model: Optional[str] = None,
        system_prompt: Optional[str] = None,
        max_tokens: int = 1000,
        temperature: float = 0.7,
        json_mode: bool = False,
    ) -> LLMResponse:
        api_messages = []
        if system_prompt:
            api_messages.append({"role": "system", "content": system_prompt})
        for msg in messages:
            api_messages.append({"role": msg.role, "content": msg.content})

        payload = {
            "model": model or self.model,
            "messages": api_messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with build_async_client(self.proxy_url, timeout=self.timeout) as client:
                resp = await client.post(self.endpoint, json=payload, headers=headers)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as e:
            logger.warning(f"OpenAI returned HTTP {e.response.status_code}")
            raise LLMUnavailable(f"OpenAI HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.warning(f"OpenAI request failed: {e!r}")
            raise LLMUnavailable(f"OpenAI request failed: {e}") from e
        except ValueError as e:
            raise MalformedResponse("OpenAI response body is not JSON") from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise MalformedResponse("OpenAI response has no message content") from e

        usage_data = data.get("usage") or {}
        return LLMResponse(
            content=content or "",
            model=data.get("model"),
            raw_response=data,
            usage={
                "input_tokens": usage_data.get("prompt_tokens", 0),
                "output_tokens": usage_data.get("completion_tokens", 0),
            },
        )
