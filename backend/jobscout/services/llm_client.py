"""
Thin async wrapper around the OpenAI chat completions API.

Used for two jobs: turning a user's request into clean search queries (one
call, strict JSON object back) and summarizing results (streamed token by
token, or in one piece for the blocking endpoint).
"""
import json
import logging
from typing import AsyncIterator

from openai import AsyncOpenAI

from jobscout.config import settings

logger = logging.getLogger(__name__)


class LLMClient:
    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        timeout: float = 20.0,
    ):
        self.model = model
        self.client = AsyncOpenAI(api_key=api_key, timeout=timeout)

    def _messages(self, system: str, user: str) -> list[dict]:
        return [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ]

    async def complete(self, system: str, user: str, temperature: float = 0.2, max_tokens: int = 500) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            temperature=temperature,
            max_tokens=max_tokens,
            messages=self._messages(system, user),
        )
        return (response.choices[0].message.content or "").strip()

    async def complete_json(self, system: str, user: str, temperature: float = 0.3, max_tokens: int = 150) -> dict:
        """Single call that must come back as a JSON object; raises ValueError otherwise."""
        response = await self.client.chat.completions.create(
            model=self.model,
            temperature=temperature,
            max_tokens=max_tokens,
            response_format={"type": "json_object"},
            messages=self._messages(system, user),
        )
        content = _strip_code_fence(response.choices[0].message.content or "")
        try:
            parsed = json.loads(content or "{}")
        except json.JSONDecodeError as exc:
            raise ValueError(f"Model returned invalid JSON: {content[:200]}") from exc
        if not isinstance(parsed, dict):
            raise ValueError("Model returned JSON that is not an object")
        return parsed

    async def stream(self, system: str, user: str, temperature: float = 0.2, max_tokens: int = 500) -> AsyncIterator[str]:
        """Yield response text chunks as the model produces them."""
        completion = await self.client.chat.completions.create(
            model=self.model,
            temperature=temperature,
            max_tokens=max_tokens,
            stream=True,
            messages=self._messages(system, user),
        )
        async for part in completion:
            if not part.choices:
                continue
            token = part.choices[0].delta.content
            if token:
                yield token

    async def close(self):
        await self.client.close()


def _strip_code_fence(text: str) -> str:
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def get_llm_client() -> LLMClient | None:
    """Client built from settings, or None when no API key is configured."""
    if not settings.openai_api_key:
        logger.info("No OpenAI API key configured; query cleanup and summaries disabled")
        return None
    return LLMClient(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        timeout=settings.llm_timeout_seconds,
    )
