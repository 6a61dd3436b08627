"""Completion provider for any OpenAI-compatible chat completions API."""

from __future__ import annotations

import asyncio

from openai import AsyncOpenAI

from litquery.exceptions import GenerationError
from litquery.observability.logger import get_logger

logger = get_logger("openai_provider")


class OpenAICompatibleProvider:
    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        timeout_seconds: float = 600.0,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._client = client or AsyncOpenAI(api_key=api_key, base_url=base_url)
        self._timeout = timeout_seconds

    async def complete(
        self,
        prompt: str,
        model: str,
        max_tokens: int,
        temperature: float = 0.7,
    ) -> str:
        try:
            response = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=model,
                    messages=[{"role": "user", "content": prompt}],
                    max_tokens=max_tokens,
                    temperature=temperature,
                ),
                timeout=self._timeout,
            )
        except TimeoutError as e:
            raise GenerationError(f"Completion timed out after {self._timeout:.0f}s") from e
        except Exception as e:
            raise GenerationError(f"Completion request failed: {e}") from e

        if not response.choices:
            raise GenerationError("Completion service returned no choices")
        text = response.choices[0].message.content or ""
        logger.info("completion_received", model=model, length=len(text))
        return text
