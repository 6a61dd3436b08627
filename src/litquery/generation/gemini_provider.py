"""Google Gemini completion provider using the google-genai SDK."""

from __future__ import annotations

import asyncio

from google import genai
from google.genai import types

from litquery.exceptions import GenerationError
from litquery.observability.logger import get_logger

logger = get_logger("gemini")


class GeminiProvider:
    """Requested model names belong to the OpenAI-compatible catalogue, so
    this provider always answers with its own configured Gemini model."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        timeout_seconds: float = 600.0,
    ) -> None:
        self._client = genai.Client(api_key=api_key)
        self._model = model
        self._timeout = timeout_seconds

    async def complete(
        self,
        prompt: str,
        model: str,
        max_tokens: int,
        temperature: float = 0.7,
    ) -> str:
        config = types.GenerateContentConfig(
            temperature=temperature,
            max_output_tokens=max_tokens,
        )
        try:
            response = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=self._model,
                    contents=prompt,
                    config=config,
                ),
                timeout=self._timeout,
            )
        except TimeoutError as e:
            raise GenerationError(f"Gemini generation timed out after {self._timeout:.0f}s") from e
        except Exception as e:
            raise GenerationError(f"Gemini generation failed: {e}") from e

        text = response.text or ""
        logger.info("completion_received", model=self._model, requested=model, length=len(text))
        return text
