"""Query embedding through an OpenAI-compatible embeddings endpoint."""

from __future__ import annotations

import asyncio

from openai import AsyncOpenAI

from litquery.exceptions import EmbeddingError
from litquery.observability.logger import get_logger

logger = get_logger("embeddings")


class OpenAIEmbedder:
    """The model is chosen per call because each corpus was embedded with its own model."""

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        timeout_seconds: float = 600.0,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._client = client or AsyncOpenAI(api_key=api_key, base_url=base_url)
        self._timeout = timeout_seconds

    async def embed(self, text: str, model: str) -> list[float]:
        try:
            response = await asyncio.wait_for(
                self._client.embeddings.create(input=[text], model=model, encoding_format="float"),
                timeout=self._timeout,
            )
            embedding = response.data[0].embedding
        except TimeoutError as e:
            raise EmbeddingError(f"Embedding timed out after {self._timeout:.0f}s") from e
        except Exception as e:
            raise EmbeddingError(f"Failed to embed query: {e}") from e
        logger.info("embedded_query", model=model, dimensions=len(embedding))
        return embedding
