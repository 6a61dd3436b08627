"""Protocol for completion providers."""

from __future__ import annotations

from typing import Protocol


class CompletionProvider(Protocol):
    async def complete(
        self,
        prompt: str,
        model: str,
        max_tokens: int,
        temperature: float = 0.7,
    ) -> str: ...
