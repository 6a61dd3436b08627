"""Second-pass fact check of a drafted answer against its sources."""

from __future__ import annotations

import re

from litquery.generation.prompt_templates import VERIFICATION_PROMPT, format_sources_block
from litquery.models.domain import ContextEntry, VerificationResult
from litquery.observability.logger import get_logger
from litquery.protocols.llm import CompletionProvider

logger = get_logger("claim_verifier")

_VERIFIED_RE = re.compile(r"VERIFIED_RESPONSE:\s*(.*?)CONFIDENCE:", re.DOTALL)
_CONFIDENCE_RE = re.compile(r"CONFIDENCE:\s*(\d+)")


class ClaimVerifier:
    """Never raises: any failure returns the draft unchanged at neutral confidence."""

    def __init__(
        self,
        llm: CompletionProvider,
        max_tokens: int = 800,
        temperature: float = 0.1,
        neutral_confidence: int = 50,
    ) -> None:
        self._llm = llm
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._neutral = neutral_confidence

    async def verify(
        self, answer: str, entries: list[ContextEntry], model: str
    ) -> VerificationResult:
        prompt = VERIFICATION_PROMPT.format(
            response=answer, sources_block=format_sources_block(entries)
        )
        try:
            raw = await self._llm.complete(
                prompt,
                model=model,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
            )
        except Exception as e:
            logger.warning("verification_failed", error=str(e))
            return self._neutral_result(answer)

        result = self.parse(raw, answer)
        logger.info("verification", confidence=result.confidence, degraded=result.degraded)
        return result

    def parse(self, raw: str, answer: str) -> VerificationResult:
        verified = _VERIFIED_RE.search(raw)
        confidence = _CONFIDENCE_RE.search(raw)
        if confidence is None:
            logger.warning("verification_unparseable", length=len(raw))
            return self._neutral_result(answer)

        response = verified.group(1).strip() if verified else ""
        return VerificationResult(
            response=response or answer,
            confidence=max(0, min(100, int(confidence.group(1)))),
            degraded=False,
        )

    def _neutral_result(self, answer: str) -> VerificationResult:
        return VerificationResult(response=answer, confidence=self._neutral, degraded=True)
