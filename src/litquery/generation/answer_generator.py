"""Answer generation from an assembled, citation-labeled context."""

from __future__ import annotations

from litquery.config.constants import COMPLEXITY_TIERS
from litquery.exceptions import GenerationError
from litquery.generation.prompt_templates import build_answer_prompt
from litquery.models.domain import AssembledContext, CorpusConfig, QueryParams
from litquery.observability.logger import get_logger
from litquery.protocols.llm import CompletionProvider

logger = get_logger("generation")


class AnswerGenerator:
    def __init__(self, llm: CompletionProvider, temperature: float = 0.7) -> None:
        self._llm = llm
        self._temperature = temperature

    async def generate(
        self,
        params: QueryParams,
        corpus: CorpusConfig,
        context: AssembledContext,
    ) -> str:
        tier = COMPLEXITY_TIERS[params.complexity]
        prompt = build_answer_prompt(
            query=params.query,
            context=context.text,
            corpus_name=corpus.display_name,
            instruction=tier["instruction"],
            output_style=params.output_style,
        )
        answer = await self._llm.complete(
            prompt,
            model=params.model,
            max_tokens=tier["max_tokens"],
            temperature=self._temperature,
        )
        if not answer.strip():
            raise GenerationError("Completion service returned an empty answer")

        logger.info(
            "generated_answer",
            model=params.model,
            style=params.output_style,
            prompt_chars=len(prompt),
            answer_len=len(answer),
        )
        return answer
