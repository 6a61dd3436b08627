"""Submission guard: rate limiting, input validation and knob sanitization."""

from __future__ import annotations

import re

from litquery.api.rate_limiter import FixedWindowRateLimiter
from litquery.config.constants import BLOCKED_TERMS, COMPLEXITY_TIERS, SUSPICIOUS_PATTERNS
from litquery.config.corpora import CorpusRegistry
from litquery.config.settings import Settings
from litquery.exceptions import InputValidationError
from litquery.models.domain import QueryParams
from litquery.models.schemas import QueryRequest
from litquery.observability.logger import get_logger

logger = get_logger("submission_guard")

MAX_CHUNKS_PER_PAPER = (1, 10)
TARGET_TOKENS = (100, 10000)
SIMILARITY_THRESHOLD = (0.1, 1.0)
FUSION_WEIGHT = (0.0, 1.0)

DISALLOWED_CONTENT = "Query contains disallowed content"

_BLOCKED_RE = re.compile(
    r"\b(?:" + "|".join(re.escape(t) for t in BLOCKED_TERMS) + r")\b",
    re.IGNORECASE,
)


def clamp(value: float, bounds: tuple[float, float]) -> float:
    low, high = bounds
    return min(max(value, low), high)


def is_abusive(text: str) -> bool:
    if any(p.search(text) for p in SUSPICIOUS_PATTERNS):
        return True
    return _BLOCKED_RE.search(text) is not None


class SubmissionGuard:
    def __init__(
        self,
        settings: Settings,
        corpora: CorpusRegistry,
        rate_limiter: FixedWindowRateLimiter,
    ) -> None:
        self._settings = settings
        self._corpora = corpora
        self._limiter = rate_limiter

    def admit(self, request: QueryRequest, client: str, concurrent: bool = False) -> QueryParams:
        """Rate-limit then validate a request.

        With ``concurrent`` an in-flight slot is held on success; the caller
        returns it with ``release``.
        """
        self._limiter.acquire(client, concurrent=concurrent)
        try:
            return self.validate(request)
        except Exception:
            if concurrent:
                self._limiter.release(client)
            raise

    def release(self, client: str) -> None:
        self._limiter.release(client)

    def validate(self, request: QueryRequest) -> QueryParams:
        s = self._settings
        errors: list[str] = []
        query = request.query.strip()

        if not query:
            errors.append("Query is required")
        elif len(query) > s.max_query_length:
            errors.append(f"Query too long (max {s.max_query_length} characters)")
        elif len(query) < s.min_query_length:
            errors.append(f"Query too short (minimum {s.min_query_length} characters)")
        elif is_abusive(query):
            logger.warning("abusive_query_rejected", length=len(query))
            errors.append(DISALLOWED_CONTENT)

        corpus_id = request.corpus_id.strip()
        if not corpus_id:
            errors.append("Corpus id is required")

        if errors:
            raise InputValidationError(errors)

        self._corpora.resolve(corpus_id)
        return QueryParams(
            corpus_id=corpus_id,
            query=query,
            model=self._pick_model(request.model),
            complexity=self._pick_complexity(request.complexity),
            enable_verification=request.enable_verification,
            max_chunks_per_paper=int(
                clamp(_or(request.max_chunks_per_paper, s.default_max_chunks_per_paper),
                      MAX_CHUNKS_PER_PAPER)
            ),
            target_tokens=(
                int(clamp(request.target_tokens, TARGET_TOKENS))
                if request.target_tokens is not None
                else None
            ),
            similarity_threshold=clamp(
                _or(request.similarity_threshold, s.default_similarity_threshold),
                SIMILARITY_THRESHOLD,
            ),
            vector_weight=clamp(_or(request.vector_weight, s.default_vector_weight), FUSION_WEIGHT),
            text_weight=clamp(_or(request.text_weight, s.default_text_weight), FUSION_WEIGHT),
            output_style=_pick_style(request.output_style),
        )

    def _pick_model(self, model: str | None) -> str:
        model = (model or "").strip()
        if model in self._settings.available_models:
            return model
        return self._settings.default_model

    def _pick_complexity(self, complexity: str | None) -> str:
        complexity = (complexity or "").strip()
        if complexity in COMPLEXITY_TIERS:
            return complexity
        return self._settings.default_complexity


def _pick_style(style: str | None) -> str:
    return "narrative" if (style or "").strip() == "narrative" else "structured"


def _or(value, default):
    return default if value is None else value
