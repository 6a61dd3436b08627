"""Retrieval gateway: query preparation, embedding, fused top-K and narrowing."""

from __future__ import annotations

from dataclasses import dataclass

from litquery.config.constants import COMPLEXITY_TIERS
from litquery.exceptions import ConfigurationError
from litquery.models.domain import CorpusConfig, QueryParams, ScoredChunk
from litquery.observability.logger import get_logger
from litquery.protocols.embedder import Embedder
from litquery.query.preprocessing import build_lexical_query, expand_query
from litquery.retrieval.selection import apply_token_budget, cap_per_document
from litquery.storage.sqlite_chunk_store import SQLiteChunkStore

logger = get_logger("retrieval_gateway")


@dataclass
class PreparedQuery:
    expanded: str
    lexical: str


class RetrievalGateway:
    def __init__(
        self,
        store: SQLiteChunkStore,
        embedder: Embedder,
        context_max_distance: float = 0.5,
        display_max_distance: float = 0.9,
        display_limit: int = 100,
        token_budget_pool: int = 50,
        token_budget_reserve: int = 500,
        max_expanded_query_chars: int = 500,
        max_lexical_terms: int = 8,
    ) -> None:
        self._store = store
        self._embedder = embedder
        self._context_max_distance = context_max_distance
        self._display_max_distance = display_max_distance
        self._display_limit = display_limit
        self._token_budget_pool = token_budget_pool
        self._token_budget_reserve = token_budget_reserve
        self._max_expanded_chars = max_expanded_query_chars
        self._max_lexical_terms = max_lexical_terms

    def prepare(self, query: str) -> PreparedQuery:
        return PreparedQuery(
            expanded=expand_query(query, self._max_expanded_chars),
            lexical=build_lexical_query(query, self._max_lexical_terms),
        )

    async def embed(self, prepared: PreparedQuery, corpus: CorpusConfig) -> list[float]:
        vector = await self._embedder.embed(prepared.expanded, corpus.embedding_model)
        if len(vector) != corpus.dimensions:
            raise ConfigurationError(
                f"Embedding model {corpus.embedding_model} returned {len(vector)} dimensions; "
                f"corpus {corpus.corpus_id} expects {corpus.dimensions}"
            )
        return vector

    def candidate_limit(self, params: QueryParams) -> int:
        if params.target_tokens is not None:
            return self._token_budget_pool
        return COMPLEXITY_TIERS[params.complexity]["candidates"]

    async def find_candidates(
        self, params: QueryParams, vector: list[float], prepared: PreparedQuery
    ) -> list[ScoredChunk]:
        """Ranked candidates for the context, before any narrowing."""
        return await self._store.top_k_by_fused_score(
            params.corpus_id,
            vector,
            prepared.lexical,
            params.weights,
            limit=self.candidate_limit(params),
            max_distance=self._context_max_distance,
        )

    def select_context(self, params: QueryParams, candidates: list[ScoredChunk]) -> list[ScoredChunk]:
        selected = candidates
        if params.target_tokens is not None:
            selected = apply_token_budget(
                selected, params.target_tokens, params.query, self._token_budget_reserve
            )
        selected = cap_per_document(selected, params.max_chunks_per_paper)
        logger.info(
            "context_selected",
            candidates=len(candidates),
            selected=len(selected),
            target_tokens=params.target_tokens,
        )
        return selected

    async def find_all_matching(
        self, params: QueryParams, vector: list[float], prepared: PreparedQuery
    ) -> list[ScoredChunk]:
        """Wider display set, filtered to fused scores above the similarity threshold."""
        wide = await self._store.top_k_by_fused_score(
            params.corpus_id,
            vector,
            prepared.lexical,
            params.weights,
            limit=self._display_limit,
            max_distance=self._display_max_distance,
        )
        return [c for c in wide if c.fused_score > params.similarity_threshold]
