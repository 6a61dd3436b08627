"""Fused relevance: weighted blend of vector similarity and lexical relevance."""

from __future__ import annotations

from litquery.models.domain import FusionWeights


def normalize_lexical(raw_score: float, normalizer: float = 10.0) -> float:
    """Scale a raw BM25 score into [0, 1]."""
    if raw_score <= 0:
        return 0.0
    return min(raw_score / normalizer, 1.0)


def fused_score(vector_score: float, lexical_score: float, weights: FusionWeights) -> float:
    """Combine scores; a zero weight selects the other signal outright."""
    if weights.vector == 0:
        return lexical_score
    if weights.lexical == 0:
        return vector_score
    return weights.vector * vector_score + weights.lexical * lexical_score
