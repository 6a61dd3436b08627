"""BM25 keyword index over one corpus, using rank_bm25."""

from __future__ import annotations

import numpy as np
from rank_bm25 import BM25Plus

from litquery.keyword_search.tokenizer import tokenize
from litquery.observability.logger import get_logger

logger = get_logger("bm25_index")


class BM25Index:
    """A text matches when it shares at least one token with the query.

    BM25+ keeps every term's IDF positive, so a matching text always scores
    above zero however common the term is in the corpus.
    """

    def __init__(self) -> None:
        self._bm25: BM25Plus | None = None
        self._token_sets: list[frozenset[str]] = []

    def build(self, texts: list[str]) -> None:
        """Build the index from chunk texts. Replaces any existing index."""
        tokenized = [tokenize(t) for t in texts]
        self._token_sets = [frozenset(tokens) for tokens in tokenized]
        # BM25Plus divides by corpus size; an empty corpus gets no index
        self._bm25 = BM25Plus(tokenized) if tokenized else None
        logger.info("bm25_built", size=len(tokenized))

    def matches(self, query: str) -> np.ndarray:
        """Boolean mask, in build order, of texts containing any query token."""
        terms = set(tokenize(query))
        return np.fromiter(
            (bool(terms & tokens) for tokens in self._token_sets),
            dtype=bool,
            count=len(self._token_sets),
        )

    def scores(self, query: str) -> np.ndarray:
        """Raw BM25 score per indexed text, in build order. Zero means no match."""
        mask = self.matches(query)
        if self._bm25 is None or not mask.any():
            return np.zeros(self.size, dtype=np.float64)
        raw = np.asarray(self._bm25.get_scores(tokenize(query)), dtype=np.float64)
        # BM25+ credits every query term found anywhere in the corpus
        return np.where(mask, raw, 0.0)

    @property
    def size(self) -> int:
        return len(self._token_sets)
