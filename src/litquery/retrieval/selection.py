"""Narrowing ranked candidates: token budget and per-document diversity cap."""

from __future__ import annotations

import json
import math
from collections import defaultdict

from litquery.config.constants import CHARS_PER_TOKEN
from litquery.models.domain import ScoredChunk


def estimate_tokens(text: str) -> int:
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def chunk_token_cost(chunk: ScoredChunk) -> int:
    serialized = json.dumps({"content": chunk.content, "metadata": chunk.metadata.to_dict()})
    return estimate_tokens(serialized)


def cap_per_document(chunks: list[ScoredChunk], max_per_document: int) -> list[ScoredChunk]:
    """Keep at most ``max_per_document`` chunks from each source document.

    Input order (fused score, descending) is preserved.
    """
    counts: dict[str, int] = defaultdict(int)
    kept = []
    for chunk in chunks:
        key = chunk.metadata.document_key
        if counts[key] < max_per_document:
            counts[key] += 1
            kept.append(chunk)
    return kept


def apply_token_budget(
    chunks: list[ScoredChunk],
    target_tokens: int,
    query: str,
    reserve: int = 500,
) -> list[ScoredChunk]:
    """Select chunks whose estimated cost fits ``target_tokens``.

    The first pass takes the best chunk of each document until one does not
    fit; the second fills what remains in score order, again stopping at the
    first chunk that does not fit. At least one chunk is always returned when
    any exist.
    """
    if not chunks:
        return []

    overhead = estimate_tokens(f'Research Context: Query: "{query}"\n\n') + reserve
    available = target_tokens - overhead
    if available <= 0:
        return chunks[:1]

    selected: list[ScoredChunk] = []
    selected_ids: set[str] = set()
    seen_docs: set[str] = set()
    total = 0

    for chunk in chunks:
        key = chunk.metadata.document_key
        if key in seen_docs:
            continue
        cost = chunk_token_cost(chunk)
        if total + cost > available:
            break
        selected.append(chunk)
        selected_ids.add(chunk.chunk_id)
        seen_docs.add(key)
        total += cost

    for chunk in chunks:
        if chunk.chunk_id in selected_ids:
            continue
        cost = chunk_token_cost(chunk)
        if total + cost > available:
            break
        selected.append(chunk)
        selected_ids.add(chunk.chunk_id)
        total += cost

    if not selected:
        return chunks[:1]
    return sorted(selected, key=lambda c: c.fused_score, reverse=True)
