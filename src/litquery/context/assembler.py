"""Turns ranked chunks into a bounded, citation-labeled prompt context."""

from __future__ import annotations

from litquery.models.domain import AssembledContext, ChunkMetadata, ContextEntry, ScoredChunk
from litquery.observability.logger import get_logger
from litquery.retrieval.selection import estimate_tokens

logger = get_logger("context_assembler")

DEFAULT_YEAR = 2020
MAX_TITLE_CHARS = 80


def shorten_authors(authors: str | None) -> str:
    """Compact author string: ``Smith J.``, ``Smith, Lee`` or ``Smith et al.``"""
    if not authors or not authors.strip():
        return "N/A"
    names = [a.strip() for a in authors.split(",") if a.strip()]
    if len(names) == 1:
        parts = names[0].split()
        if len(parts) == 1:
            return parts[0]
        return f"{parts[-1]} {parts[0][0]}."
    if len(names) <= 3:
        return ", ".join(n.split()[-1] for n in names)
    return f"{names[0].split()[-1]} et al."


def _short_title(title: str | None) -> str:
    title = title or "Unknown Title"
    if len(title) > MAX_TITLE_CHARS:
        return title[:MAX_TITLE_CHARS] + "..."
    return title


def format_header(index: int, chunk: ScoredChunk) -> str:
    meta: ChunkMetadata = chunk.metadata
    journal = (meta.journal or "Unknown Journal").split(" ")[0]
    year = meta.year or DEFAULT_YEAR
    return (
        f"[{index}] {_short_title(meta.title)} ({journal}, {year}) - "
        f"{shorten_authors(meta.authors)} - PMID:{meta.pmid or 'N/A'} "
        f"[{chunk.fused_score * 100:.1f}%]"
    )


class ContextAssembler:
    def assemble(
        self, query: str, chunks: list[ScoredChunk], max_tokens: int
    ) -> AssembledContext:
        """Add whole chunks in order until the next would pass ``max_tokens``.

        The first chunk is always included, however large.
        """
        blocks: list[str] = []
        entries: list[ContextEntry] = []
        years: list[int] = []
        total = 0

        for chunk in chunks:
            index = len(entries) + 1
            block = f"{format_header(index, chunk)}\n{chunk.content.strip()}\n"
            cost = estimate_tokens(block)
            if entries and total + cost > max_tokens:
                break
            blocks.append(block)
            entries.append(ContextEntry(citation_index=index, chunk=chunk))
            years.append(chunk.metadata.year or DEFAULT_YEAR)
            total += cost

        year_span = f"{min(years)}-{max(years)}" if years else "n/a"
        summary = (
            f'Research Context: {len(entries)} sources ({year_span}) - Query: "{query}"\n\n'
        )
        text = summary + "\n".join(blocks)
        if blocks:
            text += "\n"

        logger.info(
            "context_assembled",
            sources=len(entries),
            dropped=len(chunks) - len(entries),
            tokens=total,
            ceiling=max_tokens,
        )
        return AssembledContext(text=text, entries=entries, token_estimate=estimate_tokens(text))
