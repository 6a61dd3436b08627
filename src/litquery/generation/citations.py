"""Post-hoc scan of an answer for the sources it references."""

from __future__ import annotations

import re

from litquery.models.domain import ContextEntry

_INDEX_PATTERNS = [
    re.compile(r"\[(\d+)\]"),
    re.compile(r"\bSource\s+(\d+)", re.IGNORECASE),
    re.compile(r"\(\s*(\d+)\s*\)"),
]
_PMID_PATTERN = re.compile(r"PMID:?\s*(\d+)", re.IGNORECASE)


def extract_cited_indices(answer: str, entries: list[ContextEntry]) -> set[int]:
    """Citation indices of context entries the answer appears to reference.

    Numeric markers count only when they name an existing citation label;
    PMIDs count for every entry from that document.
    """
    valid = {e.citation_index for e in entries}
    cited: set[int] = set()

    for pattern in _INDEX_PATTERNS:
        for match in pattern.finditer(answer):
            index = int(match.group(1))
            if index in valid:
                cited.add(index)

    pmids = {m.group(1) for m in _PMID_PATTERN.finditer(answer)}
    if pmids:
        cited.update(e.citation_index for e in entries if e.chunk.metadata.pmid in pmids)
    return cited
