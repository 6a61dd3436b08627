"""Query expansion for embedding and reduction for lexical matching."""

from __future__ import annotations

import re
import unicodedata

from litquery.config.constants import (
    DOMAIN_TERMS,
    LEXICAL_STOPWORDS,
    SYNONYMS,
    SYNONYMS_PER_CONCEPT,
)
from litquery.observability.logger import get_logger

logger = get_logger("query_preprocessing")


def normalize(text: str) -> str:
    text = unicodedata.normalize("NFKC", text)
    return re.sub(r"\s+", " ", text).strip()


def expand_query(query: str, max_chars: int = 500) -> str:
    """Lower-case, append synonyms for matched domain concepts, drop repeated words.

    The result is the text sent to the embedding service.
    """
    lowered = normalize(query).lower()
    extra: list[str] = []
    for concept, synonyms in SYNONYMS.items():
        if concept in lowered:
            extra.extend(synonyms[1 : 1 + SYNONYMS_PER_CONCEPT])

    words = " ".join([lowered, *extra]).split(" ")
    unique = list(dict.fromkeys(w for w in words if w))
    expanded = " ".join(unique)[:max_chars]

    logger.debug("query_expanded", original_len=len(query), expanded_len=len(expanded))
    return expanded


def build_lexical_query(query: str, max_terms: int = 8) -> str:
    """Reduce a query to at most ``max_terms`` discriminative terms.

    Domain terms survive regardless of length or stop-word status.
    """
    text = normalize(query).lower()
    text = re.sub(r"['’]", "", text)
    text = re.sub(r"[^\w\s-]", " ", text)

    terms: list[str] = []
    for word in text.split():
        word = word.strip("-")
        if not word:
            continue
        if word in DOMAIN_TERMS or (len(word) > 2 and word not in LEXICAL_STOPWORDS):
            terms.append(word)
    return " ".join(terms[:max_terms])
