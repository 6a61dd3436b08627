"""Text preprocessing for BM25 keyword search."""

from __future__ import annotations

import re

from litquery.config.constants import ENGLISH_STOPWORDS


def tokenize(text: str) -> list[str]:
    """Lowercase, strip punctuation except in-word hyphens, drop stop-words and 1-char tokens."""
    text = text.lower()
    text = re.sub(r"['’]", "", text)
    text = re.sub(r"[^\w\s-]", " ", text)
    tokens = [t.strip("-") for t in text.split()]
    return [t for t in tokens if len(t) > 1 and t not in ENGLISH_STOPWORDS]
