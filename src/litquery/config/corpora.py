"""Corpus registry: which corpora exist and how their queries are embedded."""

from __future__ import annotations

import json
from pathlib import Path

from litquery.config.constants import SUPPORTED_DIMENSIONS
from litquery.exceptions import ConfigurationError, NotFoundError
from litquery.models.domain import CorpusConfig
from litquery.observability.logger import get_logger

logger = get_logger("corpora")

MPNET = "sentence-transformers/all-mpnet-base-v2"
MINILM = "sentence-transformers/all-MiniLM-L6-v2"

DEFAULT_CORPORA = [
    CorpusConfig("rag-gene-regulation", "Gene Regulation Evolution", MPNET, 768,
                 "Gene Regulation", "Research papers on gene regulation and evolutionary biology"),
    CorpusConfig("rag-genome-evolution", "Genome Evolution", MINILM, 384,
                 "Evolutionary Genomics", "Research papers on genome evolution and comparative genomics"),
    CorpusConfig("rag-transcription-factors", "Transcription Factors", MPNET, 768,
                 "Transcriptional Regulation", "Research papers on transcription factors and gene expression"),
    CorpusConfig("pin1-cancer", "PIN1 and Cancer", MPNET, 768,
                 "Cancer Biology", "Research papers on PIN1 protein and cancer mechanisms"),
    CorpusConfig("rag-carbonic-anhydrases", "Carbonic Anhydrases", MINILM, 384,
                 "Carbonic Anhydrases", "Research papers on Carbonic Anhydrases"),
    CorpusConfig("rag-ovarian-cancer", "Ovarian Cancer", MINILM, 384,
                 "Ovarian Cancer", "Research papers on ovarian cancer"),
    CorpusConfig("rag-scRNA-Seq", "scRNA-Seq", MPNET, 768,
                 "Gene Regulation", "Research papers on scRNA-Seq"),
    CorpusConfig("rag-Wnts", "Wnts", MPNET, 768,
                 "Wnt Signalling", "Research papers on Wnt Signalling"),
    CorpusConfig("rag-FOXO3", "FOXO3", MPNET, 768, "FOXO3", "Research papers on FOXO3"),
    CorpusConfig("rag-DYRK1B", "DYRK1B", MPNET, 768, "DYRK1B", "Research papers on DYRK1B"),
]


class CorpusRegistry:
    def __init__(self, corpora: list[CorpusConfig]) -> None:
        self._corpora = {c.corpus_id: c for c in corpora}

    @classmethod
    def from_file(cls, path: str | Path) -> CorpusRegistry:
        """Load a JSON list of corpus entries (keys match CorpusConfig fields)."""
        with open(path) as f:
            entries = json.load(f)
        try:
            corpora = [CorpusConfig(**entry) for entry in entries]
        except TypeError as e:
            raise ConfigurationError(f"Malformed corpus registry {path}: {e}") from e
        logger.info("corpus_registry_loaded", path=str(path), count=len(corpora))
        return cls(corpora)

    @classmethod
    def default(cls) -> CorpusRegistry:
        return cls(DEFAULT_CORPORA)

    def resolve(self, corpus_id: str) -> CorpusConfig:
        corpus = self._corpora.get(corpus_id)
        if corpus is None:
            raise NotFoundError(f"Corpus not found: {corpus_id}")
        if not corpus.embedding_model:
            raise ConfigurationError(f"Corpus {corpus_id} has no embedding model")
        if corpus.dimensions not in SUPPORTED_DIMENSIONS:
            raise ConfigurationError(
                f"Corpus {corpus_id} declares unsupported dimensionality {corpus.dimensions}"
            )
        return corpus

    def entries(self) -> list[CorpusConfig]:
        return list(self._corpora.values())

    def __contains__(self, corpus_id: str) -> bool:
        return corpus_id in self._corpora
