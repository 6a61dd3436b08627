"""Shared test fixtures."""

from __future__ import annotations

import math
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from litquery.config.corpora import CorpusRegistry
from litquery.config.settings import Settings
from litquery.models.domain import (
    ChunkMetadata,
    CorpusConfig,
    QueryParams,
    ScoredChunk,
    StoredChunk,
)

DIMENSIONS = 384
CORPUS_ID = "test-corpus"


def query_vector(dimensions: int = DIMENSIONS) -> list[float]:
    vector = [0.0] * dimensions
    vector[0] = 1.0
    return vector


def vector_with_similarity(similarity: float, slot: int, dimensions: int = DIMENSIONS) -> list[float]:
    """Unit vector whose cosine similarity to ``query_vector()`` is exactly ``similarity``."""
    vector = [0.0] * dimensions
    vector[0] = similarity
    vector[slot] = math.sqrt(1.0 - similarity**2)
    return vector


class FakeEmbedder:
    def __init__(self, dimensions: int = DIMENSIONS, error: Exception | None = None) -> None:
        self.dimensions = dimensions
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def embed(self, text: str, model: str) -> list[float]:
        self.calls.append((text, model))
        if self.error is not None:
            raise self.error
        return query_vector(self.dimensions)


class FakeLLM:
    """Returns scripted replies in order; an Exception entry is raised instead."""

    def __init__(self, replies: list | None = None) -> None:
        self.replies = list(replies or ["An answer citing [1] (2021, PMID:1001)."])
        self.calls: list[dict] = []

    async def complete(self, prompt: str, model: str, max_tokens: int, temperature: float = 0.7) -> str:
        self.calls.append(
            {"prompt": prompt, "model": model, "max_tokens": max_tokens, "temperature": temperature}
        )
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeClock:
    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def make_scored(
    chunk_id: str,
    score: float,
    pmid: str | None = "1001",
    content: str | None = None,
    year: int | None = 2021,
    **meta,
) -> ScoredChunk:
    return ScoredChunk(
        chunk_id=chunk_id,
        content=content if content is not None else f"Content of {chunk_id}.",
        metadata=ChunkMetadata(pmid=pmid, year=year, **meta),
        vector_score=score,
        lexical_score=0.0,
        fused_score=score,
    )


def make_params(**overrides) -> QueryParams:
    values = {
        "corpus_id": CORPUS_ID,
        "query": "How does PIN1 regulate cancer?",
        "model": "deepseek-ai/DeepSeek-V3.1",
        "complexity": "simple",
        "enable_verification": False,
        "max_chunks_per_paper": 3,
        "target_tokens": None,
        "similarity_threshold": 0.3,
        "vector_weight": 0.7,
        "text_weight": 0.3,
        "output_style": "narrative",
    }
    values.update(overrides)
    return QueryParams(**values)


SAMPLE_PAPERS = {
    "1001": {
        "title": "PIN1 isomerase drives cancer cell proliferation",
        "authors": "Alice Smith, Bob Jones, Carol White, Dan Brown",
        "year": 2021,
        "journal": "Cancer Research",
    },
    "1002": {
        "title": "Regulation of PIN1 by phosphorylation",
        "authors": "Erin Green",
        "year": 2019,
        "journal": "Molecular Cell",
    },
    "1003": {
        "title": "Calcium signalling in neurons",
        "authors": "Frank Black, Grace Hall",
        "year": 2018,
        "journal": "Neuron",
    },
    "1004": {
        "title": "Ribosome biogenesis under nutrient stress",
        "authors": "Hana Ito, Ivan Petrov",
        "year": 2017,
        "journal": "Cell Reports",
    },
}

# (pmid, chunk index, text, cosine similarity to the fake query vector)
SAMPLE_CHUNKS = [
    ("1001", 0, "PIN1 is overexpressed in many human cancer types and promotes tumor growth.", 0.95),
    ("1001", 1, "Inhibition of PIN1 reduces cancer cell proliferation in breast tumor models.", 0.9),
    ("1001", 2, "PIN1 knockout mice are resistant to several cancer models.", 0.85),
    ("1002", 0, "Phosphorylation of PIN1 regulates its isomerase activity in cancer cells.", 0.8),
    ("1004", 0, "Ribosome biogenesis rates scale with nutrient availability in yeast.", 0.6),
    ("1003", 0, "Calcium influx through voltage gated channels shapes synaptic plasticity.", 0.05),
]


def sample_stored_chunks(corpus_id: str = CORPUS_ID) -> list[StoredChunk]:
    return [
        StoredChunk(
            chunk_id=f"{pmid}-{index}",
            corpus_id=corpus_id,
            content=text,
            embedding=vector_with_similarity(similarity, slot),
            metadata=ChunkMetadata(pmid=pmid, chunk_index=index, **SAMPLE_PAPERS[pmid]),
        )
        for slot, (pmid, index, text, similarity) in enumerate(SAMPLE_CHUNKS, start=1)
    ]


@pytest.fixture
def tmp_dir():
    return tempfile.mkdtemp()


@pytest.fixture
def settings(tmp_dir):
    """Test settings with temp paths."""
    return Settings(
        upstream_api_key="test-key",
        chunk_db_path=str(Path(tmp_dir) / "chunks.db"),
        job_db_path=str(Path(tmp_dir) / "jobs.db"),
        job_sweep_interval_seconds=3600,
    )


@pytest.fixture
def corpus():
    return CorpusConfig(CORPUS_ID, "Test Corpus", "fake-embedding-model", DIMENSIONS)


@pytest.fixture
def registry(corpus):
    return CorpusRegistry([corpus])


@pytest.fixture
def clock():
    return FakeClock()
