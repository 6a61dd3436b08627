"""Core domain objects used throughout the system."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum

UNKNOWN_DOCUMENT = "unknown"


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


@dataclass(frozen=True)
class ChunkMetadata:
    """Bibliographic record attached to every stored chunk."""

    pmid: str | None = None
    title: str | None = None
    authors: str | None = None
    year: int | None = None
    journal: str | None = None
    chunk_index: int | None = None

    @property
    def document_key(self) -> str:
        """Identity of the source document; chunks without a PMID share one group."""
        return self.pmid or UNKNOWN_DOCUMENT

    @classmethod
    def from_raw(cls, raw) -> ChunkMetadata:
        """Parse metadata that may arrive as a dict, a JSON string, or a
        JSON string that itself encodes a JSON string."""
        data = raw
        for _ in range(2):
            if not isinstance(data, str):
                break
            try:
                data = json.loads(data)
            except json.JSONDecodeError:
                return cls()
        if not isinstance(data, dict):
            return cls()

        pmid = data.get("pmid")
        return cls(
            pmid=str(pmid) if pmid not in (None, "") else None,
            title=data.get("title") or None,
            authors=data.get("authors") or None,
            year=_to_int(data.get("year")),
            journal=data.get("journal") or None,
            chunk_index=_to_int(data.get("chunk_index", data.get("chunkIndex"))),
        )

    def to_dict(self) -> dict:
        return asdict(self)


def _to_int(value) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class StoredChunk:
    chunk_id: str
    corpus_id: str
    content: str
    embedding: list[float]
    metadata: ChunkMetadata
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class ScoredChunk:
    chunk_id: str
    content: str
    metadata: ChunkMetadata
    vector_score: float
    lexical_score: float
    fused_score: float


@dataclass(frozen=True)
class FusionWeights:
    vector: float
    lexical: float


@dataclass
class ContextEntry:
    """A scored chunk promoted into the prompt under a 1-based citation label."""

    citation_index: int
    chunk: ScoredChunk


@dataclass
class AssembledContext:
    text: str
    entries: list[ContextEntry]
    token_estimate: int


@dataclass
class RetrievalOutcome:
    candidates: list[ScoredChunk]
    context_chunks: list[ScoredChunk]
    all_matching: list[ScoredChunk]


@dataclass
class VerificationResult:
    response: str
    confidence: int
    degraded: bool


@dataclass(frozen=True)
class CorpusConfig:
    corpus_id: str
    display_name: str
    embedding_model: str
    dimensions: int
    topic: str = ""
    description: str = ""


@dataclass(frozen=True)
class QueryParams:
    """Sanitized request; immutable once a job is created."""

    corpus_id: str
    query: str
    model: str
    complexity: str
    enable_verification: bool
    max_chunks_per_paper: int
    target_tokens: int | None
    similarity_threshold: float
    vector_weight: float
    text_weight: float
    output_style: str

    @property
    def weights(self) -> FusionWeights:
        return FusionWeights(vector=self.vector_weight, lexical=self.text_weight)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> QueryParams:
        return cls(**data)


@dataclass
class SourceEntry:
    index: int
    chunk_id: str
    content: str
    similarity: float
    metadata: ChunkMetadata

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> SourceEntry:
        return cls(**{**data, "metadata": ChunkMetadata.from_raw(data.get("metadata"))})


@dataclass
class MatchingChunk:
    index: int
    chunk_id: str
    content: str
    similarity: float
    metadata: ChunkMetadata
    used_in_context: bool
    cited_in_response: bool

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> MatchingChunk:
        return cls(**{**data, "metadata": ChunkMetadata.from_raw(data.get("metadata"))})


@dataclass
class JobResult:
    response: str
    sources: list[SourceEntry]
    all_matching_chunks: list[MatchingChunk]
    confidence: int | None
    verified: bool


@dataclass
class QueryJob:
    job_id: str
    status: JobStatus
    params: QueryParams
    created_at: datetime
    expires_at: datetime
    progress: str | None = None
    response: str | None = None
    sources: list[SourceEntry] = field(default_factory=list)
    all_matching_chunks: list[MatchingChunk] = field(default_factory=list)
    confidence: int | None = None
    verified: bool = False
    error: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def elapsed_seconds(self, now: datetime) -> int:
        if self.started_at is None:
            return 0
        end = self.completed_at or now
        return max(0, int((end - self.started_at).total_seconds()))
