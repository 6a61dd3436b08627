"""Pydantic models for API request/response serialization."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from litquery.config.constants import SUBMIT_ESTIMATED_TIME
from litquery.models.domain import (
    ChunkMetadata,
    CorpusConfig,
    JobStatus,
    MatchingChunk,
    QueryJob,
    SourceEntry,
)


class QueryRequest(BaseModel):
    """Raw request; every knob is optional and range-checked by the submission guard."""

    corpus_id: str = ""
    query: str = ""
    model: str | None = None
    complexity: str | None = None
    enable_verification: bool = False
    max_chunks_per_paper: int | None = None
    target_tokens: int | None = None
    similarity_threshold: float | None = None
    vector_weight: float | None = None
    text_weight: float | None = None
    output_style: str | None = None


class MetadataSchema(BaseModel):
    pmid: str | None = None
    title: str | None = None
    authors: str | None = None
    year: int | None = None
    journal: str | None = None
    chunk_index: int | None = None

    @classmethod
    def from_domain(cls, meta: ChunkMetadata) -> MetadataSchema:
        return cls(**meta.to_dict())


class SourceSchema(BaseModel):
    index: int
    chunk_id: str
    content: str
    similarity: float
    metadata: MetadataSchema

    @classmethod
    def from_domain(cls, source: SourceEntry) -> SourceSchema:
        return cls(
            index=source.index,
            chunk_id=source.chunk_id,
            content=source.content,
            similarity=source.similarity,
            metadata=MetadataSchema.from_domain(source.metadata),
        )


class MatchingChunkSchema(SourceSchema):
    used_in_context: bool
    cited_in_response: bool

    @classmethod
    def from_domain(cls, chunk: MatchingChunk) -> MatchingChunkSchema:
        return cls(
            index=chunk.index,
            chunk_id=chunk.chunk_id,
            content=chunk.content,
            similarity=chunk.similarity,
            metadata=MetadataSchema.from_domain(chunk.metadata),
            used_in_context=chunk.used_in_context,
            cited_in_response=chunk.cited_in_response,
        )


class JobSubmitResponse(BaseModel):
    job_id: str
    status: JobStatus
    estimated_time: str = SUBMIT_ESTIMATED_TIME
    check_status_url: str


class JobStatusResponse(BaseModel):
    job_id: str
    status: JobStatus
    elapsed_seconds: int
    progress: str | None = None
    estimated_time: str | None = None
    response: str | None = None
    sources: list[SourceSchema] | None = None
    all_matching_chunks: list[MatchingChunkSchema] | None = None
    confidence: int | None = None
    verified: bool | None = None
    error: str | None = None
    completed_at: datetime | None = None

    @classmethod
    def from_job(cls, job: QueryJob, now: datetime) -> JobStatusResponse:
        """Only the fields the job's current state defines are populated."""
        base = {
            "job_id": job.job_id,
            "status": job.status,
            "elapsed_seconds": job.elapsed_seconds(now),
        }
        if job.status is JobStatus.COMPLETED:
            return cls(
                **base,
                response=job.response,
                sources=[SourceSchema.from_domain(s) for s in job.sources],
                all_matching_chunks=[
                    MatchingChunkSchema.from_domain(c) for c in job.all_matching_chunks
                ],
                confidence=job.confidence,
                verified=job.verified,
                completed_at=job.completed_at,
            )
        if job.status is JobStatus.FAILED:
            return cls(
                **base,
                error=job.error or "Query processing failed",
                completed_at=job.completed_at,
            )
        if job.status is JobStatus.PENDING:
            estimate = SUBMIT_ESTIMATED_TIME
        else:
            estimate = f"{max(0, 60 - base['elapsed_seconds'])} seconds remaining"
        return cls(**base, progress=job.progress or "Processing query...", estimated_time=estimate)


class CorpusSchema(BaseModel):
    corpus_id: str
    display_name: str
    topic: str
    description: str
    embedding_model: str
    dimensions: int

    @classmethod
    def from_domain(cls, corpus: CorpusConfig) -> CorpusSchema:
        return cls(
            corpus_id=corpus.corpus_id,
            display_name=corpus.display_name,
            topic=corpus.topic,
            description=corpus.description,
            embedding_model=corpus.embedding_model,
            dimensions=corpus.dimensions,
        )


class HealthResponse(BaseModel):
    status: str
    chunk_count: int
    job_count: int
    corpora: int
