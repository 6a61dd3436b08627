"""Tests for API schemas built from domain objects."""

from datetime import timedelta

from conftest import FakeClock, make_params

from litquery.models.domain import ChunkMetadata, JobStatus, MatchingChunk, QueryJob, SourceEntry
from litquery.models.schemas import CorpusSchema, JobStatusResponse, QueryRequest


def _job(status: JobStatus, clock: FakeClock, **fields) -> QueryJob:
    return QueryJob(
        job_id="job-1",
        status=status,
        params=make_params(),
        created_at=clock(),
        expires_at=clock() + timedelta(hours=1),
        **fields,
    )


def test_query_request_accepts_partial_body():
    request = QueryRequest(query="pin1")
    assert request.corpus_id == ""
    assert request.target_tokens is None
    assert request.enable_verification is False


def test_pending_status():
    clock = FakeClock()
    body = JobStatusResponse.from_job(_job(JobStatus.PENDING, clock), clock()).model_dump(
        exclude_none=True
    )
    assert body == {
        "job_id": "job-1",
        "status": JobStatus.PENDING,
        "elapsed_seconds": 0,
        "progress": "Processing query...",
        "estimated_time": "15-60 seconds",
    }


def test_processing_status_counts_down():
    clock = FakeClock()
    job = _job(
        JobStatus.PROCESSING,
        clock,
        progress="Searching documents...",
        started_at=clock() - timedelta(seconds=20),
    )
    status = JobStatusResponse.from_job(job, clock())
    assert status.elapsed_seconds == 20
    assert status.progress == "Searching documents..."
    assert status.estimated_time == "40 seconds remaining"
    assert status.response is None

    clock.advance(100)
    assert JobStatusResponse.from_job(job, clock()).estimated_time == "0 seconds remaining"


def test_completed_status_carries_result():
    clock = FakeClock()
    meta = ChunkMetadata(pmid="1001", title="PIN1", year=2021)
    job = _job(
        JobStatus.COMPLETED,
        clock,
        response="Answer [1].",
        sources=[SourceEntry(1, "1001-0", "text", 0.91, meta)],
        all_matching_chunks=[MatchingChunk(1, "1001-0", "text", 0.91, meta, True, True)],
        confidence=85,
        verified=True,
        started_at=clock(),
        completed_at=clock() + timedelta(seconds=12),
    )
    clock.advance(300)
    status = JobStatusResponse.from_job(job, clock())

    assert status.elapsed_seconds == 12
    assert status.response == "Answer [1]."
    assert status.sources[0].metadata.pmid == "1001"
    assert status.all_matching_chunks[0].cited_in_response is True
    assert status.confidence == 85
    assert status.verified is True
    assert status.progress is None
    assert status.error is None


def test_failed_status_has_default_message():
    clock = FakeClock()
    status = JobStatusResponse.from_job(_job(JobStatus.FAILED, clock), clock())
    assert status.error == "Query processing failed"
    assert status.response is None

    job = _job(JobStatus.FAILED, clock, error="Embedding service timed out")
    assert JobStatusResponse.from_job(job, clock()).error == "Embedding service timed out"


def test_corpus_schema(corpus):
    schema = CorpusSchema.from_domain(corpus)
    assert schema.corpus_id == "test-corpus"
    assert schema.dimensions == 384
