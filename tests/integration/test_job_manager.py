"""Integration tests for the job state machine over SQLite."""

import pytest
from conftest import make_params

from litquery.exceptions import ExpiredError, InvalidTransitionError, NotFoundError
from litquery.jobs.manager import JobManager
from litquery.models.domain import JobResult, JobStatus
from litquery.storage.sqlite_job_store import SQLiteJobStore


@pytest.fixture
async def jobs(settings, clock):
    store = SQLiteJobStore(settings.job_db_path)
    await store.initialize()
    return JobManager(store, ttl_seconds=3600, clock=clock)


def _result() -> JobResult:
    return JobResult(
        response="Done.", sources=[], all_matching_chunks=[], confidence=85, verified=False
    )


@pytest.mark.asyncio
async def test_create_pending_job(jobs, clock):
    job = await jobs.create(make_params())
    assert job.status is JobStatus.PENDING
    assert (job.expires_at - job.created_at).total_seconds() == 3600
    assert (await jobs.read(job.job_id)).params == make_params()


@pytest.mark.asyncio
async def test_full_lifecycle(jobs, clock):
    job = await jobs.create(make_params())
    clock.advance(1)
    job = await jobs.advance(job.job_id, JobStatus.PROCESSING, progress="Searching...")
    assert job.status is JobStatus.PROCESSING
    assert job.started_at == clock()

    clock.advance(9)
    job = await jobs.advance(job.job_id, JobStatus.COMPLETED, result=_result())
    assert job.status is JobStatus.COMPLETED
    assert job.response == "Done."
    assert job.elapsed_seconds(clock()) == 9


@pytest.mark.asyncio
async def test_terminal_state_is_sticky(jobs):
    job = await jobs.create(make_params())
    await jobs.advance(job.job_id, JobStatus.FAILED, error="Embedding service timed out")

    after = await jobs.advance(job.job_id, JobStatus.COMPLETED, result=_result())
    assert after.status is JobStatus.FAILED
    after = await jobs.advance(job.job_id, JobStatus.PROCESSING, progress="late")
    assert after.status is JobStatus.FAILED
    assert after.error == "Embedding service timed out"


@pytest.mark.asyncio
async def test_invalid_transitions(jobs):
    job = await jobs.create(make_params())
    with pytest.raises(InvalidTransitionError):
        await jobs.advance(job.job_id, JobStatus.PENDING)
    with pytest.raises(InvalidTransitionError):
        await jobs.advance(job.job_id, JobStatus.COMPLETED)


@pytest.mark.asyncio
async def test_unknown_job(jobs):
    with pytest.raises(NotFoundError):
        await jobs.read("nope")
    with pytest.raises(NotFoundError):
        await jobs.advance("nope", JobStatus.FAILED, error="x")
    assert await jobs.get("nope") is None


@pytest.mark.asyncio
async def test_claim_only_once(jobs):
    job = await jobs.create(make_params())
    claimed = await jobs.claim(job.job_id, "Initializing...")
    assert claimed.status is JobStatus.PROCESSING
    assert claimed.progress == "Initializing..."
    with pytest.raises(InvalidTransitionError):
        await jobs.claim(job.job_id, "Initializing...")


@pytest.mark.asyncio
async def test_expired_job_reads_as_expired(jobs, clock):
    job = await jobs.create(make_params())
    await jobs.advance(job.job_id, JobStatus.COMPLETED, result=_result())
    clock.advance(3601)
    with pytest.raises(ExpiredError):
        await jobs.read(job.job_id)
    with pytest.raises(ExpiredError):
        await jobs.claim(job.job_id, "x")


@pytest.mark.asyncio
async def test_sweep_removes_expired(jobs, clock):
    old = await jobs.create(make_params())
    clock.advance(3000)
    fresh = await jobs.create(make_params())
    clock.advance(700)

    assert await jobs.sweep_expired() == 1
    assert await jobs.get(old.job_id) is None
    assert (await jobs.read(fresh.job_id)).status is JobStatus.PENDING
