"""Query job state machine: create, advance, read, expire."""

from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from litquery.exceptions import ExpiredError, InvalidTransitionError, NotFoundError
from litquery.models.domain import JobResult, JobStatus, QueryJob, QueryParams
from litquery.observability.logger import get_logger
from litquery.storage.sqlite_job_store import SQLiteJobStore

logger = get_logger("job_manager")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobManager:
    """Sole owner of job mutation.

    pending -> processing -> processing ... -> completed | failed. Terminal jobs
    are never written again; a late write against one is logged and ignored.
    """

    def __init__(
        self,
        store: SQLiteJobStore,
        ttl_seconds: int = 3600,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock

    async def create(self, params: QueryParams) -> QueryJob:
        now = self._clock()
        job = QueryJob(
            job_id=str(uuid.uuid4()),
            status=JobStatus.PENDING,
            params=params,
            created_at=now,
            expires_at=now + self._ttl,
        )
        await self._store.insert(job)
        logger.info("job_created", job_id=job.job_id, corpus_id=params.corpus_id)
        return job

    async def advance(
        self,
        job_id: str,
        status: JobStatus,
        progress: str | None = None,
        error: str | None = None,
        result: JobResult | None = None,
    ) -> QueryJob:
        now = self._clock()
        if status is JobStatus.PROCESSING:
            changed = await self._store.set_progress(job_id, progress or "", now)
        elif status is JobStatus.COMPLETED:
            if result is None:
                raise InvalidTransitionError("Completing a job requires a result")
            changed = await self._store.mark_completed(job_id, result, now)
        elif status is JobStatus.FAILED:
            changed = await self._store.mark_failed(job_id, error or "Unknown error", now)
        else:
            raise InvalidTransitionError(f"Cannot move job {job_id} back to {status.value}")

        job = await self._store.get(job_id)
        if job is None:
            raise NotFoundError(f"Job not found: {job_id}")
        if not changed:
            logger.warning(
                "job_transition_ignored",
                job_id=job_id,
                current=job.status.value,
                requested=status.value,
            )
        return job

    async def claim(self, job_id: str, progress: str) -> QueryJob:
        """Start a pending job. Any other state is refused so a job runs at most once per trigger."""
        job = await self.read(job_id)
        if job.status is not JobStatus.PENDING:
            raise InvalidTransitionError(f"Job {job_id} is already {job.status.value}")
        if not await self._store.set_progress(job_id, progress, self._clock(), only_pending=True):
            raise InvalidTransitionError(f"Job {job_id} was started by another caller")
        return await self.read(job_id)

    async def get(self, job_id: str) -> QueryJob | None:
        return await self._store.get(job_id)

    async def read(self, job_id: str) -> QueryJob:
        """Read contract: NotFoundError for unknown ids, ExpiredError past the TTL
        whatever the stored status."""
        job = await self._store.get(job_id)
        if job is None:
            raise NotFoundError(f"Job not found: {job_id}")
        if job.is_expired(self._clock()):
            raise ExpiredError(f"Job {job_id} has expired")
        return job

    async def sweep_expired(self) -> int:
        deleted = await self._store.delete_expired(self._clock())
        if deleted:
            logger.info("expired_jobs_deleted", count=deleted)
        return deleted

    def now(self) -> datetime:
        return self._clock()
