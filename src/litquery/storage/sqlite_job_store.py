"""SQLite-backed query job store.

Every mutating statement is conditional on the job still being active, so a
job that has reached ``completed`` or ``failed`` is never written again.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone

import aiosqlite

from litquery.exceptions import PersistenceError
from litquery.models.domain import (
    JobResult,
    JobStatus,
    MatchingChunk,
    QueryJob,
    QueryParams,
    SourceEntry,
)
from litquery.storage.migrations import initialize_job_db

_ACTIVE = "status IN ('pending', 'processing')"


class SQLiteJobStore:
    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    async def initialize(self) -> None:
        try:
            await initialize_job_db(self._db_path)
        except aiosqlite.Error as e:
            raise PersistenceError(f"Failed to initialize job store: {e}") from e

    async def insert(self, job: QueryJob) -> None:
        await self._execute(
            "INSERT INTO query_jobs "
            "(job_id, status, progress, params, verified, created_at, expires_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                job.job_id,
                job.status.value,
                job.progress,
                json.dumps(job.params.to_dict()),
                int(job.verified),
                _ts(job.created_at),
                _ts(job.expires_at),
            ),
            "insert job",
        )

    async def set_progress(
        self, job_id: str, progress: str, now: datetime, only_pending: bool = False
    ) -> bool:
        """Move the job to processing with a new progress string.

        ``started_at`` is written only the first time. With ``only_pending`` the
        update applies only to a job nobody has started yet, which makes it
        usable as a claim. Returns whether a row changed.
        """
        guard = "status = 'pending'" if only_pending else _ACTIVE
        return await self._execute(
            "UPDATE query_jobs SET status = 'processing', progress = ?, "
            "started_at = COALESCE(started_at, ?) "
            f"WHERE job_id = ? AND {guard}",
            (progress, _ts(now), job_id),
            "update progress",
        )

    async def mark_completed(self, job_id: str, result: JobResult, now: datetime) -> bool:
        return await self._execute(
            "UPDATE query_jobs SET status = 'completed', progress = NULL, response = ?, "
            "sources = ?, all_matching_chunks = ?, confidence = ?, verified = ?, "
            "started_at = COALESCE(started_at, ?), completed_at = ? "
            f"WHERE job_id = ? AND {_ACTIVE}",
            (
                result.response,
                json.dumps([s.to_dict() for s in result.sources]),
                json.dumps([c.to_dict() for c in result.all_matching_chunks]),
                result.confidence,
                int(result.verified),
                _ts(now),
                _ts(now),
                job_id,
            ),
            "complete job",
        )

    async def mark_failed(self, job_id: str, error: str, now: datetime) -> bool:
        return await self._execute(
            "UPDATE query_jobs SET status = 'failed', progress = NULL, error = ?, "
            "started_at = COALESCE(started_at, ?), completed_at = ? "
            f"WHERE job_id = ? AND {_ACTIVE}",
            (error, _ts(now), _ts(now), job_id),
            "fail job",
        )

    async def get(self, job_id: str) -> QueryJob | None:
        try:
            async with aiosqlite.connect(self._db_path) as db:
                db.row_factory = aiosqlite.Row
                async with db.execute(
                    "SELECT * FROM query_jobs WHERE job_id = ?", (job_id,)
                ) as cursor:
                    row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise PersistenceError(f"Failed to read job {job_id}: {e}") from e
        return self._row_to_job(row) if row is not None else None

    async def delete_expired(self, now: datetime) -> int:
        try:
            async with aiosqlite.connect(self._db_path) as db:
                cursor = await db.execute(
                    "DELETE FROM query_jobs WHERE expires_at < ?", (_ts(now),)
                )
                await db.commit()
                return cursor.rowcount
        except aiosqlite.Error as e:
            raise PersistenceError(f"Failed to delete expired jobs: {e}") from e

    async def count_jobs(self) -> int:
        try:
            async with aiosqlite.connect(self._db_path) as db:
                async with db.execute("SELECT COUNT(*) FROM query_jobs") as cursor:
                    row = await cursor.fetchone()
                    return row[0] if row else 0
        except aiosqlite.Error as e:
            raise PersistenceError(f"Failed to count jobs: {e}") from e

    async def _execute(self, sql: str, args: tuple, action: str) -> bool:
        try:
            async with aiosqlite.connect(self._db_path) as db:
                cursor = await db.execute(sql, args)
                await db.commit()
                return cursor.rowcount > 0
        except aiosqlite.Error as e:
            raise PersistenceError(f"Failed to {action}: {e}") from e

    @staticmethod
    def _row_to_job(row: aiosqlite.Row) -> QueryJob:
        return QueryJob(
            job_id=row["job_id"],
            status=JobStatus(row["status"]),
            params=QueryParams.from_dict(json.loads(row["params"])),
            created_at=_parse_ts(row["created_at"]),
            expires_at=_parse_ts(row["expires_at"]),
            progress=row["progress"],
            response=row["response"],
            sources=[SourceEntry.from_dict(s) for s in json.loads(row["sources"] or "[]")],
            all_matching_chunks=[
                MatchingChunk.from_dict(c) for c in json.loads(row["all_matching_chunks"] or "[]")
            ],
            confidence=row["confidence"],
            verified=bool(row["verified"]),
            error=row["error"],
            started_at=_parse_ts(row["started_at"]),
            completed_at=_parse_ts(row["completed_at"]),
        )


def _ts(value: datetime) -> str:
    # Fixed-width UTC text so SQL string comparison orders timestamps correctly
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f+00:00")


def _parse_ts(value: str | None) -> datetime | None:
    if value is None:
        return None
    return datetime.fromisoformat(value)
