"""FastAPI dependency injection helpers."""

from __future__ import annotations

from fastapi import Request

from litquery.config.corpora import CorpusRegistry
from litquery.jobs.manager import JobManager
from litquery.pipeline.query_pipeline import QueryPipeline
from litquery.storage.sqlite_chunk_store import SQLiteChunkStore
from litquery.storage.sqlite_job_store import SQLiteJobStore
from litquery.submission.guard import SubmissionGuard


def get_query_pipeline(request: Request) -> QueryPipeline:
    return request.app.state.query_pipeline


def get_job_manager(request: Request) -> JobManager:
    return request.app.state.job_manager


def get_submission_guard(request: Request) -> SubmissionGuard:
    return request.app.state.submission_guard


def get_corpus_registry(request: Request) -> CorpusRegistry:
    return request.app.state.corpora


def get_chunk_store(request: Request) -> SQLiteChunkStore:
    return request.app.state.chunk_store


def get_job_store(request: Request) -> SQLiteJobStore:
    return request.app.state.job_store
