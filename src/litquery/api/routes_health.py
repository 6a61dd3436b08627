"""Health check and corpus listing endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from litquery.api.dependencies import get_chunk_store, get_corpus_registry, get_job_store
from litquery.api.errors import to_http_exception
from litquery.config.corpora import CorpusRegistry
from litquery.exceptions import PersistenceError
from litquery.models.schemas import CorpusSchema, HealthResponse
from litquery.storage.sqlite_chunk_store import SQLiteChunkStore
from litquery.storage.sqlite_job_store import SQLiteJobStore

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(
    chunk_store: SQLiteChunkStore = Depends(get_chunk_store),
    job_store: SQLiteJobStore = Depends(get_job_store),
    corpora: CorpusRegistry = Depends(get_corpus_registry),
) -> HealthResponse:
    try:
        return HealthResponse(
            status="ok",
            chunk_count=await chunk_store.count_chunks(),
            job_count=await job_store.count_jobs(),
            corpora=len(corpora.entries()),
        )
    except PersistenceError as e:
        raise to_http_exception(e)


@router.get("/corpora", response_model=list[CorpusSchema])
async def list_corpora(
    corpora: CorpusRegistry = Depends(get_corpus_registry),
) -> list[CorpusSchema]:
    return [CorpusSchema.from_domain(c) for c in corpora.entries()]
