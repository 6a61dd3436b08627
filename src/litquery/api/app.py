"""FastAPI application factory with lifespan management."""

from __future__ import annotations

import asyncio
import contextlib
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from litquery.api.middleware import RequestTimingMiddleware
from litquery.api.rate_limiter import FixedWindowRateLimiter
from litquery.api.routes_health import router as health_router
from litquery.api.routes_query import router as query_router
from litquery.config.corpora import CorpusRegistry
from litquery.config.settings import Settings
from litquery.context.assembler import ContextAssembler
from litquery.embeddings.openai_embedder import OpenAIEmbedder
from litquery.exceptions import PersistenceError
from litquery.generation.answer_generator import AnswerGenerator
from litquery.generation.gemini_provider import GeminiProvider
from litquery.generation.openai_provider import OpenAICompatibleProvider
from litquery.jobs.manager import JobManager
from litquery.observability.logger import get_logger, setup_logging
from litquery.pipeline.query_pipeline import QueryPipeline
from litquery.protocols.embedder import Embedder
from litquery.protocols.llm import CompletionProvider
from litquery.retrieval.gateway import RetrievalGateway
from litquery.storage.sqlite_chunk_store import SQLiteChunkStore
from litquery.storage.sqlite_job_store import SQLiteJobStore
from litquery.submission.guard import SubmissionGuard
from litquery.verification.claim_verifier import ClaimVerifier

logger = get_logger("app")


def build_llm(settings: Settings) -> CompletionProvider:
    if settings.llm_provider == "gemini":
        return GeminiProvider(
            api_key=settings.google_api_key,
            model=settings.gemini_model,
            timeout_seconds=settings.upstream_timeout_seconds,
        )
    return OpenAICompatibleProvider(
        api_key=settings.upstream_api_key,
        base_url=settings.upstream_base_url,
        timeout_seconds=settings.upstream_timeout_seconds,
    )


def load_corpora(settings: Settings) -> CorpusRegistry:
    if settings.corpus_registry_path:
        return CorpusRegistry.from_file(settings.corpus_registry_path)
    return CorpusRegistry.default()


async def sweep_expired_jobs(jobs: JobManager, interval_seconds: float) -> None:
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await jobs.sweep_expired()
        except PersistenceError as e:
            logger.warning("job_sweep_failed", error=str(e))


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    setup_logging(settings.log_level)

    for path in [settings.chunk_db_path, settings.job_db_path]:
        Path(path).parent.mkdir(parents=True, exist_ok=True)

    # Storage
    chunk_store = SQLiteChunkStore(
        settings.chunk_db_path, lexical_normalizer=settings.lexical_normalizer
    )
    await chunk_store.initialize()
    job_store = SQLiteJobStore(settings.job_db_path)
    await job_store.initialize()
    jobs = JobManager(job_store, ttl_seconds=settings.job_ttl_seconds)

    # Upstream services
    embedder = app.state.embedder or OpenAIEmbedder(
        api_key=settings.upstream_api_key,
        base_url=settings.upstream_base_url,
        timeout_seconds=settings.upstream_timeout_seconds,
    )
    llm = app.state.llm or build_llm(settings)

    corpora = load_corpora(settings)

    # Retrieval
    gateway = RetrievalGateway(
        store=chunk_store,
        embedder=embedder,
        context_max_distance=settings.context_max_distance,
        display_max_distance=settings.display_max_distance,
        display_limit=settings.display_limit,
        token_budget_pool=settings.token_budget_pool,
        token_budget_reserve=settings.token_budget_reserve,
        max_expanded_query_chars=settings.max_expanded_query_chars,
        max_lexical_terms=settings.max_lexical_terms,
    )

    # Generation and verification
    generator = AnswerGenerator(llm=llm, temperature=settings.generation_temperature)
    verifier = ClaimVerifier(
        llm=llm,
        max_tokens=settings.verification_max_tokens,
        temperature=settings.verification_temperature,
        neutral_confidence=settings.neutral_confidence,
    )

    query_pipeline = QueryPipeline(
        jobs=jobs,
        corpora=corpora,
        gateway=gateway,
        assembler=ContextAssembler(),
        generator=generator,
        verifier=verifier,
        unverified_confidence=settings.unverified_confidence,
    )
    guard = SubmissionGuard(
        settings,
        corpora,
        FixedWindowRateLimiter(
            window_seconds=settings.rate_limit_window_seconds,
            max_requests=settings.rate_limit_max_requests,
            max_concurrent=settings.rate_limit_max_concurrent,
        ),
    )

    # Attach to app state
    app.state.query_pipeline = query_pipeline
    app.state.job_manager = jobs
    app.state.submission_guard = guard
    app.state.corpora = corpora
    app.state.chunk_store = chunk_store
    app.state.job_store = job_store

    sweeper = asyncio.create_task(
        sweep_expired_jobs(jobs, settings.job_sweep_interval_seconds)
    )
    logger.info(
        "startup_complete",
        chunks=await chunk_store.count_chunks(),
        corpora=len(corpora.entries()),
        provider=settings.llm_provider,
    )

    yield

    sweeper.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await sweeper
    logger.info("shutdown_complete")


def create_app(
    settings: Settings | None = None,
    embedder: Embedder | None = None,
    llm: CompletionProvider | None = None,
) -> FastAPI:
    """``embedder`` and ``llm`` replace the upstream clients built from settings."""
    app = FastAPI(
        title="LitQuery",
        version="1.0.0",
        description="Cited answers over research literature corpora",
        lifespan=lifespan,
    )
    app.state.settings = settings or Settings()
    app.state.embedder = embedder
    app.state.llm = llm
    app.add_middleware(RequestTimingMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(query_router, tags=["query"])
    return app
