"""Job execution driver: retrieval, context, generation, verification, persistence."""

from __future__ import annotations

import structlog

from litquery.config.constants import COMPLEXITY_TIERS, NO_RESULTS_RESPONSE
from litquery.config.corpora import CorpusRegistry
from litquery.context.assembler import ContextAssembler
from litquery.exceptions import LitQueryError, PersistenceError
from litquery.generation.answer_generator import AnswerGenerator
from litquery.generation.citations import extract_cited_indices
from litquery.jobs.manager import JobManager
from litquery.models.domain import (
    AssembledContext,
    JobResult,
    JobStatus,
    MatchingChunk,
    QueryJob,
    QueryParams,
    RetrievalOutcome,
    ScoredChunk,
    SourceEntry,
)
from litquery.observability.logger import get_logger
from litquery.observability.metrics import log_generation_metrics, log_retrieval_metrics
from litquery.observability.tracing import JobTrace
from litquery.retrieval.gateway import RetrievalGateway
from litquery.verification.claim_verifier import ClaimVerifier

logger = get_logger("query_pipeline")

PROGRESS_INITIALIZING = "Initializing query processing..."
PROGRESS_PREPARING = "Preparing query for processing..."
PROGRESS_EMBEDDING = "Generating query embeddings..."
PROGRESS_SEARCHING = "Searching knowledge base..."
PROGRESS_ALL_MATCHING = "Retrieving all matching content..."
PROGRESS_CONTEXT = "Preparing context for LLM..."
PROGRESS_GENERATING = "Generating response with AI model..."
PROGRESS_VERIFYING = "Verifying response accuracy..."
PROGRESS_SAVING = "Saving results..."


class QueryPipeline:
    """Submission and execution are separate so any caller can trigger a stored job."""

    def __init__(
        self,
        jobs: JobManager,
        corpora: CorpusRegistry,
        gateway: RetrievalGateway,
        assembler: ContextAssembler,
        generator: AnswerGenerator,
        verifier: ClaimVerifier,
        unverified_confidence: int = 85,
    ) -> None:
        self._jobs = jobs
        self._corpora = corpora
        self._gateway = gateway
        self._assembler = assembler
        self._generator = generator
        self._verifier = verifier
        self._unverified_confidence = unverified_confidence

    async def submit(self, params: QueryParams) -> QueryJob:
        self._corpora.resolve(params.corpus_id)
        return await self._jobs.create(params)

    async def execute(self, job_id: str) -> QueryJob:
        """Run a pending job to a terminal state.

        Raises InvalidTransitionError when the job was already started;
        failures after that point are recorded on the job instead of raised.
        """
        job = await self._jobs.claim(job_id, PROGRESS_INITIALIZING)
        return await self._drive(job)

    async def run_inline(self, params: QueryParams) -> QueryJob:
        job = await self.submit(params)
        return await self.execute(job.job_id)

    async def _drive(self, job: QueryJob) -> QueryJob:
        with structlog.contextvars.bound_contextvars(job_id=job.job_id):
            logger.info("job_started", corpus_id=job.params.corpus_id, model=job.params.model)
            try:
                result = await self._process(job)
                done = await self._jobs.advance(job.job_id, JobStatus.COMPLETED, result=result)
                logger.info("job_completed", confidence=result.confidence)
                return done
            except LitQueryError as e:
                logger.warning("job_failed", error_type=type(e).__name__, error=str(e))
                return await self._record_failure(job, str(e))
            except Exception as e:
                logger.exception("job_crashed", error=str(e))
                return await self._record_failure(job, str(e) or "Unknown error occurred")

    async def _record_failure(self, job: QueryJob, message: str) -> QueryJob:
        try:
            return await self._jobs.advance(job.job_id, JobStatus.FAILED, error=message)
        except PersistenceError as e:
            # Job stays in its last persisted state until the TTL sweep removes it
            logger.error("job_failure_not_recorded", error=str(e))
            return job

    async def _progress(self, job_id: str, text: str) -> None:
        await self._jobs.advance(job_id, JobStatus.PROCESSING, progress=text)

    async def _process(self, job: QueryJob) -> JobResult:
        params = job.params
        trace = JobTrace(job.job_id)
        corpus = self._corpora.resolve(params.corpus_id)

        await self._progress(job.job_id, PROGRESS_PREPARING)
        prepared = self._gateway.prepare(params.query)

        await self._progress(job.job_id, PROGRESS_EMBEDDING)
        with trace.span("embedding"):
            vector = await self._gateway.embed(prepared, corpus)

        await self._progress(job.job_id, PROGRESS_SEARCHING)
        with trace.span("search"):
            candidates = await self._gateway.find_candidates(params, vector, prepared)

        await self._progress(job.job_id, PROGRESS_ALL_MATCHING)
        with trace.span("all_matching"):
            all_matching = await self._gateway.find_all_matching(params, vector, prepared)

        if not candidates:
            logger.info("no_candidates", matching=len(all_matching))
            return JobResult(
                response=NO_RESULTS_RESPONSE,
                sources=[],
                all_matching_chunks=_matching_entries(all_matching, {}, set()),
                confidence=None,
                verified=False,
            )

        tier = COMPLEXITY_TIERS[params.complexity]
        await self._progress(job.job_id, PROGRESS_CONTEXT)
        outcome = RetrievalOutcome(
            candidates=candidates,
            context_chunks=self._gateway.select_context(params, candidates),
            all_matching=all_matching,
        )
        context = self._assembler.assemble(
            params.query, outcome.context_chunks, tier["context_tokens"]
        )
        self._log_retrieval(job.job_id, outcome, context)

        await self._progress(job.job_id, PROGRESS_GENERATING)
        with trace.span("generation"):
            answer = await self._generator.generate(params, corpus, context)

        confidence = self._unverified_confidence
        if params.enable_verification:
            await self._progress(job.job_id, PROGRESS_VERIFYING)
            with trace.span("verification"):
                verification = await self._verifier.verify(answer, context.entries, params.model)
            answer = verification.response
            confidence = verification.confidence

        cited = extract_cited_indices(answer, context.entries)
        await self._progress(job.job_id, PROGRESS_SAVING)

        log_generation_metrics(
            job.job_id,
            model=params.model,
            answer_len=len(answer),
            cited=len(cited),
            confidence=confidence,
            verified=params.enable_verification,
        )
        labels = {e.chunk.chunk_id: e.citation_index for e in context.entries}
        return JobResult(
            response=answer,
            sources=[
                SourceEntry(
                    index=e.citation_index,
                    chunk_id=e.chunk.chunk_id,
                    content=e.chunk.content,
                    similarity=e.chunk.fused_score,
                    metadata=e.chunk.metadata,
                )
                for e in context.entries
            ],
            all_matching_chunks=_matching_entries(all_matching, labels, cited),
            confidence=confidence,
            verified=params.enable_verification,
        )

    @staticmethod
    def _log_retrieval(job_id: str, outcome: RetrievalOutcome, context: AssembledContext) -> None:
        log_retrieval_metrics(
            job_id,
            candidate_count=len(outcome.candidates),
            context_count=len(context.entries),
            matching_count=len(outcome.all_matching),
            top_scores=[c.fused_score for c in outcome.candidates],
            unique_docs=len({e.chunk.metadata.document_key for e in context.entries}),
        )


def _matching_entries(
    chunks: list[ScoredChunk], labels: dict[str, int], cited: set[int]
) -> list[MatchingChunk]:
    """Display entries; ``labels`` maps chunk ids sent to the model to their citation index."""
    entries = []
    for i, chunk in enumerate(chunks, start=1):
        label = labels.get(chunk.chunk_id)
        entries.append(
            MatchingChunk(
                index=i,
                chunk_id=chunk.chunk_id,
                content=chunk.content,
                similarity=chunk.fused_score,
                metadata=chunk.metadata,
                used_in_context=label is not None,
                cited_in_response=label is not None and label in cited,
            )
        )
    return entries
