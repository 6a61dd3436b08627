"""Metric recording helpers for job execution."""

from __future__ import annotations

from litquery.observability.logger import get_logger

logger = get_logger("metrics")


def log_retrieval_metrics(
    job_id: str,
    candidate_count: int,
    context_count: int,
    matching_count: int,
    top_scores: list[float],
    unique_docs: int,
) -> None:
    logger.info(
        "retrieval_metrics",
        job_id=job_id,
        candidates=candidate_count,
        context_chunks=context_count,
        matching_chunks=matching_count,
        top_scores=[round(s, 4) for s in top_scores[:3]],
        unique_docs=unique_docs,
    )


def log_generation_metrics(
    job_id: str,
    model: str,
    answer_len: int,
    cited: int,
    confidence: int | None,
    verified: bool,
) -> None:
    logger.info(
        "generation_metrics",
        job_id=job_id,
        model=model,
        answer_len=answer_len,
        cited_sources=cited,
        confidence=confidence,
        verified=verified,
    )


def log_stage_latency(job_id: str, stage: str, duration_ms: float) -> None:
    logger.info(
        "stage_latency",
        job_id=job_id,
        stage=stage,
        duration_ms=round(duration_ms, 2),
    )
