"""Query job endpoints: submit, execute, poll, and the synchronous variant."""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status

from litquery.api.auth import verify_api_key
from litquery.api.dependencies import get_job_manager, get_query_pipeline, get_submission_guard
from litquery.api.errors import to_http_exception
from litquery.api.rate_limiter import client_id
from litquery.exceptions import LitQueryError
from litquery.jobs.manager import JobManager
from litquery.models.domain import JobStatus
from litquery.models.schemas import JobStatusResponse, JobSubmitResponse, QueryRequest
from litquery.observability.logger import get_logger
from litquery.pipeline.query_pipeline import QueryPipeline
from litquery.submission.guard import SubmissionGuard

logger = get_logger("routes_query")

router = APIRouter(dependencies=[Depends(verify_api_key)])


async def run_job(pipeline: QueryPipeline, job_id: str) -> None:
    """Background execution; a job claimed elsewhere is left alone."""
    try:
        await pipeline.execute(job_id)
    except LitQueryError as e:
        logger.warning("background_execute_skipped", job_id=job_id, error=str(e))


@router.post(
    "/query/jobs",
    response_model=JobSubmitResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def submit_job(
    body: QueryRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    guard: SubmissionGuard = Depends(get_submission_guard),
    pipeline: QueryPipeline = Depends(get_query_pipeline),
) -> JobSubmitResponse:
    try:
        params = guard.admit(body, client_id(request))
        job = await pipeline.submit(params)
    except LitQueryError as e:
        raise to_http_exception(e)

    if request.app.state.settings.execute_on_submit:
        background_tasks.add_task(run_job, pipeline, job.job_id)
    return JobSubmitResponse(
        job_id=job.job_id,
        status=job.status,
        check_status_url=str(request.url_for("get_job_status", job_id=job.job_id).path),
    )


@router.post(
    "/query/jobs/{job_id}/execute",
    response_model=JobStatusResponse,
    response_model_exclude_none=True,
)
async def execute_job(
    job_id: str,
    pipeline: QueryPipeline = Depends(get_query_pipeline),
    jobs: JobManager = Depends(get_job_manager),
) -> JobStatusResponse:
    try:
        job = await pipeline.execute(job_id)
    except LitQueryError as e:
        raise to_http_exception(e)
    return JobStatusResponse.from_job(job, jobs.now())


@router.get(
    "/query/jobs/{job_id}",
    response_model=JobStatusResponse,
    response_model_exclude_none=True,
)
async def get_job_status(
    job_id: str,
    jobs: JobManager = Depends(get_job_manager),
) -> JobStatusResponse:
    try:
        job = await jobs.read(job_id)
    except LitQueryError as e:
        raise to_http_exception(e)
    return JobStatusResponse.from_job(job, jobs.now())


@router.post(
    "/query",
    response_model=JobStatusResponse,
    response_model_exclude_none=True,
)
async def query(
    body: QueryRequest,
    request: Request,
    guard: SubmissionGuard = Depends(get_submission_guard),
    pipeline: QueryPipeline = Depends(get_query_pipeline),
    jobs: JobManager = Depends(get_job_manager),
) -> JobStatusResponse:
    client = client_id(request)
    try:
        params = guard.admit(body, client, concurrent=True)
    except LitQueryError as e:
        raise to_http_exception(e)

    try:
        job = await pipeline.run_inline(params)
    except LitQueryError as e:
        raise to_http_exception(e)
    finally:
        guard.release(client)

    if job.status is JobStatus.FAILED:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=job.error)
    return JobStatusResponse.from_job(job, jobs.now())
