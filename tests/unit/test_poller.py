"""Tests for the polling client against a mocked HTTP transport."""

import httpx
import pytest

from litquery.client.poller import (
    JobFailedError,
    JobPoller,
    PollCallbacks,
    PollTimeoutError,
    SubmissionRejectedError,
)
from litquery.exceptions import ExpiredError, NotFoundError


async def _no_sleep(_seconds):
    return None


def _poller(statuses, submit_status=202, max_attempts=5):
    """Serve ``statuses`` (dicts, ints or exceptions) in order to successive polls."""
    queue = list(statuses)
    seen = {"polls": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            if submit_status >= 400:
                return httpx.Response(submit_status, json={"detail": {"error": "Invalid input"}})
            return httpx.Response(
                submit_status,
                json={
                    "job_id": "job-1",
                    "status": "pending",
                    "estimated_time": "15-60 seconds",
                    "check_status_url": "/query/jobs/job-1",
                },
            )
        seen["polls"] += 1
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        if isinstance(item, int):
            return httpx.Response(item, json={"detail": "gone"})
        return httpx.Response(200, json=item)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test")
    return JobPoller(client, interval_seconds=0, max_attempts=max_attempts, sleep=_no_sleep), seen


PROCESSING = {"job_id": "job-1", "status": "processing", "progress": "Searching documents..."}
COMPLETED = {"job_id": "job-1", "status": "completed", "response": "Answer [1].", "confidence": 85}


@pytest.mark.asyncio
async def test_submit_and_wait_until_completed():
    poller, seen = _poller([PROCESSING, PROCESSING, COMPLETED])
    progress, done = [], []
    result = await poller.submit_and_wait(
        {"corpus_id": "c", "query": "pin1"},
        PollCallbacks(on_progress=progress.append, on_complete=done.append),
    )

    assert result["response"] == "Answer [1]."
    assert seen["polls"] == 3
    assert [p["status"] for p in progress] == ["processing", "processing", "completed"]
    assert done == [COMPLETED]


@pytest.mark.asyncio
async def test_failed_job_surfaces_server_error():
    failed = {"job_id": "job-1", "status": "failed", "error": "Embedding service timed out"}
    poller, _ = _poller([PROCESSING, failed])
    errors = []
    with pytest.raises(JobFailedError, match="Embedding service timed out"):
        await poller.wait("job-1", PollCallbacks(on_error=errors.append))
    assert isinstance(errors[0], JobFailedError)


@pytest.mark.asyncio
async def test_timeout_after_max_attempts():
    poller, seen = _poller([PROCESSING], max_attempts=4)
    with pytest.raises(PollTimeoutError, match="Query processing timeout"):
        await poller.wait("job-1")
    assert seen["polls"] == 4


@pytest.mark.asyncio
async def test_expired_job_stops_polling():
    poller, seen = _poller([PROCESSING, 410])
    with pytest.raises(ExpiredError):
        await poller.wait("job-1")
    assert seen["polls"] == 2


@pytest.mark.asyncio
async def test_unknown_job():
    poller, _ = _poller([404])
    with pytest.raises(NotFoundError):
        await poller.wait("job-1")


@pytest.mark.asyncio
async def test_transient_errors_are_retried():
    poller, seen = _poller([httpx.ConnectError("refused"), 503, COMPLETED])
    result = await poller.wait("job-1")
    assert result["status"] == "completed"
    assert seen["polls"] == 3


@pytest.mark.asyncio
async def test_transient_error_on_last_attempt_propagates():
    poller, _ = _poller([httpx.ConnectError("refused")], max_attempts=2)
    with pytest.raises(httpx.ConnectError):
        await poller.wait("job-1")


@pytest.mark.asyncio
async def test_rejected_submission():
    poller, seen = _poller([COMPLETED], submit_status=400)
    errors = []
    with pytest.raises(SubmissionRejectedError) as exc:
        await poller.submit_and_wait({"query": ""}, PollCallbacks(on_error=errors.append))
    assert exc.value.status_code == 400
    assert exc.value.detail == {"error": "Invalid input"}
    assert seen["polls"] == 0
    assert errors
