"""HTTP client that submits query jobs and polls them to completion."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import httpx

from litquery.exceptions import ExpiredError, LitQueryError, NotFoundError
from litquery.observability.logger import get_logger

logger = get_logger("poller")

DEFAULT_BASE_URL = "http://localhost:8000"


class JobFailedError(LitQueryError):
    """The server reported the job as failed; the message is its error text."""


class PollTimeoutError(LitQueryError):
    """The poll budget ran out before the job reached a terminal state."""


class SubmissionRejectedError(LitQueryError):
    def __init__(self, status_code: int, detail) -> None:
        super().__init__(f"Submission rejected ({status_code}): {detail}")
        self.status_code = status_code
        self.detail = detail


@dataclass
class PollCallbacks:
    on_progress: Callable[[dict], None] | None = None
    on_complete: Callable[[dict], None] | None = None
    on_error: Callable[[Exception], None] | None = None


class JobPoller:
    def __init__(
        self,
        client: httpx.AsyncClient,
        interval_seconds: float = 2.0,
        max_attempts: int = 90,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self._interval = interval_seconds
        self._max_attempts = max_attempts
        self._sleep = sleep

    @classmethod
    def connect(
        cls,
        base_url: str = DEFAULT_BASE_URL,
        api_key: str = "",
        timeout: float = 30.0,
        **kwargs,
    ) -> JobPoller:
        headers = {"X-API-Key": api_key} if api_key else {}
        client = httpx.AsyncClient(base_url=base_url, headers=headers, timeout=timeout)
        return cls(client, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def submit(self, request: dict) -> dict:
        response = await self._client.post("/query/jobs", json=request)
        if response.status_code >= 400:
            raise SubmissionRejectedError(response.status_code, _detail(response))
        return response.json()

    async def check_status(self, job_id: str) -> dict:
        response = await self._client.get(f"/query/jobs/{job_id}")
        if response.status_code == 410:
            raise ExpiredError(f"Job {job_id} has expired")
        if response.status_code == 404:
            raise NotFoundError(f"Job not found: {job_id}")
        response.raise_for_status()
        return response.json()

    async def wait(self, job_id: str, callbacks: PollCallbacks | None = None) -> dict:
        """Poll until the job completes.

        Raises JobFailedError with the server's error text, PollTimeoutError
        when attempts run out, and ExpiredError or NotFoundError immediately.
        Other poll errors are retried, except on the final attempt.
        """
        callbacks = callbacks or PollCallbacks()
        try:
            for attempt in range(self._max_attempts):
                if attempt > 0:
                    await self._sleep(self._interval)
                try:
                    status = await self.check_status(job_id)
                except (ExpiredError, NotFoundError):
                    raise
                except httpx.HTTPError as e:
                    logger.warning("poll_error", job_id=job_id, attempt=attempt, error=str(e))
                    if attempt == self._max_attempts - 1:
                        raise
                    continue

                if callbacks.on_progress:
                    callbacks.on_progress(status)
                if status["status"] == "completed":
                    if callbacks.on_complete:
                        callbacks.on_complete(status)
                    return status
                if status["status"] == "failed":
                    raise JobFailedError(status.get("error") or "Query processing failed")

            raise PollTimeoutError("Query processing timeout - please try again")
        except Exception as e:
            if callbacks.on_error:
                callbacks.on_error(e)
            raise

    async def submit_and_wait(self, request: dict, callbacks: PollCallbacks | None = None) -> dict:
        try:
            submitted = await self.submit(request)
        except Exception as e:
            if callbacks and callbacks.on_error:
                callbacks.on_error(e)
            raise
        logger.info("job_submitted", job_id=submitted["job_id"])
        return await self.wait(submitted["job_id"], callbacks)


def _detail(response: httpx.Response):
    try:
        return response.json().get("detail")
    except ValueError:
        return response.text
