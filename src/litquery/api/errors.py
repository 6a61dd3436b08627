"""Translation of service exceptions into HTTP errors."""

from __future__ import annotations

from fastapi import HTTPException, status

from litquery.exceptions import (
    ConfigurationError,
    ExpiredError,
    InputValidationError,
    InvalidTransitionError,
    LitQueryError,
    NotFoundError,
    PersistenceError,
    RateLimitError,
    UpstreamError,
)

_STATUS_BY_TYPE: list[tuple[type[LitQueryError], int]] = [
    (ConfigurationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ExpiredError, status.HTTP_410_GONE),
    (InvalidTransitionError, status.HTTP_409_CONFLICT),
    (UpstreamError, status.HTTP_502_BAD_GATEWAY),
    (PersistenceError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def to_http_exception(error: LitQueryError) -> HTTPException:
    if isinstance(error, InputValidationError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Invalid input", "details": error.errors},
        )
    if isinstance(error, RateLimitError):
        return HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={"error": "Rate limit exceeded", "message": str(error)},
            headers={"Retry-After": str(error.retry_after)},
        )
    if isinstance(error, ExpiredError):
        return HTTPException(
            status_code=status.HTTP_410_GONE,
            detail={
                "error": "Job has expired",
                "message": "Results are only available for a limited time after creation",
            },
        )
    for error_type, code in _STATUS_BY_TYPE:
        if isinstance(error, error_type):
            return HTTPException(status_code=code, detail=str(error))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))
