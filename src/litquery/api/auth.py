"""Static shared-secret check for the query API."""

from __future__ import annotations

import hmac

from fastapi import HTTPException, Request, Security, status
from fastapi.security import APIKeyHeader

from litquery.config.settings import Settings
from litquery.observability.logger import get_logger

logger = get_logger("auth")

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verify_api_key(
    request: Request,
    api_key: str | None = Security(api_key_header),
) -> None:
    """FastAPI dependency: enforce ``X-API-Key`` when a shared secret is configured."""
    settings: Settings = request.app.state.settings
    if not settings.shared_secret:
        return
    if api_key is None or not hmac.compare_digest(api_key, settings.shared_secret):
        logger.warning("invalid_api_key_attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )
