"""FastAPI dependency injection: analysis service, process metadata."""

from __future__ import annotations

import time

from fastapi import HTTPException, Request, status

from token_safety.analyzers.service import TokenSafetyService

API_VERSION = "1.0.0"
STARTED_AT = time.monotonic()


def get_service(request: Request) -> TokenSafetyService:
    """Return the analysis service attached to the running app."""
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Analysis service not initialised",
        )
    return service


def uptime_sec() -> int:
    return int(time.monotonic() - STARTED_AT)
