"""Health check."""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from token_safety.analyzers.chains import chain_name
from token_safety.analyzers.service import TokenSafetyService
from token_safety.api.dependencies import API_VERSION, get_service, uptime_sec

router = APIRouter(tags=["health"])


class SupportedChain(BaseModel):
    chain_id: int
    name: str


class HealthResponse(BaseModel):
    ok: bool
    status: str
    version: str
    timestamp: str
    uptime_sec: int
    supported_chains: list[SupportedChain]


@router.get("/health", response_model=HealthResponse)
async def health_check(service: TokenSafetyService = Depends(get_service)) -> HealthResponse:
    chains = [
        SupportedChain(chain_id=cid, name=chain_name(cid))
        for cid in service.supported_chains()
    ]
    return HealthResponse(
        ok=True,
        status="healthy" if chains else "degraded",
        version=API_VERSION,
        timestamp=datetime.now(UTC).isoformat(),
        uptime_sec=uptime_sec(),
        supported_chains=chains,
    )
