"""Token analysis endpoint."""

from __future__ import annotations

from dataclasses import asdict, fields
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, Field

from token_safety.analyzers.chains import UnsupportedChainError, chain_name
from token_safety.analyzers.models import OnchainSourceRecord
from token_safety.analyzers.service import TokenAnalysis, TokenSafetyService
from token_safety.api.dependencies import API_VERSION, get_service

router = APIRouter(prefix="/api/v1", tags=["analyze"])


class TokenCheckRequest(BaseModel):
    token_address: str = Field(
        pattern=r"^0x[a-fA-F0-9]{40}$",
        description="Token contract address (0x-prefixed, 40 hex chars)",
    )
    chain_id: int = Field(gt=0, description="EVM chain id")


def _error(code: str, message: str, status_code: int, **extra: Any) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": {"code": code, "message": message, **extra}},
    )


def _onchain_details(record: OnchainSourceRecord) -> dict[str, Any]:
    # asdict would deep-copy the read-only checks mapping
    details = {f.name: getattr(record, f.name) for f in fields(record)}
    details["checks"] = {k: v.value for k, v in record.checks.items()}
    return details


def _serialize(analysis: TokenAnalysis) -> dict[str, Any]:
    verdict = analysis.verdict
    breakdown = verdict.breakdown
    return {
        "token": {
            "address": analysis.address,
            "chain_id": analysis.chain_id,
            "chain_name": chain_name(analysis.chain_id),
            "name": analysis.token_name,
            "symbol": analysis.token_symbol,
        },
        "analysis": {
            "safety_score": verdict.safety_score,
            "risk_level": verdict.risk_level.value,
            "is_honeypot": verdict.is_honeypot,
            "confidence": verdict.confidence,
            "warnings": list(verdict.warnings),
            "recommendations": list(verdict.recommendations),
            "risks": {k.lower(): v for k, v in breakdown.categories.items()},
            "sources": list(verdict.sources_checked),
            "red_flags": breakdown.critical_count,
            "passed_basic_checks": breakdown.passed_basic_checks,
        },
        "details": {
            "honeypot": asdict(analysis.honeypot) if analysis.honeypot else None,
            "onchain": (
                _onchain_details(analysis.onchain) if analysis.onchain else None
            ),
        },
        "meta": {
            "timestamp": datetime.now(UTC).isoformat(),
            "processing_time_ms": analysis.processing_time_ms,
            "version": API_VERSION,
        },
    }


@router.post("/analyze")
async def analyze_token(
    body: TokenCheckRequest,
    service: TokenSafetyService = Depends(get_service),
) -> Any:
    """Analyze token safety: honeypot simulation + on-chain inspection."""
    try:
        analysis = await service.analyze(body.token_address, body.chain_id)
    except UnsupportedChainError as e:
        return _error(
            "UNSUPPORTED_CHAIN",
            str(e),
            status.HTTP_400_BAD_REQUEST,
            supported_chains=service.supported_chains(),
        )
    except Exception:
        logger.exception(f"[API] Analysis failed for {body.token_address}")
        return _error(
            "INTERNAL_ERROR",
            "An unexpected error occurred",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return {"success": True, "data": _serialize(analysis)}
