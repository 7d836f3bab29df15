"""FastAPI application factory for the token safety API."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger
from starlette.middleware.cors import CORSMiddleware

from config.settings import Settings, settings
from token_safety.analyzers.chains import build_chains
from token_safety.analyzers.honeypot_is.client import HoneypotIsClient
from token_safety.analyzers.onchain.client import OnchainAnalyzer
from token_safety.analyzers.service import TokenSafetyService
from token_safety.api.dependencies import API_VERSION
from token_safety.api.middleware import SecurityHeadersMiddleware


def build_service(s: Settings) -> tuple[TokenSafetyService, list]:
    """Wire real source clients from settings. Returns (service, clients to close)."""
    honeypot = HoneypotIsClient(
        base_url=s.honeypot_api_url,
        api_key=s.honeypot_api_key,
        max_rps=s.honeypot_max_rps,
        timeout=s.honeypot_timeout_sec,
    )
    onchain = OnchainAnalyzer(
        build_chains(s),
        max_rps=s.onchain_max_rps,
        timeout=s.onchain_timeout_sec,
    )
    service = TokenSafetyService(
        honeypot,
        onchain,
        # Outer timeout covers client retries
        honeypot_timeout=s.honeypot_timeout_sec * 2,
        onchain_timeout=s.onchain_timeout_sec * 2,
    )
    return service, [honeypot, onchain]


def create_app(service: TokenSafetyService | None = None, s: Settings = settings) -> FastAPI:
    """Build and configure the FastAPI application.

    When ``service`` is given it is used as-is (tests); otherwise real
    clients are created on startup and closed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        clients: list = []
        if service is None:
            app.state.service, clients = build_service(s)
        else:
            app.state.service = service
        logger.info(
            f"[API] Token safety API v{API_VERSION} ready, "
            f"chains={app.state.service.supported_chains()}"
        )
        try:
            yield
        finally:
            for client in clients:
                await client.close()
            logger.info("[API] Shutdown complete")

    app = FastAPI(
        title="Token Safety Check API",
        version=API_VERSION,
        docs_url="/docs" if s.api_debug else None,
        redoc_url=None,
        openapi_url="/openapi.json" if s.api_debug else None,
        lifespan=lifespan,
    )
    if service is not None:
        app.state.service = service

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in s.cors_origins.split(",") if o.strip()],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    from token_safety.api.routers.analyze import router as analyze_router
    from token_safety.api.routers.health import router as health_router

    app.include_router(health_router)
    app.include_router(analyze_router)

    return app
