"""Entry point for the token safety API server."""

import asyncio

import uvicorn
from loguru import logger

from config.settings import settings
from token_safety.api.app import create_app
from token_safety.utils.logger import setup_logger


async def main() -> None:
    setup_logger(json_logs=settings.json_logs, level=settings.log_level)
    logger.info(f"Starting token safety API on http://{settings.api_host}:{settings.api_port}")

    config = uvicorn.Config(
        app=create_app(),
        host=settings.api_host,
        port=settings.api_port,
        log_level="warning",
        loop="none",  # use the running event loop
    )
    server = uvicorn.Server(config)
    await server.serve()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
