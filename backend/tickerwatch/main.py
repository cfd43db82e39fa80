"""
tickerwatch - FastAPI application
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from tickerwatch.market import TickerService, create_stream_router, create_ticker_service
from tickerwatch.market.config import Settings, load_settings

logger = logging.getLogger(__name__)


def create_app(service: TickerService | None = None, settings: Settings | None = None) -> FastAPI:
    """Build the app. The service is started and stopped by the lifespan."""
    settings = settings or load_settings()
    service = service or create_ticker_service(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # A browser that fails to launch aborts startup
        await service.start()
        try:
            yield
        finally:
            await service.stop()

    app = FastAPI(title="tickerwatch", lifespan=lifespan)
    app.state.ticker_service = service
    app.include_router(create_stream_router(service))
    return app


def run() -> None:
    """Console entry point: configure logging and serve with uvicorn."""
    import uvicorn

    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app(settings=settings)
    logger.info("Ticker WebSocket available at ws://%s:%d/ws", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
