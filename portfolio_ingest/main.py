from contextlib import asynccontextmanager
from functools import partial
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from portfolio_ingest.api.routes import api_router
from portfolio_ingest.core.config import Settings, get_settings
from portfolio_ingest.core.logging import setup_logging
from portfolio_ingest.services.error_policy import handle_failure
from portfolio_ingest.services.ingestion import Fetcher, IngestionSweep
from portfolio_ingest.services.portfolio_client import PortfolioClient
from portfolio_ingest.services.scheduler import SweepScheduler
from portfolio_ingest.services.storage import Storage


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[Storage] = None,
    fetcher: Optional[Fetcher] = None,
) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level, json_format=settings.log_json)

    storage = storage or Storage(settings.storage_path)
    storage.open(settings.seed_addresses)
    fetcher = fetcher or PortfolioClient(settings)
    sweep = IngestionSweep(storage, fetcher, single_flight=settings.single_flight)
    scheduler = SweepScheduler(
        sweep,
        interval_seconds=settings.poll_interval,
        on_error=partial(handle_failure, policy=settings.error_policy, context="Scheduled sweep"),
    )

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        scheduler.start()
        try:
            yield
        finally:
            scheduler.stop()
            close = getattr(fetcher, "close", None)
            if close is not None:
                close()
            storage.close()

    app = FastAPI(title=settings.app_name, docs_url="/docs", redoc_url="/redoc", lifespan=lifespan)
    app.state.settings = settings
    app.state.storage = storage
    app.state.sweep = sweep
    app.state.scheduler = scheduler

    app.include_router(api_router)

    return app


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
