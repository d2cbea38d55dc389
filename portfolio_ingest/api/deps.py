from fastapi import Request

from portfolio_ingest.core.config import Settings
from portfolio_ingest.services.ingestion import IngestionSweep
from portfolio_ingest.services.scheduler import SweepScheduler
from portfolio_ingest.services.storage import Storage


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def get_sweep(request: Request) -> IngestionSweep:
    return request.app.state.sweep


def get_scheduler(request: Request) -> SweepScheduler:
    return request.app.state.scheduler
