from fastapi import APIRouter

from portfolio_ingest.api.endpoints import health, ingestion, reports

api_router = APIRouter()
api_router.include_router(health.router, tags=["system"])
api_router.include_router(ingestion.router, tags=["ingestion"])
api_router.include_router(reports.router, tags=["reports"])
