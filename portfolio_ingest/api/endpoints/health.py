from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends

from portfolio_ingest.api.deps import get_app_settings, get_scheduler
from portfolio_ingest.core.config import Settings
from portfolio_ingest.services.scheduler import SweepScheduler

router = APIRouter()


@router.get("/health", summary="Health check")
def health_check(
    settings: Settings = Depends(get_app_settings),
    scheduler: SweepScheduler = Depends(get_scheduler),
) -> Dict[str, Any]:
    return {
        "status": "ok",
        "app": settings.app_name,
        "scheduler": scheduler.state.value,
        "poll_interval": settings.poll_interval,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
