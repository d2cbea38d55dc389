from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from portfolio_ingest.api.deps import get_app_settings, get_sweep
from portfolio_ingest.core.config import Settings
from portfolio_ingest.core.errors import IngestError
from portfolio_ingest.services.error_policy import handle_failure
from portfolio_ingest.services.ingestion import IngestionSweep

router = APIRouter()


@router.get("/fetch", response_class=PlainTextResponse, summary="Run one ingestion sweep now")
def trigger_sweep(
    sweep: IngestionSweep = Depends(get_sweep),
    settings: Settings = Depends(get_app_settings),
) -> str:
    try:
        sweep.run_sweep()
    except IngestError as exc:
        handle_failure(exc, settings.error_policy, "Manual sweep")
        raise HTTPException(status_code=500, detail=str(exc))
    return "OK\n"
