from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse

from portfolio_ingest.api.deps import get_app_settings, get_storage
from portfolio_ingest.core.config import Settings
from portfolio_ingest.core.errors import StorageError
from portfolio_ingest.schemas.reports import WalletReportResponse
from portfolio_ingest.services.error_policy import handle_failure
from portfolio_ingest.services.reporting import render_report_table
from portfolio_ingest.services.storage import Storage

router = APIRouter()


def _load_report(storage: Storage, settings: Settings):
    try:
        return storage.latest_report()
    except StorageError as exc:
        handle_failure(exc, settings.error_policy, "Report query")
        raise HTTPException(status_code=500, detail=str(exc))


@router.get("/usd", response_class=HTMLResponse, summary="Latest ingestion per wallet as an HTML table")
def usd_report(
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_app_settings),
) -> str:
    return render_report_table(_load_report(storage, settings))


@router.get("/report", response_model=WalletReportResponse, summary="Latest ingestion per wallet")
def json_report(
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_app_settings),
) -> WalletReportResponse:
    return WalletReportResponse(items=_load_report(storage, settings))
