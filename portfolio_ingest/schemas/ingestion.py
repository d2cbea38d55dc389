from datetime import datetime

from pydantic import BaseModel, Field


class SweepSummary(BaseModel):
    started_at: datetime
    finished_at: datetime
    wallets: int = Field(..., description="Wallets listed at sweep start")
    records_written: int
