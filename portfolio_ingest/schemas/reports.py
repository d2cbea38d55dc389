from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class WalletReportRow(BaseModel):
    address: str
    created_at: Optional[datetime] = None


class WalletReportResponse(BaseModel):
    items: List[WalletReportRow]
