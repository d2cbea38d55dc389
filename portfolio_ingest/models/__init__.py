from portfolio_ingest.models.wallets import Wallet
from portfolio_ingest.models.ingestion import IngestionRecord

__all__ = [
    "Wallet",
    "IngestionRecord",
]
