import logging
from contextlib import nullcontext
from datetime import datetime
from threading import Lock
from typing import Callable, Protocol

from portfolio_ingest.core.errors import IngestError
from portfolio_ingest.core.timeutil import utcnow
from portfolio_ingest.schemas.ingestion import SweepSummary
from portfolio_ingest.services.storage import Storage

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    def fetch(self, address: str) -> str: ...


class IngestionSweep:
    """One pass over every tracked wallet: fetch, timestamp, append.

    Shared by the scheduler and the manual ``/fetch`` trigger. The first
    failing wallet aborts the rest of the pass; records already written stay.
    Overlapping sweeps are allowed unless ``single_flight`` is set.
    """

    def __init__(
        self,
        storage: Storage,
        fetcher: Fetcher,
        clock: Callable[[], datetime] = utcnow,
        single_flight: bool = False,
    ):
        self.storage = storage
        self.fetcher = fetcher
        self.clock = clock
        self._lock = Lock() if single_flight else None

    def run_sweep(self) -> SweepSummary:
        with self._lock if self._lock is not None else nullcontext():
            return self._run()

    def _run(self) -> SweepSummary:
        started_at = self.clock()
        wallets = self.storage.list_wallets()
        logger.info("Sweep started for %d wallets", len(wallets))
        written = 0
        for wallet in wallets:
            try:
                payload = self.fetcher.fetch(wallet.address)
                self.storage.append_record(wallet.id, payload, self.clock())
            except IngestError:
                logger.error(
                    "Sweep aborted at wallet %s after %d/%d records", wallet.address, written, len(wallets)
                )
                raise
            written += 1
        summary = SweepSummary(
            started_at=started_at,
            finished_at=self.clock(),
            wallets=len(wallets),
            records_written=written,
        )
        logger.info("Sweep finished: %d records written", written)
        return summary
