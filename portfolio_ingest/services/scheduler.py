import logging
from enum import Enum
from threading import Lock
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from portfolio_ingest.core.errors import IngestError
from portfolio_ingest.services.ingestion import IngestionSweep

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "ingestion-sweep"


class SchedulerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class SweepScheduler:
    """Fires ``IngestionSweep.run_sweep`` every ``interval_seconds``.

    The first run happens one interval after ``start``. Manual triggers call
    the sweep directly and are not coordinated with this timer.
    """

    def __init__(
        self,
        sweep: IngestionSweep,
        interval_seconds: float,
        on_error: Callable[[IngestError], None],
    ):
        self.sweep = sweep
        self.interval_seconds = interval_seconds
        self.on_error = on_error
        self._scheduler: Optional[BackgroundScheduler] = None
        self._state = SchedulerState.IDLE
        self._state_lock = Lock()

    @property
    def state(self) -> SchedulerState:
        return self._state

    def _set_state(self, state: SchedulerState) -> None:
        with self._state_lock:
            if self._state != SchedulerState.STOPPED:
                self._state = state

    def start(self) -> None:
        if self._scheduler is not None:
            return
        self._scheduler = BackgroundScheduler()
        self._scheduler.add_job(
            self.run_job,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id=SWEEP_JOB_ID,
            replace_existing=True,
        )
        self._scheduler.start()
        with self._state_lock:
            self._state = SchedulerState.IDLE
        logger.info("Scheduler started (interval=%ss)", self.interval_seconds)

    def stop(self) -> None:
        with self._state_lock:
            self._state = SchedulerState.STOPPED
        if self._scheduler:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Scheduler stopped")

    def run_job(self) -> None:
        if self._state == SchedulerState.STOPPED:
            return
        self._set_state(SchedulerState.RUNNING)
        logger.info("Running scheduled sweep")
        try:
            self.sweep.run_sweep()
        except IngestError as exc:
            self.on_error(exc)
        finally:
            self._set_state(SchedulerState.IDLE)
