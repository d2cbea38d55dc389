import logging
import os

from portfolio_ingest.core.config import ErrorPolicy

logger = logging.getLogger(__name__)

EXIT_STATUS = 1

terminate = os._exit


def handle_failure(exc: BaseException, policy: ErrorPolicy, context: str) -> None:
    """Apply ``policy`` to a failed sweep or report.

    Under ``exit`` the process terminates. Under ``report`` the failure is
    logged and the caller carries on (the HTTP layer answers 500, the
    scheduler goes back to idle).
    """
    if policy == ErrorPolicy.EXIT:
        logger.critical("%s failed, terminating: %s", context, exc, exc_info=exc)
        for handler in logging.getLogger().handlers:
            handler.flush()
        terminate(EXIT_STATUS)
        return
    logger.error("%s failed: %s", context, exc, exc_info=exc)
