# competition/services/storage.py
import logging

from django.conf import settings
from django.db import OperationalError, transaction
from tenacity import (
    RetryError,
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..exceptions import StorageUnavailable

logger = logging.getLogger(__name__)


def _competition_setting(name, default):
    return getattr(settings, "COMPETITION", {}).get(name, default)


def run_in_transaction(func, *args, **kwargs):
    """
    Run one unit of work inside its own atomic block.

    Transient database failures (lock timeouts, serialization failures) are
    retried a bounded number of times; each try rolls back completely, so an
    exhausted retry leaves nothing committed and surfaces as StorageUnavailable.
    Policy errors propagate on the first raise.
    """
    retrying = Retrying(
        retry=retry_if_exception_type(OperationalError),
        stop=stop_after_attempt(max(1, int(_competition_setting("STORAGE_RETRY_ATTEMPTS", 3)))),
        wait=wait_exponential(multiplier=float(_competition_setting("STORAGE_RETRY_BACKOFF", 0.05)), max=2),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )
    try:
        for attempt in retrying:
            with attempt:
                with transaction.atomic():
                    return func(*args, **kwargs)
    except RetryError as exc:
        last = exc.last_attempt.exception()
        logger.error("Storage retries exhausted for %s: %s", getattr(func, "__name__", func), last)
        raise StorageUnavailable() from last
