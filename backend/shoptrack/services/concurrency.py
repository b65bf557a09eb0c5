# Overview: Retry helper for writes that race on the same rows.

from __future__ import annotations

import logging
import time

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..store import DataStore

logger = logging.getLogger(__name__)


def run_with_retry(store: DataStore, func, *, attempts: int = 5, backoff_base: float = 0.05):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (database locked, deadlocks) and StaleDataError
    (optimistic locking conflicts). Business errors pass straight through.
    A retried operation re-reads current state, so an already consumed token
    or already fulfilled request fails cleanly on the next attempt.
    """
    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            store.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            logger.debug("Retrying after concurrency failure (attempt %d): %s", attempt + 1, exc)
            time.sleep(backoff_base * (2 ** attempt))
    if last_exc:
        raise last_exc
