"""Bounded retries around storage calls for transient transport errors."""
import logging
from typing import Callable, TypeVar

from sqlalchemy.exc import DisconnectionError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session as DbSession
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from api import config

logger = logging.getLogger(__name__)

T = TypeVar("T")

# IntegrityError and application errors are deliberately absent.
TRANSIENT_ERRORS = (OperationalError, DisconnectionError, PoolTimeoutError)


def with_retry(db: DbSession, operation: Callable[[], T]) -> T:
    """Run ``operation`` against ``db``, retrying transient failures with backoff.

    The session is rolled back before every new attempt.
    """

    @retry(
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        stop=stop_after_attempt(config.STORAGE_RETRY_ATTEMPTS),
        wait=wait_exponential(
            multiplier=config.STORAGE_RETRY_WAIT_SECONDS,
            max=config.STORAGE_RETRY_MAX_WAIT_SECONDS,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    def _attempt() -> T:
        try:
            return operation()
        except TRANSIENT_ERRORS:
            db.rollback()
            raise

    return _attempt()
