"""
Unit-of-work helper for service methods.

A decorated method receives an open Session as its first argument after
`self`. Called without `session=`, the method runs inside its own
transaction that is committed on return and retried when an optimistic
version check fails. Called with `session=`, it joins the caller's
transaction and leaves commit/retry to the caller.
"""

import functools
import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from gigmarket.config import settings
from gigmarket.core.exceptions import ConcurrencyConflictError

logger = logging.getLogger(__name__)


def _log_conflict(retry_state) -> None:
    logger.warning(
        f"⚠️  Concurrent update detected, retrying unit of work "
        f"(attempt {retry_state.attempt_number})"
    )


def unit_of_work(func: Callable) -> Callable:
    """Run a service method in a retried transaction unless a session is supplied."""

    @functools.wraps(func)
    def wrapper(self, *args, session: Optional[Session] = None, **kwargs):
        if session is not None:
            return func(self, session, *args, **kwargs)

        retrying = Retrying(
            stop=stop_after_attempt(settings.CONFLICT_RETRY_ATTEMPTS),
            wait=wait_exponential(multiplier=settings.CONFLICT_RETRY_BACKOFF_SECONDS, max=1),
            retry=retry_if_exception_type(StaleDataError),
            before_sleep=_log_conflict,
            reraise=True,
        )
        try:
            for attempt in retrying:
                with attempt:
                    with self.session_factory.begin() as db:
                        return func(self, db, *args, **kwargs)
        except StaleDataError as e:
            logger.error(f"❌ {func.__qualname__} gave up after {settings.CONFLICT_RETRY_ATTEMPTS} attempts: {e}")
            raise ConcurrencyConflictError() from e

    return wrapper
