"""Bounded retry for inserts guarded by a unique constraint."""
from dataclasses import dataclass, field
from typing import Callable, Generic, List, Optional, TypeVar

import structlog
from sqlalchemy.exc import IntegrityError

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass
class RetryOutcome(Generic[T]):
    """Result of a bounded retry run."""

    value: Optional[T]
    attempts: int
    errors: List[Exception] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.value is not None


class BoundedRetry:
    """
    Run an attempt up to ``max_attempts`` times while it fails with one of
    ``retry_on``.

    Each attempt is called with its 1-based attempt number and must generate
    any fresh candidate (a new random code) itself. ``on_retry`` runs after a
    failed attempt, typically ``db.rollback``. Exceptions not listed in
    ``retry_on`` propagate immediately.

    Example:
        outcome = BoundedRetry(10, on_retry=db.rollback).run(lambda n: insert_code(db))
        if not outcome.succeeded:
            ...
    """

    def __init__(
        self,
        max_attempts: int,
        retry_on: tuple = (IntegrityError,),
        on_retry: Optional[Callable[[], None]] = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.retry_on = retry_on
        self.on_retry = on_retry

    def run(self, attempt: Callable[[int], T]) -> RetryOutcome[T]:
        errors: List[Exception] = []
        for number in range(1, self.max_attempts + 1):
            try:
                return RetryOutcome(value=attempt(number), attempts=number, errors=errors)
            except self.retry_on as exc:
                errors.append(exc)
                if self.on_retry is not None:
                    self.on_retry()
                logger.warning("retry_attempt_failed", attempt=number, max_attempts=self.max_attempts)
        return RetryOutcome(value=None, attempts=self.max_attempts, errors=errors)
