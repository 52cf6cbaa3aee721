"""Bounded retry with exponential backoff and observable progress."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from config.exceptions import InvalidConfigError, RetryCancelledError
from config.settings import Settings
from models.enums import NotificationSeverity
from models.retry_state import RetryState
from resilience.notifications import Notification, NotificationSink

logger = logging.getLogger(__name__)

T = TypeVar("T")

Operation = Callable[[], Awaitable[T]]
Sleep = Callable[[float], Awaitable[None]]


@dataclass
class RetryOptions:
    """Retry configuration.

    Attributes:
        max_attempts: Total attempts including the first one (>= 1).
        delay: Base wait between attempts, in seconds.
        backoff: Double the wait after every failed attempt.
        on_retry: Called after a failed attempt that will be retried, with the
            number of attempts made so far.
        on_max_attempts_reached: Called once when the last attempt fails.
    """
    max_attempts: int = 3
    delay: float = 1.0
    backoff: bool = True
    on_retry: Optional[Callable[[int], None]] = None
    on_max_attempts_reached: Optional[Callable[[], None]] = None

    @classmethod
    def from_settings(cls, settings: Settings, **overrides) -> "RetryOptions":
        values = {
            "max_attempts": settings.retry_max_attempts,
            "delay": settings.retry_delay,
            "backoff": settings.retry_backoff,
        }
        values.update(overrides)
        return cls(**values)

    def delay_for(self, retry_number: int) -> float:
        """Wait before retry ``retry_number`` (1-indexed)."""
        if self.backoff:
            return self.delay * 2 ** (retry_number - 1)
        return self.delay


class RetryExecutor:
    """Runs an async operation until it succeeds or the attempt bound is hit.

    Attempts are strictly sequential. The only suspension point added by the
    executor is the wait between a failed attempt and the next one. The last
    exception raised by the operation is re-raised unchanged on exhaustion.
    """

    def __init__(
        self,
        options: Optional[RetryOptions] = None,
        notifier: Optional[NotificationSink] = None,
        sleep: Optional[Sleep] = None,
    ):
        self.options = options or RetryOptions()
        if self.options.max_attempts < 1:
            raise InvalidConfigError(
                "max_attempts must be >= 1", {"max_attempts": self.options.max_attempts}
            )
        if self.options.delay < 0:
            raise InvalidConfigError("delay must be non-negative", {"delay": self.options.delay})
        self.notifier = notifier
        self._sleep = sleep or asyncio.sleep
        self.state = RetryState()

    @property
    def is_retrying(self) -> bool:
        return self.state.is_retrying

    @property
    def attempts(self) -> int:
        return self.state.attempts

    @property
    def last_error(self) -> Optional[BaseException]:
        return self.state.last_error

    def reset(self) -> None:
        """Clear observable state. Does not affect a call in flight."""
        self.state = RetryState()

    async def execute_with_retry(
        self,
        operation: Operation[T],
        cancel_event: Optional[asyncio.Event] = None,
    ) -> T:
        """Execute ``operation`` with retries.

        Args:
            operation: Zero-argument coroutine function to run.
            cancel_event: Optional event; once set, no further attempt starts
                and a pending backoff wait ends early.

        Returns:
            The operation's result from the first successful attempt.

        Raises:
            Exception: The exception from the last attempt, once exhausted.
            RetryCancelledError: If ``cancel_event`` was set.
        """
        max_attempts = self.options.max_attempts
        attempt = 0
        last_error: Optional[Exception] = None

        while attempt < max_attempts:
            if cancel_event is not None and cancel_event.is_set():
                self._cancelled(attempt, last_error)

            self.state = RetryState(is_retrying=attempt > 0, attempts=attempt, last_error=None)
            try:
                result = await operation()
            except Exception as e:
                last_error = e
                attempt += 1
                self.state = RetryState(is_retrying=True, attempts=attempt, last_error=e)

                if attempt < max_attempts:
                    wait = self.options.delay_for(attempt)
                    logger.info(
                        "Attempt %d/%d failed (%s), retrying in %.2fs",
                        attempt, max_attempts, e, wait,
                    )
                    if self.options.on_retry:
                        self.options.on_retry(attempt)
                    self._notify(Notification(
                        title="Retrying...",
                        description=f"Attempt {attempt + 1} of {max_attempts}",
                        duration=2.0,
                    ))
                    await self._pause(wait, cancel_event, attempt, last_error)
                continue

            self.state = RetryState()
            return result

        self.state = RetryState(is_retrying=False, attempts=max_attempts, last_error=last_error)
        logger.error("Operation failed after %d attempts: %s", max_attempts, last_error)
        if self.options.on_max_attempts_reached:
            self.options.on_max_attempts_reached()
        self._notify(Notification(
            title="Operation failed",
            description=f"Failed after {max_attempts} attempts: {last_error}",
            severity=NotificationSeverity.DESTRUCTIVE,
        ))
        raise last_error

    async def _pause(
        self,
        wait: float,
        cancel_event: Optional[asyncio.Event],
        attempt: int,
        last_error: Optional[Exception],
    ) -> None:
        if cancel_event is None:
            await self._sleep(wait)
            return
        sleeper = asyncio.ensure_future(self._sleep(wait))
        waiter = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait({sleeper, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (sleeper, waiter):
                if not task.done():
                    task.cancel()
        if cancel_event.is_set():
            self._cancelled(attempt, last_error)
        sleeper.result()

    def _cancelled(self, attempt: int, last_error: Optional[Exception]) -> None:
        self.state = RetryState(is_retrying=False, attempts=attempt, last_error=last_error)
        logger.info("Retry cancelled after %d attempt(s)", attempt)
        raise RetryCancelledError(attempts=attempt)

    def _notify(self, notification: Notification) -> None:
        if self.notifier is not None:
            self.notifier.notify(notification)


class ManualRetry:
    """User-triggered single retry that reports its outcome as a notice."""

    def __init__(self, notifier: Optional[NotificationSink] = None):
        self.notifier = notifier
        self.is_retrying = False

    async def retry(self, operation: Callable[[], Awaitable[object]]) -> bool:
        """Run ``operation`` once unless a retry is already running.

        Returns:
            True on success, False on failure or when skipped.
        """
        if self.is_retrying:
            return False

        self.is_retrying = True
        try:
            await operation()
        except Exception as e:
            logger.warning("Manual retry failed: %s", e)
            self._notify(Notification(
                title="Retry failed",
                description=str(e) or "Operation failed",
                severity=NotificationSeverity.DESTRUCTIVE,
            ))
            return False
        finally:
            self.is_retrying = False

        self._notify(Notification(
            title="Success",
            description="Operation completed successfully",
            severity=NotificationSeverity.SUCCESS,
        ))
        return True

    def _notify(self, notification: Notification) -> None:
        if self.notifier is not None:
            self.notifier.notify(notification)
