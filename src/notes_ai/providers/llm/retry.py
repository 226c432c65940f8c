import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from notes_ai.providers.llm.errors import GenerationError

logger = logging.getLogger(__name__)
T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[object]]


class RetryCoordinator:
    """Run an attempt, retrying retryable failures with exponential backoff.

    The k-th retry waits ``base_delay_ms * 2 ** (k - 1)``. Only the last
    classified error reaches the caller; earlier ones are logged.
    """

    def __init__(self, max_retries: int = 2, base_delay_ms: int = 1000, sleep: SleepFn | None = None) -> None:
        self.max_retries = max(max_retries, 0)
        self.base_delay_ms = max(base_delay_ms, 0)
        self._sleep = sleep or asyncio.sleep

    def backoff_ms(self, retry_number: int) -> int:
        return self.base_delay_ms * 2 ** (retry_number - 1)

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        classify: Callable[[BaseException], GenerationError],
    ) -> T:
        attempt = 1
        while True:
            try:
                return await operation()
            except Exception as exc:
                error = classify(exc)
                if not error.retryable or attempt > self.max_retries:
                    if attempt > 1:
                        logger.warning(
                            "llm.retry.stopped attempts=%d code=%s detail=%s",
                            attempt,
                            error.code,
                            error.message,
                        )
                    if error is exc:
                        raise
                    raise error from exc

                delay_ms = self.backoff_ms(attempt)
                logger.warning(
                    "llm.retry attempt=%d code=%s delay_ms=%d detail=%s",
                    attempt,
                    error.code,
                    delay_ms,
                    error.message,
                )
                await self._sleep(delay_ms / 1000)
                attempt += 1
