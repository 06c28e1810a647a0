"""Pacing of oracle calls.

The oracle sits behind an external rate limit, so work is fanned out
in fixed-size batches with a pause between consecutive batches. A
batch size of 1 gives strictly sequential, evenly spaced calls.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Sequence, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class BatchScheduler:
    """
    Run an async worker over items in paced batches.

    Up to ``batch_size`` workers run concurrently (fan-out/fan-in).
    ``delay_seconds`` is awaited between batches only, never before the
    first or after the last. Each worker may be bounded by
    ``timeout_seconds``; a failing or timed-out worker yields its
    exception in the result list instead of aborting the run.
    """

    def __init__(
        self,
        batch_size: int,
        delay_seconds: float,
        timeout_seconds: Optional[float] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        self.batch_size = batch_size
        self.delay_seconds = delay_seconds
        self.timeout_seconds = timeout_seconds
        self._sleep = sleep
        self._semaphore: Optional[asyncio.Semaphore] = None

    async def _guarded(self, worker: Callable[[T], Awaitable[R]], item: T) -> R:
        async with self._semaphore:
            if self.timeout_seconds is None:
                return await worker(item)
            return await asyncio.wait_for(worker(item), timeout=self.timeout_seconds)

    async def run(
        self,
        items: Sequence[T],
        worker: Callable[[T], Awaitable[R]],
    ) -> list[Union[R, BaseException]]:
        """
        Process ``items`` with ``worker``.

        Returns:
            One entry per item, in input order: the worker's result or
            the exception it raised
        """
        # Created here so the semaphore binds to the running loop.
        self._semaphore = asyncio.Semaphore(self.batch_size)
        results: list[Union[R, BaseException]] = []
        batches = [
            items[start : start + self.batch_size]
            for start in range(0, len(items), self.batch_size)
        ]

        for index, batch in enumerate(batches):
            if index > 0 and self.delay_seconds > 0:
                await self._sleep(self.delay_seconds)
            logger.debug(
                "[SCHEDULER] Batch %d/%d (%d items)", index + 1, len(batches), len(batch)
            )
            batch_results = await asyncio.gather(
                *(self._guarded(worker, item) for item in batch),
                return_exceptions=True,
            )
            results.extend(batch_results)

        return results
