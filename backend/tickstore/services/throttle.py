"""
Windowed batch runner for rate-limited job queues.

Jobs are started in chunks of at most `quota`; the next chunk is not started
until every job of the current chunk has settled and at least `window_ms`
has passed since the current chunk started. Outcomes come back in input order,
each one either a value or the exception the job raised.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Job = Callable[[], Awaitable[T]]


@dataclass
class JobOutcome(Generic[T]):
    """Settled result of one job: a value, or the error it raised."""
    value: Optional[T] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ThrottledBatchRunner:
    """Start at most `quota` jobs per `window_ms` window."""

    def __init__(self, quota: int, window_ms: int) -> None:
        self.quota = quota
        self.window_ms = window_ms

    async def run(self, jobs: Sequence[Job[T]]) -> list[JobOutcome[T]]:
        if not jobs:
            return []
        if self.quota <= 0:
            logger.warning("Batch quota is %s; skipping %s jobs", self.quota, len(jobs))
            return []

        outcomes: list[JobOutcome[T]] = []
        cursor = 0
        chunk_number = 0
        while cursor < len(jobs):
            chunk = jobs[cursor:cursor + self.quota]
            cursor += len(chunk)
            chunk_number += 1

            began_at = time.monotonic()
            logger.debug("Starting chunk %s with %s jobs", chunk_number, len(chunk))
            outcomes.extend(await asyncio.gather(*[_settle(job) for job in chunk]))

            if cursor >= len(jobs):
                break
            elapsed_ms = (time.monotonic() - began_at) * 1000
            if elapsed_ms < self.window_ms:
                await _sleep((self.window_ms - elapsed_ms) / 1000)

        logger.debug("Ran %s jobs in %s chunks", len(outcomes), chunk_number)
        return outcomes


async def _settle(job: Job[T]) -> JobOutcome[T]:
    try:
        return JobOutcome(value=await job())
    except Exception as exc:
        return JobOutcome(error=exc)


async def _sleep(seconds: float) -> None:
    if seconds > 0:
        await asyncio.sleep(seconds)


def chunk_count(job_count: int, quota: int) -> int:
    """Number of chunks the runner uses for `job_count` jobs."""
    if job_count <= 0 or quota <= 0:
        return 0
    return -(-job_count // quota)
