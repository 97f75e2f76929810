"""Bounded exponential backoff for catalogue calls."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from app.services.errors import CatalogueError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Retries transient catalogue failures only; rejections fail at once."""

    attempts: int = 3
    base_delay: float = 0.5
    max_delay: float = 4.0

    def delay_for(self, attempt: int) -> float:
        return min(self.max_delay, self.base_delay * (2**attempt))

    async def run(self, call: Callable[[], Awaitable[T]], *, description: str) -> T:
        for attempt in range(self.attempts):
            try:
                return await call()
            except CatalogueError as exc:
                if not exc.transient or attempt + 1 >= self.attempts:
                    raise
                delay = self.delay_for(attempt)
                logger.warning(
                    "%s failed (attempt %s/%s, status=%s); retrying in %.2fs",
                    description,
                    attempt + 1,
                    self.attempts,
                    exc.status_code,
                    delay,
                )
                await asyncio.sleep(delay)
        raise RuntimeError("RetryPolicy.attempts must be at least 1")


NO_RETRY = RetryPolicy(attempts=1, base_delay=0.0, max_delay=0.0)
