from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from ..config.loader import InventoryConfig
from ..models.metrics import LoadResult
from ..sheets.fetcher import FetchError
from .pipeline import load_records
from .progress import RefreshCountdown

"""Externally owned auto-refresh loop.

The scheduler repeatedly calls ``load_records``; it keeps the last successful
result so that a failed cycle never wipes data that was already loaded.
Cycles run strictly one after another, so fetches never overlap. Stopping
is the caller's job (bounded ``cycles`` or cancelling the task).
"""

logger = logging.getLogger(__name__)

Loader = Callable[[InventoryConfig], Awaitable[LoadResult]]
Waiter = Callable[[float], Awaitable[None]]


async def _countdown(seconds: float) -> None:
    await RefreshCountdown(seconds).wait()


@dataclass
class RefreshStats:
    succeeded: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)


class RefreshScheduler:
    def __init__(
        self,
        config: InventoryConfig,
        *,
        interval: float | None = None,
        loader: Loader = load_records,
        wait: Waiter = _countdown,
        on_result: Callable[[LoadResult], None] | None = None,
    ) -> None:
        self.config = config
        self.interval = interval if interval is not None else config.refresh_interval_seconds
        self._loader = loader
        self._wait = wait
        self._on_result = on_result
        self.latest: LoadResult | None = None
        self.stats = RefreshStats()

    async def refresh_once(self) -> LoadResult | None:
        """Run one cycle; on FetchError keep ``latest`` untouched and return None."""
        try:
            result = await self._loader(self.config)
        except FetchError as e:
            self.stats.failed += 1
            self.stats.errors.append(str(e))
            logger.error(f"refresh failed: {e}")
            return None
        self.stats.succeeded += 1
        self.latest = result
        if self._on_result is not None:
            self._on_result(result)
        return result

    async def run(self, cycles: int | None = None) -> RefreshStats:
        """Refresh ``cycles`` times (forever when None), waiting ``interval`` between cycles."""
        logger.info(f"auto-refresh enabled: polling every {self.interval:g}s")
        done = 0
        while cycles is None or done < cycles:
            await self.refresh_once()
            done += 1
            if cycles is not None and done >= cycles:
                break
            await self._wait(self.interval)
        return self.stats

