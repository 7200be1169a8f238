"""
Background pruning.

Runs one asyncio task per cache that wakes every `frequency_ms` and calls a
synchronous sweep. The sweep never awaits, so ticks cannot overlap and no
foreground operation sees a half-pruned store.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Pruner:
    def __init__(self, sweep: Callable[[], int], *, frequency_ms: float) -> None:
        self._sweep = sweep
        self._interval = float(frequency_ms) / 1000.0
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> bool:
        # Returns False when there is no running loop to attach to yet.
        if self.running:
            return True
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return False
        self._task = loop.create_task(self._run(), name="memocache-pruner")
        logger.debug("Pruner started (interval=%.3fs)", self._interval)
        return True

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug("Pruner stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                removed = self._sweep()
            except Exception:
                logger.exception("Prune tick failed")
                continue
            if removed:
                logger.debug("Pruned %d expired entries", removed)
