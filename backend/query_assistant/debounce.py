"""Quiet-period scheduling on the asyncio event loop."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class Debouncer:
    """Run an async callback once ``delay`` seconds pass without a new trigger.

    A new trigger only cancels the waiting period. Once the callback has
    started it runs to completion on its own task.
    """

    def __init__(self, callback: Callable[[], Awaitable[None]], delay: float) -> None:
        self._callback = callback
        self.delay = delay
        self._timer: asyncio.Task | None = None
        self._running: set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def trigger(self) -> None:
        """Cancel any scheduled call and schedule a new one."""
        self.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._wait())

    def cancel(self) -> None:
        if self.pending:
            self._timer.cancel()
        self._timer = None

    async def flush(self) -> None:
        """Wait for the scheduled call and any callbacks already running."""
        if self._timer is not None:
            await asyncio.wait({self._timer})
        if self._running:
            await asyncio.wait(set(self._running))

    async def _wait(self) -> None:
        await asyncio.sleep(self.delay)
        logger.debug("Debounce window of %.2fs elapsed", self.delay)
        task = asyncio.get_running_loop().create_task(self._callback())
        self._running.add(task)
        task.add_done_callback(self._finished)

    def _finished(self, task: asyncio.Task) -> None:
        self._running.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Debounced callback failed", exc_info=task.exception())
