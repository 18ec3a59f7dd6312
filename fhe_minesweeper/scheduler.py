"""
Repeating timer for the poll loop.
"""

import asyncio
import logging
from typing import Callable, Optional


logger = logging.getLogger(__name__)


class PeriodicTask:
    """Calls ``callback`` every ``interval_seconds`` until cancelled.

    The callback is fired without being awaited, like a browser interval:
    overlapping work is the callback's concern.
    """

    def __init__(self, interval_seconds: float, callback: Callable[[], object], name: str = "periodic"):
        self.interval_seconds = interval_seconds
        self.callback = callback
        self.name = name
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())

    async def _run(self) -> None:
        logger.info(f"Starting {self.name} timer every {self.interval_seconds:g}s")
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                self.callback()
            except Exception as e:
                logger.error(f"Error in {self.name} timer callback: {e}")

    async def cancel(self) -> None:
        """Stop the timer and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info(f"Stopped {self.name} timer")
