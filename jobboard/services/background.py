"""Tracking for fire-and-forget asyncio tasks.

Fan-out work is spawned here so the request that triggered it can return
immediately. The tracker keeps strong references until each task finishes
and logs any exception a task ends with.
"""

import asyncio
from typing import Coroutine, Optional, Set

from jobboard.logging import get_logger

logger = get_logger(__name__, component="background")


class TaskTracker:
    """Owns background tasks spawned on the running event loop."""

    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()

    def spawn(self, coroutine: Coroutine, name: Optional[str] = None) -> asyncio.Task:
        """Start a coroutine without waiting for it.

        Must be called from code running on the event loop.
        """
        task = asyncio.get_running_loop().create_task(coroutine, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        logger.debug("Background task spawned", extra={"event": "background.spawned", "task": task.get_name()})
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.info("Background task cancelled", extra={"event": "background.cancelled", "task": task.get_name()})
            return
        error = task.exception()
        if error is not None:
            logger.error(
                f"Background task failed: {error}",
                exc_info=(type(error), error, error.__traceback__),
                extra={"event": "background.failed", "task": task.get_name()},
            )

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def join(self, timeout: Optional[float] = None) -> None:
        """Wait until every tracked task (including ones spawned meanwhile) is done."""

        async def _drain():
            while self._tasks:
                await asyncio.gather(*list(self._tasks), return_exceptions=True)

        await asyncio.wait_for(_drain(), timeout=timeout)

    async def shutdown(self, timeout: float = 5.0) -> None:
        """Give running tasks a grace period, then cancel whatever is left."""
        if not self._tasks:
            return
        try:
            await self.join(timeout=timeout)
        except asyncio.TimeoutError:
            remaining = list(self._tasks)
            logger.warning(
                f"Cancelling {len(remaining)} background task(s) at shutdown",
                extra={"event": "background.shutdown_cancelled", "count": len(remaining)},
            )
            for task in remaining:
                task.cancel()
            await asyncio.gather(*remaining, return_exceptions=True)
