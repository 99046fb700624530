"""Fixed-interval scheduling on the running asyncio loop.

Each tick runs as its own task, so a slow tick never delays the next one and ticks may
overlap. Exceptions raised by a tick are logged and do not stop the timer.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Awaitable, Callable

__all__: list[str] = ["IntervalTimer"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class IntervalTimer:
    """Invoke an async callback every `interval` seconds.

    Attributes:
        interval (float): Seconds between ticks.
        name (str): Label used in log messages.
    """

    def __init__(
        self,
        interval: float,
        callback: Callable[[], Awaitable[object]],
        *,
        name: str = "timer",
        run_immediately: bool = False,
    ) -> None:
        if interval <= 0:
            msg = f"Interval must be positive: {interval}"
            raise ValueError(msg)
        self.interval: float = interval
        self.name: str = name
        self._callback: Callable[[], Awaitable[object]] = callback
        self._run_immediately: bool = run_immediately
        self._runner: asyncio.Task[None] | None = None
        self._ticks: set[asyncio.Task[None]] = set()

    @property
    def is_running(self) -> bool:
        return self._runner is not None and not self._runner.done()

    @property
    def pending_ticks(self) -> int:
        return len(self._ticks)

    def start(self) -> None:
        """Start the timer on the running loop. Starting a running timer is a no-op."""
        if self.is_running:
            logger.debug("Timer '%s' is already running", self.name)
            return
        self._runner = asyncio.create_task(self._run(), name=f"{self.name}-runner")
        logger.debug("Timer '%s' started (interval=%ss)", self.name, self.interval)

    async def stop(self, *, cancel_pending: bool = False) -> None:
        """Stop scheduling further ticks.

        Args:
            cancel_pending (bool): Also cancel ticks that are still running.
        """
        runner, self._runner = self._runner, None
        if runner is not None and not runner.done():
            runner.cancel()
            await asyncio.gather(runner, return_exceptions=True)

        if cancel_pending and self._ticks:
            ticks: list[asyncio.Task[None]] = list(self._ticks)
            for tick in ticks:
                tick.cancel()
            await asyncio.gather(*ticks, return_exceptions=True)
        logger.debug("Timer '%s' stopped", self.name)

    async def _run(self) -> None:
        if self._run_immediately:
            self._spawn_tick()
        while True:
            await asyncio.sleep(self.interval)
            self._spawn_tick()

    def _spawn_tick(self) -> None:
        task: asyncio.Task[None] = asyncio.create_task(self._invoke(), name=f"{self.name}-tick")
        self._ticks.add(task)
        task.add_done_callback(self._ticks.discard)

    async def _invoke(self) -> None:
        try:
            await self._callback()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Timer '%s' tick failed", self.name)
