"""Debounced persistence for the translation cache.

Bursts of writes collapse into a single save: every request re-arms one pending timer
handle, and the save runs once the burst has been quiet for `delay` seconds.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable

__all__: list[str] = ["DebouncedWriter"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class DebouncedWriter:
    """Coalesce save requests into one call of `save` after a quiet period."""

    def __init__(self, save: Callable[[], None], *, delay: float = 1.0) -> None:
        self._save: Callable[[], None] = save
        self.delay: float = delay
        self._handle: asyncio.TimerHandle | None = None

    @property
    def is_pending(self) -> bool:
        return self._handle is not None

    def request(self) -> None:
        """Schedule a save, replacing any save that is already pending.

        Outside a running event loop the save happens immediately.
        """
        self.cancel()
        try:
            loop: asyncio.AbstractEventLoop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running loop; saving synchronously")
            self._save()
            return
        self._handle = loop.call_later(self.delay, self._fire)

    def flush(self) -> None:
        """Run a pending save now. Does nothing when no save is pending."""
        if self._handle is None:
            return
        self.cancel()
        self._save()

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self._save()
