"""Shared broadcast-once cancellation signal."""

from __future__ import annotations

import asyncio
import logging

_logger = logging.getLogger(__name__)


class CancellationSignal:
    """Single-writer, multi-reader stop flag.

    The supervisor triggers it once; every worker observes it at the top
    of a cycle and while sleeping.  Triggering more than once is a no-op.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: str | None = None

    @property
    def is_triggered(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    def trigger(self, reason: str = "stop requested") -> bool:
        """Trigger the signal.

        Returns ``True`` for the call that actually triggered it and
        ``False`` for every later call.
        """
        if self._event.is_set():
            _logger.debug("Cancellation already triggered (%s); ignoring %r", self._reason, reason)
            return False
        self._reason = reason
        self._event.set()
        _logger.debug("Cancellation triggered: %s", reason)
        return True

    async def wait(self, timeout: float | None = None) -> bool:
        """Wait until triggered or *timeout* elapses.

        Returns ``True`` when the signal is triggered.
        """
        if self._event.is_set():
            return True
        try:
            await asyncio.wait_for(self._event.wait(), timeout)
        except TimeoutError:
            return self._event.is_set()
        return True
