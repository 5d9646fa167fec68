"""Operator stop request.

The listener resolves exactly once, on whichever comes first:

* a console line starting with one of the stop keys (``c``/``C``),
  read by a daemon thread so a blocked ``readline`` never holds up
  interpreter shutdown;
* SIGINT or SIGTERM delivered to the process.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
import sys
import threading
from collections.abc import Iterable
from typing import TextIO

_logger = logging.getLogger(__name__)

DEFAULT_STOP_KEYS = "cC"


class OperatorStopListener:
    """Single-shot stop trigger for a polling run."""

    def __init__(
        self,
        *,
        stop_keys: str = DEFAULT_STOP_KEYS,
        stream: TextIO | None = None,
        signals: Iterable[signal.Signals] = (signal.SIGINT, signal.SIGTERM),
    ) -> None:
        self._stop_keys = stop_keys
        self._stream = stream
        self._signals = tuple(signals)

    @staticmethod
    def _resolve(future: asyncio.Future[str], reason: str) -> None:
        if not future.done():
            future.set_result(reason)

    def _read_keys(self, loop: asyncio.AbstractEventLoop, future: asyncio.Future[str]) -> None:
        stream = self._stream if self._stream is not None else sys.stdin
        for line in iter(stream.readline, ""):
            if future.done():
                return
            key = line.strip()[:1]
            if key and key in self._stop_keys:
                with contextlib.suppress(RuntimeError):
                    loop.call_soon_threadsafe(self._resolve, future, f"stop key {key!r}")
                return
        _logger.debug("Console input closed; only signals can stop the run")

    def _install_signal_handlers(self, loop: asyncio.AbstractEventLoop, future: asyncio.Future[str]) -> list[signal.Signals]:
        installed: list[signal.Signals] = []
        for sig in self._signals:
            try:
                loop.add_signal_handler(sig, self._resolve, future, f"signal {sig.name}")
            except (NotImplementedError, RuntimeError, ValueError):
                _logger.debug("Cannot install handler for %s", sig.name, exc_info=True)
                continue
            installed.append(sig)
        return installed

    async def wait(self) -> str:
        """Block until a stop is requested and return a short reason."""
        loop = asyncio.get_running_loop()
        future: asyncio.Future[str] = loop.create_future()
        installed = self._install_signal_handlers(loop, future)

        if self._stop_keys:
            reader = threading.Thread(
                target=self._read_keys,
                args=(loop, future),
                name="fleetlog-stop-keys",
                daemon=True,
            )
            reader.start()

        try:
            reason = await future
        finally:
            for sig in installed:
                loop.remove_signal_handler(sig)
        _logger.info("Stop requested (%s)", reason)
        return reason
