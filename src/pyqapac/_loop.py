"""Fixed-delay periodic task on the asyncio event loop."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class PeriodicTask(Generic[T]):
    """Run *tick* every *interval* seconds until stopped.

    * The next timer is armed when the current one fires, before the tick
      runs, so the period is measured between scheduling calls and is not
      aligned to the wall clock.
    * At most one tick is in flight: if the timer fires while the previous
      tick is still awaiting the network, that firing is skipped.
    * :meth:`stop` cancels only the next scheduled firing. A tick already
      in flight runs to completion, but its result is dropped instead of
      reaching *on_result*.
    * Exceptions from *tick* are logged and absorbed; the next firing is
      the retry.

    ``start``/``stop`` must be called from the event loop thread.
    """

    def __init__(
        self,
        name: str,
        interval: float,
        tick: Callable[[], Awaitable[T]],
        *,
        on_result: Callable[[T], None] | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.name = name
        self.interval = interval
        self._tick = tick
        self._on_result = on_result
        self._loop: asyncio.AbstractEventLoop | None = None
        self._handle: asyncio.TimerHandle | asyncio.Handle | None = None
        self._inflight: asyncio.Task[None] | None = None
        self._generation = 0
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def in_flight(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    def start(self, *, immediate: bool = True) -> None:
        """(Re)start the loop. Any pending firing is cancelled first."""
        self._loop = asyncio.get_running_loop()
        self._cancel_handle()
        self._generation += 1
        self._running = True
        generation = self._generation
        if immediate:
            self._handle = self._loop.call_soon(self._fire, generation)
        else:
            self._arm(generation)
        _logger.debug("%s started (interval=%.1fs)", self.name, self.interval)

    def stop(self) -> None:
        """Cancel the next firing. Idempotent."""
        if not self._running:
            return
        self._running = False
        self._generation += 1
        self._cancel_handle()
        _logger.debug("%s stopped", self.name)

    async def wait_idle(self) -> None:
        """Wait for the tick in flight, if any, to finish."""
        task = self._inflight
        if task is not None and not task.done():
            await asyncio.shield(task)

    def is_current(self, generation: int) -> bool:
        return self._running and generation == self._generation

    def _cancel_handle(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _arm(self, generation: int) -> None:
        assert self._loop is not None  # noqa: S101
        self._handle = self._loop.call_later(self.interval, self._fire, generation)

    def _fire(self, generation: int) -> None:
        if not self.is_current(generation):
            return
        self._arm(generation)
        if self.in_flight:
            _logger.debug("%s: previous tick still running, skipping", self.name)
            return
        assert self._loop is not None  # noqa: S101
        self._inflight = self._loop.create_task(self._run(generation), name=f"{self.name}-tick")

    async def _run(self, generation: int) -> None:
        if not self.is_current(generation):
            return
        try:
            result = await self._tick()
        except asyncio.CancelledError:
            raise
        except Exception:
            _logger.warning("%s tick failed", self.name, exc_info=True)
            return
        if not self.is_current(generation):
            _logger.debug("%s: discarding result of a stopped run", self.name)
            return
        if self._on_result is not None:
            try:
                self._on_result(result)
            except Exception:
                _logger.warning("%s result handler failed", self.name, exc_info=True)
