"""
Debounced Persistence Scheduler Module

Coalesces bursts of cache mutations into a single durable write. Each call to
schedule() re-arms one timer; when the timer finally fires, the persist callback
writes whatever the cache holds at that moment, so every mutation made during
the window lands in the same write.

Nothing is flushed on abrupt process termination: marks made inside the last
window before a crash are lost. Orderly shutdown should call flush().
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Set

# Configure logging
logger = logging.getLogger(__name__)

# (delay_seconds, callback) -> handle exposing cancel()
TimerFactory = Callable[[float, Callable[[], None]], Any]


def loop_timer(delay_seconds: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
    """Default timer: arm callback on the running event loop."""
    return asyncio.get_running_loop().call_later(delay_seconds, callback)


class DebouncedPersistenceScheduler:
    """Single re-armable timer driving an async persist callback."""

    def __init__(self,
                 persist: Callable[[], Awaitable[Any]],
                 delay_seconds: float = 2.0,
                 timer_factory: Optional[TimerFactory] = None):
        """
        Args:
            persist: Coroutine function writing the current in-memory state
            delay_seconds: Debounce window
            timer_factory: Override for the loop timer, used with a fake clock in tests
        """
        if delay_seconds < 0:
            raise ValueError(f"delay_seconds must not be negative, got {delay_seconds}")
        self._persist = persist
        self.delay_seconds = delay_seconds
        self._timer_factory = timer_factory or loop_timer
        self._handle = None
        self._inflight: Set[asyncio.Future] = set()
        self.fired = 0

    @property
    def pending(self) -> bool:
        """True while a write is armed but has not fired yet."""
        return self._handle is not None

    def schedule(self) -> None:
        """Cancel any armed timer and arm a fresh one for the full window."""
        self.cancel()
        self._handle = self._timer_factory(self.delay_seconds, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        task = asyncio.ensure_future(self._run())
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _run(self) -> None:
        self.fired += 1
        try:
            await self._persist()
        except Exception as e:
            # persist callbacks are fail-soft already; keep the timer path quiet regardless
            logger.error(f"Debounced persist failed: {e}")

    async def flush(self) -> None:
        """Persist immediately if a write is armed, then wait for any write in flight."""
        if self._handle is not None:
            self.cancel()
            await self._run()
        await self.wait_idle()

    async def wait_idle(self) -> None:
        """Wait for every write started by the timer to complete."""
        if self._inflight:
            await asyncio.shield(asyncio.gather(*self._inflight))
