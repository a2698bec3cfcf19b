from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")

Commit = Callable[[T], Union[None, Awaitable[None]]]


class Debouncer(Generic[T]):
    """Coalesce a burst of triggers into one delayed commit.

    Every `trigger` cancels the pending timer (the timer task is the
    cancellation token) and schedules a new one; only a value that survives
    `delay_s` without a newer trigger is committed. Once the quiet period has
    elapsed the commit runs to completion, even if a newer trigger arrives.
    Must be used from a running event loop.
    """

    def __init__(self, delay_s: float, commit: Commit[T]) -> None:
        self._delay_s = max(float(delay_s), 0.0)
        self._commit = commit
        self._timer: Optional[asyncio.Task[None]] = None
        self._inflight: Optional[asyncio.Task[None]] = None
        self._value: Optional[T] = None

    @property
    def delay_s(self) -> float:
        return self._delay_s

    @property
    def pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def pending_value(self) -> Optional[T]:
        return self._value if self.pending else None

    def trigger(self, value: T) -> None:
        self.cancel()
        self._value = value
        self._timer = asyncio.get_running_loop().create_task(self._run(value))

    def cancel(self) -> bool:
        """Drop the pending commit, if any. Returns True when one was cancelled."""
        timer, self._timer = self._timer, None
        if timer is None or timer.done():
            return False
        timer.cancel()
        return True

    async def flush(self) -> bool:
        """Commit the pending value now. Returns False when nothing was pending."""
        if not self.pending:
            return False
        value = self._value
        self.cancel()
        await self._invoke(value)
        return True

    async def wait(self) -> None:
        """Wait until the pending timer and any running commit have finished."""
        if self._timer is not None:
            await asyncio.gather(self._timer, return_exceptions=True)
        if self._inflight is not None:
            await asyncio.gather(self._inflight, return_exceptions=True)

    async def aclose(self) -> None:
        """Drop the pending timer and stop a commit that is still running."""
        self.cancel()
        inflight, self._inflight = self._inflight, None
        if inflight is not None and not inflight.done():
            inflight.cancel()
            await asyncio.gather(inflight, return_exceptions=True)

    async def _run(self, value: T) -> None:
        await asyncio.sleep(self._delay_s)
        self._timer = None
        self._inflight = asyncio.get_running_loop().create_task(self._invoke(value))

    async def _invoke(self, value: Any) -> None:
        try:
            result = self._commit(value)
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("debounced commit failed")
