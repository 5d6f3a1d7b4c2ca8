"""
Debounced search input.

Each keystroke re-arms one pending timer; only the timer firing starts a
search. Whitespace-only input skips the timer and asks for the active tab
straight away. Every keystroke bumps a generation counter, and a search
whose generation is no longer current still runs (the cache fill is kept)
but its results are dropped.
"""

from __future__ import annotations
import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Set

from config.config import settings
from searchers.aggregator import REDISPLAY, normalize_query

logger = logging.getLogger(__name__)


class InputController:

    def __init__(self,
                 search: Callable[[str], Awaitable[Any]],
                 on_results: Callable[[Any], Any],
                 on_redisplay: Callable[[], Any],
                 debounce_ms: Optional[int] = None) -> None:
        self.search = search
        self.on_results = on_results
        self.on_redisplay = on_redisplay
        self.delay = (settings.SEARCH_DEBOUNCE_MS if debounce_ms is None else debounce_ms) / 1000
        self._generation = 0
        self._timer: Optional[asyncio.TimerHandle] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        """A keystroke is waiting out the quiet interval."""
        return self._timer is not None

    def on_input(self, raw: Optional[str]) -> None:
        """Handle one input change event. Must be called from the running loop."""
        self._generation += 1
        self._cancel_timer()

        if not normalize_query(raw):
            self._call(self.on_redisplay)
            return

        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.delay, self._fire, raw, self._generation)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self, raw: str, generation: int) -> None:
        self._timer = None
        if generation != self._generation:
            return
        self._track(asyncio.ensure_future(self._run(raw, generation)))

    async def _run(self, raw: str, generation: int) -> None:
        try:
            outcome = await self.search(raw)
        except Exception:
            logger.exception(f"Search for {raw!r} failed")
            return
        if generation != self._generation:
            logger.debug(f"Dropping stale results for {raw!r}")
            return
        if outcome is REDISPLAY:
            self._call(self.on_redisplay)
        else:
            self._call(self.on_results, outcome)

    def _call(self, fn: Callable[..., Any], *args) -> None:
        result = fn(*args)
        if inspect.isawaitable(result):
            self._track(asyncio.ensure_future(result))

    def _track(self, task: asyncio.Future) -> None:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def flush(self) -> None:
        """Wait for every search and callback started so far to finish."""
        while any(not t.done() for t in self._tasks):
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def close(self) -> None:
        self._generation += 1
        self._cancel_timer()
