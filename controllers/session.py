"""
PanelSession - the one state object a page session owns.

It builds a single DatasetCache and hands it to the search aggregator, the
tab controller and (through the aggregator) the input controller. Nothing
reaches the cache through a module global.
"""

from __future__ import annotations
import inspect
import logging
from typing import Any, Callable, Mapping, Optional, Sequence

import httpx

from cache.dataset_cache import DatasetCache, Fetch, default_plan
from config.config import Settings, settings as default_settings
from controllers.input_controller import InputController
from controllers.tab_controller import TabController, TabView
from external.resource_loader import ResourceLoader
from searchers.aggregator import SearchAggregator, SearchOutcome

logger = logging.getLogger(__name__)

class PanelSession:

    def __init__(self,
                 fetch: Optional[Fetch] = None,
                 *,
                 cfg: Optional[Settings] = None,
                 plan: Optional[Mapping[str, Sequence[str]]] = None,
                 on_results: Optional[Callable[[SearchOutcome], Any]] = None,
                 on_view: Optional[Callable[[TabView], Any]] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        cfg = cfg or default_settings
        self.loader = None
        if fetch is None:
            self.loader = ResourceLoader(
                cfg.DATA_BASE_URL,
                transport=transport,
                attempts=cfg.FETCH_ATTEMPTS,
                timeout=cfg.FETCH_TIMEOUT,
                min_wait=cfg.RETRY_MIN_WAIT,
                max_wait=cfg.RETRY_MAX_WAIT,
            )
        self.cache = DatasetCache(fetch or self.loader.fetch, plan or default_plan(cfg))
        self.aggregator = SearchAggregator(self.cache, cap=cfg.SEARCH_RESULT_CAP)
        self.tabs = TabController(self.cache, default_tab=cfg.DEFAULT_TAB)
        self.input = InputController(
            self.aggregator.search,
            on_results=self._deliver_results,
            on_redisplay=self.redisplay,
            debounce_ms=cfg.SEARCH_DEBOUNCE_MS,
        )
        self.on_results = on_results
        self.on_view = on_view

    async def start(self) -> TabView:
        """Initial page load: show the default tab."""
        return await self.open_tab(self.tabs.active)

    async def open_tab(self, tab: str) -> TabView:
        view = await self.tabs.open(tab)
        await self._emit(self.on_view, view)
        return view

    async def redisplay(self) -> TabView:
        return await self.open_tab(self.tabs.active)

    def on_input(self, raw: Optional[str]) -> None:
        self.input.on_input(raw)

    async def _deliver_results(self, outcome: SearchOutcome) -> None:
        logger.info(f"Search {outcome.query!r}: {outcome.total} results, showing {len(outcome.results)}")
        await self._emit(self.on_results, outcome)

    @staticmethod
    async def _emit(sink: Optional[Callable[[Any], Any]], value: Any) -> None:
        if sink is None:
            return
        result = sink(value)
        if inspect.isawaitable(result):
            await result

    async def settle(self) -> None:
        await self.input.flush()

    def close(self) -> None:
        self.input.close()
