"""
cache.dataset_cache
───────────────────
One slot per logical dataset. `ensure_loaded` is the only thing that ever
mutates a slot, and it is single-flight: concurrent callers for the same
dataset all await the one in-flight fetch sequence.

Parks is split across several files. Partitions are fetched in declared
order, each successful one is appended to the entry list and marked merged,
and a merged partition is never fetched again. A failed partition does not
stop the others.
"""

from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from config.config import Settings, settings as default_settings
from core.errors import FetchError, PanelError, PartialDatasetError, UnknownDatasetError
from core.records import (
    CLINICS, CORE, DATASETS, DOGRUNS, PARKS, RESOURCES,
    parse_park_partition, parse_payload,
)

logger = logging.getLogger(__name__)

Fetch = Callable[[str], Awaitable[Any]]

# datasets whose plan is a list of {entries: [...]} partitions
PARTITIONED = frozenset({PARKS})


class LoadState(str, Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    PARTIALLY_LOADED = "partially-loaded"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass(frozen=True)
class LoadOutcome:
    """What one ensure_loaded call settled on."""
    dataset: str
    state: LoadState
    error: Optional[PanelError] = None

    @property
    def ok(self) -> bool:
        return self.state is LoadState.LOADED


@dataclass
class _Slot:
    name: str
    resources: Tuple[str, ...]
    state: LoadState = LoadState.UNLOADED
    data: Any = None
    entries: List[Any] = field(default_factory=list)
    merged: List[str] = field(default_factory=list)
    error: Optional[PanelError] = None

    def outcome(self) -> LoadOutcome:
        return LoadOutcome(self.name, self.state, self.error)


def default_plan(cfg: Settings = default_settings) -> Dict[str, Tuple[str, ...]]:
    """dataset name -> resource names, from settings."""
    return {
        CORE: (cfg.CORE_RESOURCE,),
        PARKS: tuple(cfg.PARK_PARTITIONS),
        DOGRUNS: (cfg.DOGRUNS_RESOURCE,),
        CLINICS: (cfg.CLINICS_RESOURCE,),
        RESOURCES: (cfg.RESOURCES_RESOURCE,),
    }


def _as_fetch_error(resource: str, exc: Exception) -> PanelError:
    if isinstance(exc, PanelError):
        return exc
    return FetchError(resource, exc)


class DatasetCache:

    def __init__(self, fetch: Fetch, plan: Optional[Mapping[str, Sequence[str]]] = None) -> None:
        self._fetch = fetch
        plan = plan if plan is not None else default_plan()
        self._slots: Dict[str, _Slot] = {}
        for name in DATASETS:
            resources = tuple(plan.get(name, ()))
            if name not in PARTITIONED and len(resources) != 1:
                raise ValueError(f"{name} needs exactly one resource, got {resources!r}")
            self._slots[name] = _Slot(name, resources)
        self._inflight: Dict[str, asyncio.Task] = {}

    def _slot(self, name: str) -> _Slot:
        try:
            return self._slots[name]
        except KeyError:
            raise UnknownDatasetError(name) from None

    # ----- read side -----

    def state(self, name: str) -> LoadState:
        return self._slot(name).state

    def states(self) -> Dict[str, LoadState]:
        return {name: slot.state for name, slot in self._slots.items()}

    def outcome(self, name: str) -> LoadOutcome:
        return self._slot(name).outcome()

    def data(self, name: str) -> Any:
        """
        Cached value for a dataset: a tuple of records for list datasets
        (parks included, whatever has been merged so far), CoreData /
        ResourcesData for the object datasets, or None when nothing is cached.
        """
        slot = self._slot(name)
        if name in PARTITIONED:
            return tuple(slot.entries)
        return slot.data

    def merged_partitions(self, name: str) -> Tuple[str, ...]:
        return tuple(self._slot(name).merged)

    def is_loading(self, name: str) -> bool:
        task = self._inflight.get(name)
        return task is not None and not task.done()

    # ----- write side -----

    async def ensure_loaded(self, name: str) -> LoadOutcome:
        slot = self._slot(name)
        if slot.state is LoadState.LOADED:
            return slot.outcome()

        task = self._inflight.get(name)
        # a settled task can linger until its done-callback runs; never reuse it
        if task is None or task.done():
            task = asyncio.ensure_future(self._run_plan(slot))
            self._inflight[name] = task
            task.add_done_callback(lambda t, name=name: self._forget(name, t))
        # shield: a cancelled caller must not cancel the fetch other callers share
        return await asyncio.shield(task)

    async def ensure_all(self, names: Sequence[str] = DATASETS) -> Dict[str, LoadOutcome]:
        """Ensure several datasets concurrently; waits for every one to settle."""
        outcomes = await asyncio.gather(*(self.ensure_loaded(n) for n in names))
        return dict(zip(names, outcomes))

    def _forget(self, name: str, task: asyncio.Task) -> None:
        if self._inflight.get(name) is task:
            del self._inflight[name]

    async def _run_plan(self, slot: _Slot) -> LoadOutcome:
        try:
            if slot.name in PARTITIONED:
                await self._load_partitions(slot)
            else:
                await self._load_single(slot)
        finally:
            # cancelled mid-flight: leave it retryable
            if slot.state is LoadState.LOADING:
                slot.state = LoadState.PARTIALLY_LOADED if slot.merged else LoadState.FAILED
        logger.info(f"{slot.name}: {slot.state.value}")
        return slot.outcome()

    async def _load_single(self, slot: _Slot) -> None:
        resource = slot.resources[0]
        slot.state = LoadState.LOADING
        try:
            payload = await self._fetch(resource)
            data = parse_payload(slot.name, payload, resource)
        except Exception as e:
            slot.data = None
            slot.error = _as_fetch_error(resource, e)
            slot.state = LoadState.FAILED
            logger.warning(f"{slot.name} failed to load: {slot.error}")
            return
        slot.data = data
        slot.error = None
        slot.state = LoadState.LOADED

    async def _load_partitions(self, slot: _Slot) -> None:
        if slot.state in (LoadState.UNLOADED, LoadState.FAILED):
            slot.state = LoadState.LOADING

        failures: List[PanelError] = []
        for resource in slot.resources:
            if resource in slot.merged:
                continue
            try:
                payload = await self._fetch(resource)
                parks = parse_park_partition(payload, resource)
            except Exception as e:
                err = _as_fetch_error(resource, e)
                failures.append(err)
                logger.warning(f"{slot.name} partition {resource} failed: {err}")
                continue
            slot.entries.extend(parks)
            slot.merged.append(resource)
            logger.debug(f"{slot.name}: merged {resource} (+{len(parks)} entries)")

        missing = [r for r in slot.resources if r not in slot.merged]
        if not missing:
            slot.state = LoadState.LOADED
            slot.error = None
        elif slot.merged:
            slot.state = LoadState.PARTIALLY_LOADED
            slot.error = PartialDatasetError(slot.name, missing)
        else:
            slot.state = LoadState.FAILED
            slot.error = failures[0] if failures else FetchError(missing[0])
