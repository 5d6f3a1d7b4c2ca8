"""
Tab switching and the per-tab data the view renders.

Opening a tab ensures its dataset through the same DatasetCache the search
uses, so a tab click during a search joins the in-flight fetch instead of
starting another one.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from cache.dataset_cache import DatasetCache, LoadState
from config.config import settings
from core.SearchResult import SearchableProjection
from core.errors import PanelError, UnknownDatasetError
from core.records import DATASETS, CoreData, Fine, Park
from normalizers.record_normalizer import entries

logger = logging.getLogger(__name__)

OFF_LEASH = "off-leash"
LEASH_ONLY = "leash-only"


@dataclass(frozen=True)
class TabView:
    dataset: str
    state: LoadState
    entries: List[SearchableProjection] = field(default_factory=list)
    data: Any = None
    error: Optional[PanelError] = None


class TabController:

    def __init__(self, cache: DatasetCache, default_tab: Optional[str] = None) -> None:
        self.cache = cache
        self.active = self._check(default_tab or settings.DEFAULT_TAB)

    @staticmethod
    def _check(tab: str) -> str:
        if tab not in DATASETS:
            raise UnknownDatasetError(tab)
        return tab

    async def open(self, tab: str) -> TabView:
        self.active = self._check(tab)
        outcome = await self.cache.ensure_loaded(tab)
        if outcome.error is not None:
            logger.warning(f"Tab {tab}: {outcome.error}")
        data = self.cache.data(tab)
        return TabView(
            dataset=tab,
            state=outcome.state,
            entries=entries(tab, data),
            data=data,
            error=outcome.error,
        )

    async def redisplay(self) -> TabView:
        return await self.open(self.active)


def boroughs(parks: Iterable[Park]) -> List[str]:
    return sorted({p.borough for p in parks})


def filter_parks(parks: Iterable[Park],
                 borough: Optional[str] = None,
                 kind: Optional[str] = None) -> List[Park]:
    """
    borough: exact match, None/"" for all.
    kind: "off-leash" keeps parks with off-leash hours or designated areas,
          "leash-only" keeps parks with no off-leash hours.
    """
    if kind not in (None, "", OFF_LEASH, LEASH_ONLY):
        raise ValueError(f"unknown park filter: {kind!r}")
    result = list(parks)
    if borough:
        result = [p for p in result if p.borough == borough]
    if kind == OFF_LEASH:
        result = [p for p in result if p.off_leash_hours or p.designated_areas]
    elif kind == LEASH_ONLY:
        result = [p for p in result if not p.off_leash_hours]
    return result


@dataclass(frozen=True)
class CoreOverview:
    general_rules: List[str]
    fines: List[Fine]
    license_requirement: str = ""
    license_fees: Dict[str, str] = field(default_factory=dict)
    application_methods: List[str] = field(default_factory=list)
    transport_rules: Dict[str, Any] = field(default_factory=dict)
    seasonal_rules: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    faq: List[Tuple[str, str]] = field(default_factory=list)


def core_overview(core: CoreData) -> CoreOverview:
    lic = core.licenses
    raw_fees = lic.get("fees")
    fees = {}
    if isinstance(raw_fees, dict):
        for name, fee in raw_fees.items():
            fees[name] = str(fee.get("cost", "")) if isinstance(fee, dict) else str(fee)
    application = lic.get("application")
    methods = (application.get("methods") or []) if isinstance(application, dict) else []

    return CoreOverview(
        general_rules=[r.text for r in core.general_rules],
        fines=list(core.fines),
        license_requirement=str(lic.get("requirement") or ""),
        license_fees=fees,
        application_methods=[str(m) for m in methods],
        transport_rules=dict(core.transport_rules),
        seasonal_rules={k: dict(v) if isinstance(v, dict) else {"note": v}
                        for k, v in core.seasonal_rules.items()},
        faq=[(str(q.get("q", "")), str(q.get("a", ""))) for q in core.faq],
    )
