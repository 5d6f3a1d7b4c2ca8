"""
searchers.aggregator
────────────────────
Fan out an ensure-load to every dataset concurrently, wait for all of them
to settle, then scan each dataset's normalised records in a fixed group
order and return one capped list plus the uncapped total.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union

from cache.dataset_cache import DatasetCache, LoadOutcome, LoadState
from config.config import settings
from core.SearchResult import SearchResult
from core.records import DATASETS
from normalizers.record_normalizer import SEARCH_GROUPS, match_field, search_groups

logger = logging.getLogger(__name__)


class Redisplay(Enum):
    """Empty query: don't search, show the active tab again."""
    ACTIVE_TAB = "redisplay-active-tab"

REDISPLAY = Redisplay.ACTIVE_TAB


@dataclass(frozen=True)
class SearchOutcome:
    query: str
    results: List[SearchResult]
    total: int # before the cap
    outcomes: Dict[str, LoadOutcome] = field(default_factory=dict)

    @property
    def truncated(self) -> bool:
        return self.total > len(self.results)

    @property
    def states(self) -> Dict[str, LoadState]:
        return {name: o.state for name, o in self.outcomes.items()}


def normalize_query(raw: Optional[str]) -> str:
    return (raw or "").strip().lower()


class SearchAggregator:

    def __init__(self, cache: DatasetCache, cap: Optional[int] = None) -> None:
        self.cache = cache
        self.cap = settings.SEARCH_RESULT_CAP if cap is None else cap

    async def search(self, query: Optional[str]) -> Union[SearchOutcome, Redisplay]:
        q = normalize_query(query)
        if not q:
            return REDISPLAY

        # every dataset must settle before any group is built, so that
        # group order never depends on which fetch finished first
        outcomes = await self.cache.ensure_all(DATASETS)
        for name, o in outcomes.items():
            if not o.ok:
                logger.info(f"Searching {name} in state {o.state.value}: {o.error}")

        matched = self.collect(q)
        total = len(matched)
        logger.debug(f"Search {q!r}: {total} results")
        return SearchOutcome(query=q, results=matched[:self.cap], total=total, outcomes=outcomes)

    def collect(self, q: str) -> List[SearchResult]:
        """Scan whatever is cached right now, without loading anything."""
        results: List[SearchResult] = []
        for dataset in DATASETS:
            for group, projections in search_groups(dataset, self.cache.data(dataset)):
                group_index = SEARCH_GROUPS.index(group)
                for i, p in enumerate(projections):
                    context = match_field(p, q)
                    if context is None:
                        continue
                    results.append(SearchResult(
                        category=p.category,
                        title=p.title,
                        match_context=context,
                        ordering_key=(group_index, i),
                        meta=p.meta,
                    ))
        return results


if __name__ == "__main__":
    import asyncio
    import sys
    from external.resource_loader import ResourceLoader

    logging.basicConfig(level=settings.LOG_LEVEL)

    async def main(q: str):
        aggregator = SearchAggregator(DatasetCache(ResourceLoader().fetch))
        outcome = await aggregator.search(q)
        if outcome is REDISPLAY:
            print("(empty query)")
            return
        print(f"Search results ({outcome.total})")
        for r in outcome.results:
            print(f"  [{r.category}] {r.title}  {r.meta}")

    asyncio.run(main(" ".join(sys.argv[1:])))
