"""
Record → SearchableProjection
─────────────────────────────
Maps each dataset's record variant to one uniform shape for search.

Matching is plain case-insensitive substring containment: a record matches
when the lower-cased query occurs inside any one of its match fields. List
fields (designated areas, facilities, services) are joined with a single
space into one field. No tokenising, no fuzzy matching, no scoring.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple

from core.SearchResult import SearchableProjection
from core.records import (
    CLINICS, CORE, DOGRUNS, PARKS, RESOURCES,
    Clinic, Contact, DogRun, Event, Fine, Park, Rule,
)
from core.errors import UnknownDatasetError

# search group order; a group's index is the first half of a result's ordering key
SEARCH_GROUPS: Tuple[str, ...] = (
    "core.general_rules",
    "core.fines",
    "parks",
    "dogruns",
    "clinics",
    "resources.events",
    "resources.contacts",
)


def _rule(dataset: str, r: Rule) -> SearchableProjection:
    return SearchableProjection(dataset, "Core Rule", r.text, (r.text,))

def _fine(dataset: str, f: Fine) -> SearchableProjection:
    return SearchableProjection(dataset, "Fines", f"{f.violation} — {f.penalty}", (f.violation, f.note))

def _park(dataset: str, p: Park) -> SearchableProjection:
    return SearchableProjection(
        dataset, "Park", p.name,
        (p.name, p.notes, " ".join(p.designated_areas)),
        meta=p.borough,
    )

def _dogrun(dataset: str, r: DogRun) -> SearchableProjection:
    return SearchableProjection(
        dataset, "Dog Run", r.name,
        (r.name, " ".join(r.facilities)),
        meta=r.borough,
    )

def _clinic(dataset: str, c: Clinic) -> SearchableProjection:
    return SearchableProjection(
        dataset, "Clinic", c.name,
        (c.name, " ".join(c.services)),
        meta=c.borough or ", ".join(c.boroughs),
    )

def _event(dataset: str, e: Event) -> SearchableProjection:
    return SearchableProjection(dataset, "Event", e.name, (e.name, e.desc), meta=e.month or e.date)

def _contact(dataset: str, c: Contact) -> SearchableProjection:
    return SearchableProjection(dataset, "Contact", c.service, (c.service, c.notes), meta=c.phone or c.url)


_NORMALIZERS: Dict[type, Callable[[str, Any], SearchableProjection]] = {
    Rule: _rule,
    Fine: _fine,
    Park: _park,
    DogRun: _dogrun,
    Clinic: _clinic,
    Event: _event,
    Contact: _contact,
}


def normalize(dataset: str, record: Any) -> SearchableProjection:
    try:
        fn = _NORMALIZERS[type(record)]
    except KeyError:
        raise TypeError(f"no normaliser for {type(record).__name__} in {dataset}") from None
    return fn(dataset, record)


def match_field(projection: SearchableProjection, query: str) -> Optional[str]:
    """
    Return the first match field containing `query`, or None.
    `query` must already be trimmed and lower-cased.
    """
    for text in projection.match_fields:
        if text and query in text.lower():
            return text
    return None


def matches(projection: SearchableProjection, query: str) -> bool:
    return match_field(projection, query) is not None


def search_groups(dataset: str, data: Any) -> List[Tuple[str, List[SearchableProjection]]]:
    """
    Split one dataset's cached value into its search groups, each a list of
    projections in ingestion order. Nothing cached means no groups.
    """
    if data is None:
        return []
    if dataset == CORE:
        return [
            ("core.general_rules", [normalize(dataset, r) for r in data.general_rules]),
            ("core.fines", [normalize(dataset, f) for f in data.fines]),
        ]
    if dataset == RESOURCES:
        return [
            ("resources.events", [normalize(dataset, e) for e in data.events]),
            ("resources.contacts", [normalize(dataset, c) for c in data.contacts]),
        ]
    if dataset in (PARKS, DOGRUNS, CLINICS):
        return [(dataset, [normalize(dataset, r) for r in data])]
    raise UnknownDatasetError(dataset)


def entries(dataset: str, data: Any) -> List[SearchableProjection]:
    """All projections for a dataset, groups flattened, for tab rendering."""
    return [p for _, group in search_groups(dataset, data) for p in group]
