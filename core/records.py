"""
core.records
────────────
Typed record variants for the five datasets, built once at the point where
the raw JSON comes off the wire. Everything downstream (normaliser, search,
tabs) works on these instead of on untyped dicts.

Optional fields that are missing in the JSON become "" or an empty tuple.
Each record keeps its raw mapping so the view can show fields we don't model.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Tuple

from core.errors import ParseError, UnknownDatasetError

CORE = "core"
PARKS = "parks"
DOGRUNS = "dogruns"
CLINICS = "clinics"
RESOURCES = "resources"

# traversal order for aggregate search, never change without updating the view
DATASETS: Tuple[str, ...] = (CORE, PARKS, DOGRUNS, CLINICS, RESOURCES)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _texts(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)):
        return tuple(_text(v) for v in value)
    return (_text(value),)


def _mapping(value: Any) -> Dict[str, Any]:
    return dict(value) if isinstance(value, Mapping) else {}


def _raw():
    return field(default_factory=dict, compare=False, hash=False, repr=False)


@dataclass(frozen=True)
class Rule:
    text: str


@dataclass(frozen=True)
class Fine:
    violation: str
    penalty: str
    note: str = ""
    key: str = ""
    raw: Dict[str, Any] = _raw()


@dataclass(frozen=True)
class Park:
    name: str
    borough: str = ""
    summary: str = ""
    notes: str = ""
    designated_areas: Tuple[str, ...] = ()
    off_leash_hours: Tuple[str, ...] = ()
    raw: Dict[str, Any] = _raw()


@dataclass(frozen=True)
class DogRun:
    name: str
    borough: str = ""
    surface: str = ""
    hours: str = ""
    facilities: Tuple[str, ...] = ()
    notes: str = ""
    raw: Dict[str, Any] = _raw()


@dataclass(frozen=True)
class Clinic:
    name: str
    borough: str = ""
    boroughs: Tuple[str, ...] = ()
    type: str = ""
    address: str = ""
    phone: str = ""
    services: Tuple[str, ...] = ()
    notes: str = ""
    raw: Dict[str, Any] = _raw()


@dataclass(frozen=True)
class Event:
    name: str
    desc: str = ""
    month: str = ""
    date: str = ""
    location: str = ""
    borough: str = ""
    raw: Dict[str, Any] = _raw()


@dataclass(frozen=True)
class Contact:
    service: str
    phone: str = ""
    url: str = ""
    notes: str = ""
    raw: Dict[str, Any] = _raw()


@dataclass(frozen=True)
class OfficialLink:
    title: str
    url: str = ""
    raw: Dict[str, Any] = _raw()


@dataclass(frozen=True)
class CoreData:
    general_rules: Tuple[Rule, ...] = ()
    fines: Tuple[Fine, ...] = ()
    licenses: Dict[str, Any] = _raw()
    transport_rules: Dict[str, Any] = _raw()
    seasonal_rules: Dict[str, Any] = _raw()
    faq: Tuple[Dict[str, Any], ...] = ()
    raw: Dict[str, Any] = _raw()


@dataclass(frozen=True)
class ResourcesData:
    official: Tuple[OfficialLink, ...] = ()
    contacts: Tuple[Contact, ...] = ()
    events: Tuple[Event, ...] = ()
    raw: Dict[str, Any] = _raw()


def _require(payload: Any, kind: type, resource: str, what: str):
    if not isinstance(payload, kind):
        raise ParseError(resource, TypeError(f"expected {what}, got {type(payload).__name__}"))
    return payload


def _records(items: Any, resource: str, key: str) -> list:
    if items is None:
        return []
    _require(items, list, resource, f"a list for '{key}'")
    for item in items:
        _require(item, Mapping, resource, f"objects in '{key}'")
    return items


def parse_core(payload: Any, resource: str = CORE) -> CoreData:
    _require(payload, Mapping, resource, "an object")
    rules = payload.get("general_rules") or []
    _require(rules, list, resource, "a list for 'general_rules'")

    raw_fines = payload.get("fines") or {}
    if isinstance(raw_fines, Mapping):
        fine_items = list(raw_fines.items())
    else:
        fine_items = [("", f) for f in _records(raw_fines, resource, "fines")]

    fines = []
    for key, f in fine_items:
        _require(f, Mapping, resource, "objects in 'fines'")
        fines.append(Fine(
            violation=_text(f.get("violation")),
            penalty=_text(f.get("penalty")),
            note=_text(f.get("note")),
            key=_text(key),
            raw=dict(f),
        ))

    return CoreData(
        general_rules=tuple(Rule(_text(r)) for r in rules),
        fines=tuple(fines),
        licenses=_mapping(payload.get("licenses")),
        transport_rules=_mapping(payload.get("transport_rules")),
        seasonal_rules=_mapping(payload.get("seasonal_rules")),
        faq=tuple(_mapping(q) for q in (payload.get("faq") or [])),
        raw=dict(payload),
    )


def parse_park(p: Mapping) -> Park:
    return Park(
        name=_text(p.get("name")),
        borough=_text(p.get("borough")),
        summary=_text(p.get("summary")),
        notes=_text(p.get("notes")),
        designated_areas=_texts(p.get("designated_areas")),
        off_leash_hours=_texts(p.get("off_leash_hours")),
        raw=dict(p),
    )


def parse_park_partition(payload: Any, resource: str) -> Tuple[Park, ...]:
    """One parks file is `{entries: [...]}`; a missing `entries` key is an empty partition."""
    _require(payload, Mapping, resource, "an object")
    return tuple(parse_park(p) for p in _records(payload.get("entries"), resource, "entries"))


def parse_dogruns(payload: Any, resource: str = DOGRUNS) -> Tuple[DogRun, ...]:
    return tuple(
        DogRun(
            name=_text(r.get("name")),
            borough=_text(r.get("borough")),
            surface=_text(r.get("surface")),
            hours=_text(r.get("hours")),
            facilities=_texts(r.get("facilities")),
            notes=_text(r.get("notes")),
            raw=dict(r),
        )
        for r in _records(_require(payload, list, resource, "a list"), resource, "dogruns")
    )


def parse_clinics(payload: Any, resource: str = CLINICS) -> Tuple[Clinic, ...]:
    return tuple(
        Clinic(
            name=_text(c.get("name")),
            borough=_text(c.get("borough")),
            boroughs=_texts(c.get("boroughs")),
            type=_text(c.get("type")),
            address=_text(c.get("address")),
            phone=_text(c.get("phone")),
            services=_texts(c.get("services")),
            notes=_text(c.get("notes")),
            raw=dict(c),
        )
        for c in _records(_require(payload, list, resource, "a list"), resource, "clinics")
    )


def parse_resources(payload: Any, resource: str = RESOURCES) -> ResourcesData:
    _require(payload, Mapping, resource, "an object")
    official = tuple(
        OfficialLink(title=_text(o.get("title")), url=_text(o.get("url")), raw=dict(o))
        for o in _records(payload.get("official"), resource, "official")
    )
    contacts = tuple(
        Contact(
            service=_text(c.get("service")),
            phone=_text(c.get("phone")),
            url=_text(c.get("url")),
            notes=_text(c.get("notes")),
            raw=dict(c),
        )
        for c in _records(payload.get("contacts"), resource, "contacts")
    )
    events = tuple(
        Event(
            name=_text(e.get("name")),
            desc=_text(e.get("desc")),
            month=_text(e.get("month")),
            date=_text(e.get("date")),
            location=_text(e.get("location")),
            borough=_text(e.get("borough")),
            raw=dict(e),
        )
        for e in _records(payload.get("events"), resource, "events")
    )
    return ResourcesData(official=official, contacts=contacts, events=events, raw=dict(payload))


_PARSERS = {
    CORE: parse_core,
    DOGRUNS: parse_dogruns,
    CLINICS: parse_clinics,
    RESOURCES: parse_resources,
}


def parse_payload(dataset: str, payload: Any, resource: str):
    """Parse the payload of a single-file dataset. Parks go through parse_park_partition."""
    if dataset == PARKS:
        return parse_park_partition(payload, resource)
    try:
        parser = _PARSERS[dataset]
    except KeyError:
        raise UnknownDatasetError(dataset) from None
    return parser(payload, resource)
