"""
Shared fixtures for the info panel tests.

FakeLoader stands in for ResourceLoader.fetch: it serves canned payloads by
resource name, records every call, can fail chosen resources, and can hold
a resource behind an asyncio.Event so tests can observe in-flight state.
"""

import asyncio
import copy

import pytest

from core.errors import FetchError

PLAN = {
    "core": ("dog_core.json",),
    "parks": ("dog_parks_1.json", "dog_parks_2.json"),
    "dogruns": ("dog_runs.json",),
    "clinics": ("clinics_and_services.json",),
    "resources": ("resources_events_contacts.json",),
}

CORE_JSON = {
    "general_rules": [
        "No dogs off-leash in playgrounds",
        "Pick up after your pet",
    ],
    "fines": {
        "leash": {"violation": "Unleashed dog", "penalty": "$200", "note": "Outside off-leash hours"},
        "waste": {"violation": "Failure to remove waste", "penalty": "$250"},
    },
    "licenses": {
        "requirement": "All dogs must be licensed",
        "fees": {
            "spayed_neutered": {"cost": "$8.50"},
            "non_spayed_neutered": {"cost": "$34"},
        },
        "application": {"methods": ["Online", "Mail"]},
    },
    "transport_rules": {"subway": "Dogs must be in a carrier"},
    "seasonal_rules": {"summer": {"heat": "Avoid hot pavement"}},
    "faq": [{"q": "Do I need a license?", "a": "Yes."}],
}

PARKS_1 = {
    "entries": [
        {
            "name": "Riverside Run",
            "borough": "Manhattan",
            "notes": "Playground nearby",
            "designated_areas": ["North lawn"],
            "off_leash_hours": ["before 9am"],
        },
    ]
}

PARKS_2 = {
    "entries": [
        {
            "name": "Prospect Park",
            "borough": "Brooklyn",
            "designated_areas": ["Long Meadow"],
            "off_leash_hours": ["before 9am", "after 9pm"],
        },
        {"name": "Carl Schurz Park", "borough": "Manhattan"},
    ]
}

DOGRUNS_JSON = [
    {"name": "Tompkins Square Dog Run", "borough": "Manhattan", "facilities": ["water fountain", "pools"]},
]

CLINICS_JSON = [
    {"name": "Uptown Pet Clinic", "borough": "Manhattan", "services": ["vaccination", "microchip"]},
    {"name": "ASPCA Mobile", "boroughs": ["Bronx", "Queens"], "services": ["spay/neuter"]},
]

RESOURCES_JSON = {
    "official": [{"title": "NYC Parks", "url": "https://www.nycgovparks.org"}],
    "contacts": [
        {"service": "Animal Care Centers", "phone": "311", "notes": "Lost pets"},
        {"service": "ASPCA Poison Control", "url": "https://aspca.org"},
    ],
    "events": [
        {"name": "Howl-O-Ween Parade", "month": "October", "desc": "Costume parade in the park"},
        {"name": "Adoption Day", "date": "2025-05-03"},
    ],
}


def sample_payloads():
    return copy.deepcopy({
        "dog_core.json": CORE_JSON,
        "dog_parks_1.json": PARKS_1,
        "dog_parks_2.json": PARKS_2,
        "dog_runs.json": DOGRUNS_JSON,
        "clinics_and_services.json": CLINICS_JSON,
        "resources_events_contacts.json": RESOURCES_JSON,
    })


class FakeLoader:

    def __init__(self, payloads=None, fail=()):
        self.payloads = payloads if payloads is not None else sample_payloads()
        self.fail = set(fail)
        self.gates = {}
        self.calls = []

    def hold(self, resource):
        """Block fetches of `resource` until the returned event is set."""
        gate = asyncio.Event()
        self.gates[resource] = gate
        return gate

    def count(self, resource):
        return self.calls.count(resource)

    async def fetch(self, resource):
        self.calls.append(resource)
        await asyncio.sleep(0)
        gate = self.gates.get(resource)
        if gate is not None:
            await gate.wait()
        if resource in self.fail:
            raise FetchError(resource, RuntimeError("HTTP 503"))
        return copy.deepcopy(self.payloads[resource])


@pytest.fixture
def loader():
    return FakeLoader()


@pytest.fixture
def plan():
    return dict(PLAN)
