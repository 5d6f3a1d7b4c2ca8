"""
external
────────
Thin async wrappers around the static JSON resources the panel reads.
Everything network-facing lives here so the cache only ever sees
"fetch resource by name", which either returns parsed JSON or raises
FetchError / ParseError.

    from external import ResourceLoader
"""

from .resource_loader import ResourceLoader, fetch_resource

__all__ = [
    "ResourceLoader",
    "fetch_resource",
]
