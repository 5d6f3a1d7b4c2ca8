from dataclasses import dataclass
from typing import Tuple

@dataclass(frozen=True)
class SearchableProjection:
    dataset: str
    category: str # "Core Rule", "Fines", "Park", ...
    title: str
    match_fields: Tuple[str, ...] # original case, folded at match time
    meta: str = ""

@dataclass(frozen=True)
class SearchResult:
    category: str
    title: str
    match_context: str # the field text the query was found in
    ordering_key: Tuple[int, int] # (group index, ingestion index)
    meta: str = ""
