from .dataset_cache import DatasetCache, LoadOutcome, LoadState, default_plan

__all__ = [
    "DatasetCache",
    "LoadOutcome",
    "LoadState",
    "default_plan",
]
