from .aggregator import REDISPLAY, Redisplay, SearchAggregator, SearchOutcome, normalize_query

__all__ = [
    "REDISPLAY",
    "Redisplay",
    "SearchAggregator",
    "SearchOutcome",
    "normalize_query",
]
