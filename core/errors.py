from typing import Iterable, Optional


class PanelError(Exception):
    """Base error for the info panel."""
    pass


class UnknownDatasetError(PanelError, KeyError):
    """Asked for a dataset (or tab) that is not one of the five known names."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"unknown dataset: {self.name!r}"


class FetchError(PanelError):
    """
    A resource could not be fetched: network failure, non-2xx status,
    or (see ParseError) a body that is not the JSON we expect.
    """

    def __init__(self, resource: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(resource, cause)
        self.resource = resource
        self.cause = cause

    def __str__(self) -> str:
        return f"failed to fetch {self.resource}: {self.cause}"


class ParseError(FetchError):
    """Malformed JSON, or JSON with the wrong top-level shape."""

    def __str__(self) -> str:
        return f"failed to parse {self.resource}: {self.cause}"


class PartialDatasetError(PanelError):
    """Some but not all partitions of a multi-file dataset are merged."""

    def __init__(self, dataset: str, missing: Iterable[str]) -> None:
        self.dataset = dataset
        self.missing = tuple(missing)
        super().__init__(dataset, self.missing)

    def __str__(self) -> str:
        return f"{self.dataset} partially loaded, missing: {', '.join(self.missing)}"
