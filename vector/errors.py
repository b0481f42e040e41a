from __future__ import annotations


class SearchError(ValueError):
    """Base class for malformed similarity-search input."""


class DimensionMismatch(SearchError):
    def __init__(self, doc_id: int | None, expected: int, actual: int) -> None:
        self.doc_id = doc_id
        self.expected = expected
        self.actual = actual
        who = "query" if doc_id is None else f"document {doc_id}"
        super().__init__(f"{who} has dimension {actual}, expected {expected}")


class InvalidArgument(SearchError):
    pass
