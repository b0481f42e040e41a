from __future__ import annotations

from collections.abc import Iterable, Iterator

import numpy as np

from vector.errors import DimensionMismatch, InvalidArgument
from vector.types import DocumentVector


class Corpus:
    """Ordered, id-unique collection of document vectors sharing one dimension.

    The dimension is fixed by the constructor, or by the first vector added
    when none is given.
    """

    def __init__(self, vectors: Iterable[DocumentVector] = (), *, dim: int | None = None) -> None:
        self.dim = dim
        self.items: list[DocumentVector] = []
        self._ids: set[int] = set()
        self.add(vectors)

    def add(self, vectors: Iterable[DocumentVector]) -> None:
        """Append a batch; on any bad vector the corpus is left unchanged."""
        batch = list(vectors)
        dim = self.dim if self.dim is not None else (batch[0].dim if batch else None)
        new_ids: set[int] = set()
        for v in batch:
            if v.dim != dim:
                raise DimensionMismatch(v.doc_id, dim, v.dim)
            if v.doc_id in self._ids or v.doc_id in new_ids:
                raise InvalidArgument(f"duplicate document id {v.doc_id}")
            new_ids.add(v.doc_id)
        self.dim = dim
        self._ids |= new_ids
        self.items.extend(batch)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[DocumentVector]:
        return iter(self.items)

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self._ids

    @property
    def ids(self) -> list[int]:
        return [v.doc_id for v in self.items]

    def shards(self, n: int) -> list[list[DocumentVector]]:
        """Split into at most ``n`` contiguous, non-empty slices."""
        if n <= 0:
            raise InvalidArgument(f"shard count must be > 0, got {n}")
        if not self.items:
            return []
        n = min(n, len(self.items))
        bounds = np.linspace(0, len(self.items), n + 1).astype(int)
        return [self.items[a:b] for a, b in zip(bounds[:-1], bounds[1:], strict=True)]

    def matrix(self) -> np.ndarray:
        """Dense (N, D) view, mostly for debugging and small corpora."""
        d = self.dim or 0
        if not self.items:
            return np.zeros((0, d), dtype=np.float64)
        return np.stack([v.to_dense() for v in self.items], axis=0)
