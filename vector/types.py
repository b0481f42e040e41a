from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

import numpy as np

from vector.errors import InvalidArgument


@dataclass(frozen=True)
class DocumentVector:
    """Sparse feature vector of fixed dimensionality.

    Only non-zero weights are kept, as an index -> weight map. ``doc_id`` is
    assigned by whoever owns the corpus; queries that are not corpus members
    use -1.
    """

    doc_id: int
    dim: int
    values: Mapping[int, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.dim < 0:
            raise InvalidArgument(f"dimension must be >= 0, got {self.dim}")
        clean: dict[int, float] = {}
        for idx, w in self.values.items():
            i = int(idx)
            if i < 0 or i >= self.dim:
                raise InvalidArgument(
                    f"index {i} out of range for dimension {self.dim} (doc {self.doc_id})"
                )
            fw = float(w)
            if not math.isfinite(fw):
                raise InvalidArgument(f"non-finite weight {fw} at index {i} (doc {self.doc_id})")
            if fw != 0.0:
                clean[i] = fw
        object.__setattr__(self, "values", clean)

    @classmethod
    def from_dense(cls, doc_id: int, dense: Iterable[float]) -> DocumentVector:
        arr = np.asarray(list(dense), dtype=np.float64)
        nz = np.flatnonzero(arr)
        return cls(doc_id, int(arr.shape[0]), {int(i): float(arr[i]) for i in nz})

    @property
    def nnz(self) -> int:
        return len(self.values)

    def norm(self) -> float:
        # hypot rescales, so squares of huge weights never overflow
        return math.hypot(*self.values.values())

    def dot(self, other: DocumentVector) -> float:
        # iterate the smaller map
        a, b = (self.values, other.values)
        if len(a) > len(b):
            a, b = b, a
        s = 0.0
        for idx, av in a.items():
            bv = b.get(idx)
            if bv:
                s += av * bv
        return s

    def normalized(self) -> DocumentVector:
        n = self.norm()
        if n == 0.0:
            return self
        return DocumentVector(self.doc_id, self.dim, {k: v / n for k, v in self.values.items()})

    def to_dense(self) -> np.ndarray:
        out = np.zeros(self.dim, dtype=np.float64)
        for idx, w in self.values.items():
            out[idx] = w
        return out
