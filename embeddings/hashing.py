from __future__ import annotations

import hashlib
from collections.abc import Iterable

import numpy as np

from index.features import tokenize
from ingestion.records import Record
from processing.text import record_text
from vector.errors import InvalidArgument
from vector.store import Corpus
from vector.types import DocumentVector


def _hash32(s: str) -> int:
    return int(hashlib.sha1(s.encode("utf-8")).hexdigest()[:8], 16)


def embed_text(text: str, dim: int = 256, doc_id: int = -1) -> DocumentVector:
    """
    Deterministic hashed bag-of-words vector.
    - Tokenize like the text feature space (uppercased)
    - Hash tokens into `dim` bins
    - L2-normalize
    Needs no fitted vocabulary, so any two texts embedded with the same `dim`
    are comparable.
    """
    if dim <= 0:
        raise InvalidArgument(f"hash dimension must be > 0, got {dim}")
    vec = np.zeros(dim, dtype=np.float64)
    for tok in tokenize(text):
        vec[_hash32(tok) % dim] += 1.0
    n = float(np.linalg.norm(vec))
    if n > 0:
        vec /= n
    return DocumentVector.from_dense(doc_id, vec)


def embed_corpus(
    records: Iterable[Record], fields: list[str], dim: int = 256
) -> Corpus:
    out = Corpus(dim=dim)
    out.add(
        embed_text(record_text(r.fields, fields), dim=dim, doc_id=r.id)
        for r in records
    )
    return out
