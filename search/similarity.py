from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from vector.errors import DimensionMismatch, InvalidArgument, SearchError
from vector.store import Corpus
from vector.types import DocumentVector


@dataclass(frozen=True)
class SimilarityHit:
    doc_id: int
    score: float


@dataclass(frozen=True)
class SearchOutcome:
    """Either a ranked hit list (``ok``) or the error that prevented it."""

    ok: bool
    hits: list[SimilarityHit] = field(default_factory=list)
    error: SearchError | None = None


def cosine_similarity(a: DocumentVector, b: DocumentVector) -> float:
    if a.dim != b.dim:
        raise DimensionMismatch(a.doc_id, b.dim, a.dim)
    if not a.nnz or not b.nnz:
        return 0.0
    # dot of unit vectors stays finite whatever the weight magnitudes
    return a.normalized().dot(b.normalized())


def score_documents(
    documents: Iterable[DocumentVector], query: DocumentVector
) -> list[tuple[int, float]]:
    """Cosine score of every document against ``query``, in input order."""
    q_unit = query.normalized()
    out: list[tuple[int, float]] = []
    for doc in documents:
        if doc.dim != query.dim:
            raise DimensionMismatch(doc.doc_id, query.dim, doc.dim)
        if not q_unit.nnz or not doc.nnz:
            out.append((doc.doc_id, 0.0))
            continue
        out.append((doc.doc_id, doc.normalized().dot(q_unit)))
    return out


def rank(
    scores: Iterable[tuple[int, float]], max_count: int, min_similarity: float
) -> list[SimilarityHit]:
    """Order by score descending (ties: lower id first), then threshold and truncate.

    NaN scores never rank and never pass the threshold.
    """
    _check_max_count(max_count)
    ordered = sorted(
        ((doc_id, s) for doc_id, s in scores if not math.isnan(s)),
        key=lambda x: (-x[1], x[0]),
    )
    limit = min(max_count, len(ordered))
    hits: list[SimilarityHit] = []
    seen: set[int] = set()
    for doc_id, score in ordered:
        if len(hits) >= limit or not score >= min_similarity:
            break
        if doc_id in seen:
            raise InvalidArgument(f"duplicate document id {doc_id}")
        seen.add(doc_id)
        hits.append(SimilarityHit(doc_id, float(score)))
    return hits


def search(
    corpus: Corpus | Sequence[DocumentVector],
    query: DocumentVector,
    max_count: int,
    min_similarity: float,
) -> list[SimilarityHit]:
    """Top ``max_count`` documents by cosine similarity to ``query``.

    Every returned score is >= ``min_similarity``. An empty corpus gives an
    empty result; any dimension mismatch aborts the whole search.
    """
    _check_max_count(max_count)
    docs = list(corpus)
    if not docs:
        return []
    return rank(score_documents(docs, query), max_count, min_similarity)


def search_sharded(
    corpus: Corpus | Sequence[DocumentVector],
    query: DocumentVector,
    max_count: int,
    min_similarity: float,
    *,
    shards: int = 4,
    max_workers: int | None = None,
) -> list[SimilarityHit]:
    """Same result as :func:`search`, scoring corpus slices on a thread pool."""
    _check_max_count(max_count)
    c = corpus if isinstance(corpus, Corpus) else Corpus(corpus)
    if not len(c):
        return []
    parts = c.shards(shards)
    with ThreadPoolExecutor(max_workers=max_workers or len(parts)) as pool:
        scored = list(pool.map(lambda part: score_documents(part, query), parts))
    merged = [pair for part in scored for pair in part]
    return rank(merged, max_count, min_similarity)


def try_search(
    corpus: Corpus | Sequence[DocumentVector],
    query: DocumentVector,
    max_count: int,
    min_similarity: float,
) -> SearchOutcome:
    try:
        hits = search(corpus, query, max_count, min_similarity)
    except SearchError as e:
        return SearchOutcome(ok=False, error=e)
    return SearchOutcome(ok=True, hits=hits)


def _check_max_count(max_count: int) -> None:
    if max_count < 0:
        raise InvalidArgument(f"max_count must be >= 0, got {max_count}")
