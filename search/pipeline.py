from __future__ import annotations

import logging
from typing import Any

from embeddings.hashing import embed_corpus, embed_text
from index.features import FeatureSpaceConfig, TextFeatureSpace
from ingestion.records import RecordStore
from search.config import SearchSettings
from search.similarity import search

logger = logging.getLogger(__name__)


def find_similar(
    store: RecordStore,
    query: str,
    *,
    max_count: int | None = None,
    min_similarity: float | None = None,
    features: FeatureSpaceConfig | None = None,
    settings: SearchSettings | None = None,
) -> list[dict[str, Any]]:
    """Records of ``store`` most similar to the free-text ``query``.

    The query becomes a transient record holding the text in the first
    configured field; it is vectorized with the same feature space as the
    stored records and never pushed into the store.
    """
    settings = settings or SearchSettings()
    features = features or FeatureSpaceConfig()
    max_count = settings.max_count if max_count is None else max_count
    min_sim = settings.min_similarity if min_similarity is None else min_similarity

    records = store.all_records()
    by_id = {r.id: r for r in records}
    query_fields = {features.fields[0]: query}

    if settings.vectorizer == "hashed":
        corpus = embed_corpus(records, features.fields, dim=settings.hash_dim)
        q_vec = embed_text(query, dim=settings.hash_dim)
    else:
        space = TextFeatureSpace(features)
        space.update(records)
        corpus = space.extract_corpus(records)
        q_vec = space.extract(query_fields)
    logger.debug(
        "vectorized %d records with %s (dim=%s, query nnz=%d)",
        len(corpus),
        settings.vectorizer,
        corpus.dim,
        q_vec.nnz,
    )

    hits = search(corpus, q_vec, max_count, min_sim)
    logger.info("query %r: %d of %d records above %.3f", query, len(hits), len(records), min_sim)

    out: list[dict[str, Any]] = []
    for h in hits:
        rec = by_id[h.doc_id]
        out.append({"id": rec.id, "score": float(round(h.score, 6)), "record": rec.fields})
    return out
