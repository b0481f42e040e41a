import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from index.features import FeatureSpaceConfig
from ingestion.records import RecordStore
from search.config import SearchSettings
from search.pipeline import find_similar
from search.similarity import search
from util.log import configure_logging
from vector.errors import InvalidArgument
from vector.types import DocumentVector

SETTINGS = SearchSettings.from_env()
configure_logging(SETTINGS.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="docsim API", version="0.1.0")

_STORE = RecordStore("Email", fields=["subject", "body", "spam"])


def get_store() -> RecordStore:
    return _STORE


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    logger.warning("%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=422, content={"error": type(exc).__name__, "detail": str(exc)})


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}


class VectorIn(BaseModel):
    id: int = -1
    dim: int | None = None
    values: list[float] | dict[int, float]

    def to_vector(self) -> DocumentVector:
        if isinstance(self.values, list):
            if self.dim is not None and self.dim != len(self.values):
                raise InvalidArgument(
                    f"vector {self.id}: dim {self.dim} does not match {len(self.values)} values"
                )
            return DocumentVector.from_dense(self.id, self.values)
        if self.dim is None:
            raise InvalidArgument(f"vector {self.id}: sparse values need an explicit dim")
        return DocumentVector(self.id, self.dim, self.values)


class VectorSearchRequest(BaseModel):
    corpus: list[VectorIn]
    query: VectorIn
    max_count: int = SETTINGS.max_count
    min_similarity: float = SETTINGS.min_similarity


@app.post("/search")
def search_vectors(body: VectorSearchRequest) -> dict[str, list[dict[str, Any]]]:
    corpus = [v.to_vector() for v in body.corpus]
    hits = search(corpus, body.query.to_vector(), body.max_count, body.min_similarity)
    return {"hits": [{"id": h.doc_id, "score": h.score} for h in hits]}


class RecordsRequest(BaseModel):
    records: list[dict[str, Any]]


@app.post("/records")
def push_records(body: RecordsRequest) -> dict[str, Any]:
    store = get_store()
    ids = store.push_many(body.records)
    return {"ids": ids, "total": len(store)}


@app.get("/records/stats")
def records_stats() -> dict[str, int | str]:
    store = get_store()
    return {"store": store.name, "count": len(store)}


class SimilarRequest(BaseModel):
    query: str
    records: list[dict[str, Any]] | None = None
    fields: list[str] | None = None
    weight: str = "tfidf"
    normalize: bool = True
    uppercase: bool = True
    stopwords: list[str] | None = None
    text_type: str = "simple"
    vectorizer: str | None = None
    max_count: int | None = None
    min_similarity: float | None = None


@app.post("/similar")
def similar(body: SimilarRequest) -> dict[str, Any]:
    if body.records is not None:
        store = RecordStore("inline", fields=body.fields or [])
        store.push_many(body.records)
    else:
        store = get_store()

    features = FeatureSpaceConfig(
        fields=body.fields or ["subject", "body"],
        weight=body.weight,
        normalize=body.normalize,
        uppercase=body.uppercase,
        stopwords=body.stopwords,
        text_type=body.text_type,
    )
    settings = SearchSettings(
        max_count=SETTINGS.max_count,
        min_similarity=SETTINGS.min_similarity,
        vectorizer=(body.vectorizer or SETTINGS.vectorizer).lower(),
        hash_dim=SETTINGS.hash_dim,
    )
    ranked = find_similar(
        store,
        body.query,
        max_count=body.max_count,
        min_similarity=body.min_similarity,
        features=features,
        settings=settings,
    )
    return {"query": body.query, "count": len(ranked), "ranked": ranked}
