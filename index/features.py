from __future__ import annotations

import logging
import math
import re
from collections import Counter, defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from ingestion.records import Record
from processing.text import record_text
from vector.store import Corpus
from vector.types import DocumentVector

logger = logging.getLogger(__name__)

_TOKEN = re.compile(r"[A-Za-z0-9_]+")

WEIGHTS = ("none", "tf", "idf", "tfidf")
TEXT_TYPES = ("simple", "html")


def tokenize(text: str, *, uppercase: bool = True) -> list[str]:
    toks = _TOKEN.findall(text)
    if uppercase:
        return [t.upper() for t in toks]
    return toks


@dataclass
class FeatureSpaceConfig:
    fields: list[str] = field(default_factory=lambda: ["subject", "body"])
    weight: str = "tfidf"  # "none" | "tf" | "idf" | "tfidf"
    normalize: bool = True
    uppercase: bool = True
    stopwords: list[str] | None = None
    text_type: str = "simple"  # "simple" | "html"

    def __post_init__(self) -> None:
        self.weight = self.weight.lower()
        self.text_type = self.text_type.lower()
        if self.weight not in WEIGHTS:
            raise ValueError(f"Unsupported weight: {self.weight}. Supported: {list(WEIGHTS)}")
        if self.text_type not in TEXT_TYPES:
            raise ValueError(
                f"Unsupported text type: {self.text_type}. Supported: {list(TEXT_TYPES)}"
            )
        if not self.fields:
            raise ValueError("at least one text field is required")


class TextFeatureSpace:
    """Bag-of-words feature space over one or more text fields of a record.

    ``update`` fixes the vocabulary; each term gets the next free feature index
    in first-seen order, so ``dim`` is the vocabulary size. Terms first seen
    at extraction time are dropped.
    """

    def __init__(self, config: FeatureSpaceConfig | None = None) -> None:
        self.config = config or FeatureSpaceConfig()
        self.vocab: dict[str, int] = {}
        self.df: dict[str, int] = defaultdict(int)
        self.n_docs = 0
        self._stop = {self._fold(w) for w in (self.config.stopwords or [])}

    @property
    def dim(self) -> int:
        return len(self.vocab)

    def _fold(self, term: str) -> str:
        return term.upper() if self.config.uppercase else term

    def _terms(self, data: Mapping[str, Any]) -> list[str]:
        text = record_text(data, self.config.fields, html=self.config.text_type == "html")
        toks = tokenize(text, uppercase=self.config.uppercase)
        if self._stop:
            toks = [t for t in toks if t not in self._stop]
        return toks

    def update(self, records: Iterable[Record | Mapping[str, Any]]) -> None:
        for rec in records:
            data = rec.fields if isinstance(rec, Record) else rec
            self.n_docs += 1
            for term in set(self._terms(data)):
                if term not in self.vocab:
                    self.vocab[term] = len(self.vocab)
                self.df[term] += 1
        logger.debug("feature space: %d docs, %d features", self.n_docs, self.dim)

    def idf(self, term: str) -> float:
        return math.log(1.0 + self.n_docs / (1.0 + self.df.get(term, 0)))

    def extract(self, data: Record | Mapping[str, Any], doc_id: int = -1) -> DocumentVector:
        if isinstance(data, Record):
            doc_id = data.id if doc_id == -1 else doc_id
            data = data.fields
        tf = Counter(t for t in self._terms(data) if t in self.vocab)
        weight = self.config.weight
        vec: dict[int, float] = {}
        for term, freq in tf.items():
            if weight == "none":
                w = 1.0
            elif weight == "tf":
                w = float(freq)
            elif weight == "idf":
                w = self.idf(term)
            else:
                w = freq * self.idf(term)
            vec[self.vocab[term]] = w
        dv = DocumentVector(doc_id, self.dim, vec)
        return dv.normalized() if self.config.normalize else dv

    def extract_corpus(self, records: Iterable[Record]) -> Corpus:
        return Corpus((self.extract(r) for r in records), dim=self.dim)
