from __future__ import annotations

import os
from dataclasses import dataclass

# Defaults of the email nearest-neighbor example.
DEFAULT_MAX_COUNT = 100
DEFAULT_MIN_SIMILARITY = 0.05

VECTORIZERS = ("tfidf", "hashed")


@dataclass
class SearchSettings:
    max_count: int = DEFAULT_MAX_COUNT
    min_similarity: float = DEFAULT_MIN_SIMILARITY
    vectorizer: str = "tfidf"  # "tfidf" | "hashed"
    hash_dim: int = 256
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        self.vectorizer = self.vectorizer.lower()
        if self.vectorizer not in VECTORIZERS:
            raise ValueError(
                f"Unsupported vectorizer: {self.vectorizer}. Supported: {list(VECTORIZERS)}"
            )
        if self.hash_dim <= 0:
            raise ValueError(f"hash_dim must be > 0, got {self.hash_dim}")

    @classmethod
    def from_env(cls) -> SearchSettings:
        return cls(
            max_count=int(os.getenv("DOCSIM_MAX_COUNT", str(DEFAULT_MAX_COUNT))),
            min_similarity=float(os.getenv("DOCSIM_MIN_SIMILARITY", str(DEFAULT_MIN_SIMILARITY))),
            vectorizer=os.getenv("DOCSIM_VECTORIZER", "tfidf").lower(),
            hash_dim=int(os.getenv("DOCSIM_HASH_DIM", "256")),
            log_level=os.getenv("DOCSIM_LOG_LEVEL", "INFO").upper(),
        )
