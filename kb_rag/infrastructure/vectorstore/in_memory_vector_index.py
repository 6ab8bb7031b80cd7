from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from dataclasses import dataclass, field

from kb_rag.application.ports.vector_index_port import (
    IndexRecord,
    SearchResult,
    VectorIndexPort,
)
from kb_rag.domain.errors import ConfigurationError, NotFoundError, ValidationError
from kb_rag.domain.models import ensure_dimension
from kb_rag.domain.similarity import cosine, top_k_above

logger = logging.getLogger(__name__)


@dataclass
class _Index:
    dimension: int
    records: dict[str, IndexRecord] = field(default_factory=dict)


class InMemoryVectorIndex(VectorIndexPort):
    """Process-local exact cosine index for development and tests.

    Upserts replace records with the same id; insertion order breaks
    similarity ties.
    """

    def __init__(self) -> None:
        self._indexes: dict[str, _Index] = {}
        self._lock = threading.Lock()

    def create_index(self, name: str, dimension: int) -> None:
        if dimension <= 0:
            raise ConfigurationError(f"index dimension must be > 0, got {dimension}")
        with self._lock:
            existing = self._indexes.get(name)
            if existing is None:
                self._indexes[name] = _Index(dimension=dimension)
                logger.info("Created index '%s' (dimension=%d)", name, dimension)
                return
        if existing.dimension != dimension:
            raise ConfigurationError(
                f"index '{name}' exists with dimension {existing.dimension}, "
                f"requested {dimension}"
            )
        logger.info("Index '%s' already exists, continuing", name)

    def _get(self, name: str) -> _Index:
        idx = self._indexes.get(name)
        if idx is None:
            raise NotFoundError(f"index '{name}' does not exist")
        return idx

    def upsert(self, index_name: str, records: Sequence[IndexRecord]) -> None:
        with self._lock:
            idx = self._get(index_name)
            for rec in records:
                ensure_dimension(rec.vector, idx.dimension)
            for rec in records:
                idx.records[rec.id] = rec

    def search(
        self,
        index_name: str,
        query_vector: Sequence[float],
        top_k: int = 5,
        threshold: float = 0.0,
    ) -> list[SearchResult]:
        if top_k <= 0:
            raise ValidationError("top_k must be > 0")
        with self._lock:
            idx = self._get(index_name)
            records = list(idx.records.values())
        ensure_dimension(query_vector, idx.dimension)

        scored = [(cosine(query_vector, rec.vector), i) for i, rec in enumerate(records)]
        return [
            SearchResult(
                content=records[i].text,
                metadata=dict(records[i].metadata),
                similarity=score,
            )
            for score, i in top_k_above(scored, top_k, threshold)
        ]

    def count(self, index_name: str) -> int:
        with self._lock:
            return len(self._get(index_name).records)
