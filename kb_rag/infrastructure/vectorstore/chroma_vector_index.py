from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping, Sequence
from typing import Any, cast

from kb_rag.application.ports.vector_index_port import (
    IndexRecord,
    SearchResult,
    VectorIndexPort,
)
from kb_rag.domain.errors import (
    ConfigurationError,
    DomainError,
    NotFoundError,
    ValidationError,
    VectorStoreError,
    is_timeout,
)
from kb_rag.domain.models import ensure_dimension

try:  # pragma: no cover - exercised via tests with monkeypatch
    import chromadb
except Exception:  # noqa: BLE001
    chromadb = None

logger = logging.getLogger(__name__)

DIMENSION_KEY = "dimension"


def _scalar_metadata(metadata: Mapping[str, Any]) -> dict[str, Any]:
    """Chroma only stores str/int/float/bool values; other values become JSON."""
    out: dict[str, Any] = {}
    for key, value in metadata.items():
        if value is None:
            continue
        if isinstance(value, str | int | float | bool):
            out[key] = value
        else:
            out[key] = json.dumps(value, ensure_ascii=False, default=str)
    return out


class ChromaVectorIndex(VectorIndexPort):
    """Persistent local Chroma store with cosine space.

    Chroma collections are dimensionless, so the declared dimension lives in
    the collection metadata. Chroma reports cosine distance; similarity is
    ``1 - distance``.
    """

    def __init__(self, persist_dir: str = "var/chroma") -> None:
        if chromadb is None:
            raise VectorStoreError("chromadb not installed.")
        self.persist_dir = persist_dir
        os.makedirs(self.persist_dir, exist_ok=True)
        try:
            self._client = chromadb.PersistentClient(path=self.persist_dir)
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"Failed to init Chroma at '{self.persist_dir}': {ex}") from ex
        self._collections: dict[str, tuple[Any, int]] = {}

    def _names(self) -> list[str]:
        # chromadb >= 0.6 returns names, older releases return Collection objects
        return [getattr(c, "name", c) for c in self._client.list_collections()]

    def _collection(self, name: str) -> tuple[Any, int]:
        if name in self._collections:
            return self._collections[name]
        try:
            if name not in self._names():
                raise NotFoundError(f"index '{name}' does not exist")
            coll = self._client.get_collection(name=name)
        except DomainError:
            raise
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"describe '{name}': {ex}", timed_out=is_timeout(ex)) from ex
        dim = int((coll.metadata or {}).get(DIMENSION_KEY, 0))
        if dim <= 0:
            raise ConfigurationError(f"index '{name}' has no declared dimension")
        self._collections[name] = (coll, dim)
        return coll, dim

    def create_index(self, name: str, dimension: int) -> None:
        if dimension <= 0:
            raise ConfigurationError(f"index dimension must be > 0, got {dimension}")
        if name in self._names():
            _coll, existing = self._collection(name)
            if existing != dimension:
                raise ConfigurationError(
                    f"index '{name}' exists with dimension {existing}, requested {dimension}"
                )
            logger.info("Chroma collection '%s' already exists, continuing", name)
            return
        try:
            coll = self._client.create_collection(
                name=name,
                metadata={"hnsw:space": "cosine", DIMENSION_KEY: dimension},
            )
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"Failed to create collection '{name}': {ex}") from ex
        self._collections[name] = (coll, dimension)
        logger.info("Created Chroma collection '%s' (dimension=%d)", name, dimension)

    def upsert(self, index_name: str, records: Sequence[IndexRecord]) -> None:
        coll, dim = self._collection(index_name)
        for rec in records:
            ensure_dimension(rec.vector, dim)
        if not records:
            return
        try:
            coll.upsert(
                ids=[rec.id for rec in records],
                embeddings=[list(rec.vector) for rec in records],
                metadatas=[_scalar_metadata(rec.metadata) for rec in records],
                documents=[rec.text for rec in records],
            )
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"Upsert failed: {ex}", timed_out=is_timeout(ex)) from ex

    def search(
        self,
        index_name: str,
        query_vector: Sequence[float],
        top_k: int = 5,
        threshold: float = 0.0,
    ) -> list[SearchResult]:
        if top_k <= 0:
            raise ValidationError("top_k must be > 0")
        coll, dim = self._collection(index_name)
        ensure_dimension(query_vector, dim)
        try:
            result = cast(
                dict[str, list[list[Any]]],
                coll.query(
                    query_embeddings=[list(query_vector)],
                    n_results=top_k,
                    include=["documents", "metadatas", "distances"],
                ),
            )
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"Search failed: {ex}", timed_out=is_timeout(ex)) from ex

        documents = (result.get("documents") or [[]])[0]
        metadatas = (result.get("metadatas") or [[]])[0]
        distances = (result.get("distances") or [[]])[0]

        hits: list[SearchResult] = []
        for idx, distance in enumerate(distances):
            similarity = 1.0 - float(distance)  # Chroma liefert Distanz (kleiner = besser)
            if similarity < threshold:
                continue
            text = documents[idx] if idx < len(documents) and documents[idx] is not None else ""
            metadata = metadatas[idx] if idx < len(metadatas) and metadatas[idx] is not None else {}
            hits.append(
                SearchResult(content=str(text), metadata=dict(metadata), similarity=similarity)
            )
        hits.sort(key=lambda r: r.similarity, reverse=True)
        return hits[:top_k]
