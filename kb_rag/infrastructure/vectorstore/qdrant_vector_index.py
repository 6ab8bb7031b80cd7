"""Qdrant vector index adapter.

Encapsulates qdrant-client; only domain errors leave this module.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from importlib import import_module
from typing import Any

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

logger = logging.getLogger(__name__)

TEXT_KEY = "text"
METADATA_KEY = "metadata"


@dataclass
class QdrantConfig:
    """Configuration for Qdrant client connection."""

    url: str
    api_key: str | None = None
    prefer_grpc: bool = False
    timeout_s: int = 30


class QdrantVectorIndex(VectorIndexPort):
    """Cosine-distance collections in Qdrant, one collection per index.

    Qdrant's cosine score is the similarity; ``score_threshold`` filters on
    the server side. Each point payload keeps the chunk body and the caller's
    metadata under separate keys.
    """

    def __init__(self, cfg: QdrantConfig) -> None:
        self._cfg = cfg
        self._client = self._init_client(cfg)
        self._dimensions: dict[str, int] = {}

    def _init_client(self, cfg: QdrantConfig) -> Any:
        try:
            qdrant_client = import_module("qdrant_client")
            return qdrant_client.QdrantClient(
                url=cfg.url,
                api_key=cfg.api_key,
                timeout=cfg.timeout_s,
                prefer_grpc=cfg.prefer_grpc,
            )
        except Exception as ex:
            raise VectorStoreError(f"Qdrant init failed: {ex}") from ex

    def _exists(self, name: str) -> bool:
        collections = self._client.get_collections()
        return any(c.name == name for c in collections.collections)

    def _remote_dimension(self, name: str) -> int:
        info = self._client.get_collection(name)
        return int(info.config.params.vectors.size)

    def _dimension(self, name: str) -> int:
        if name in self._dimensions:
            return self._dimensions[name]
        try:
            if not self._exists(name):
                raise NotFoundError(f"index '{name}' does not exist")
            dim = self._remote_dimension(name)
        except DomainError:
            raise
        except Exception as ex:
            raise VectorStoreError(f"describe '{name}': {ex}", timed_out=is_timeout(ex)) from ex
        self._dimensions[name] = dim
        return dim

    def create_index(self, name: str, dimension: int) -> None:
        if dimension <= 0:
            raise ConfigurationError(f"index dimension must be > 0, got {dimension}")
        try:
            models = import_module("qdrant_client.models")
            if self._exists(name):
                existing = self._remote_dimension(name)
            else:
                existing = None
                self._client.create_collection(
                    collection_name=name,
                    vectors_config=models.VectorParams(
                        size=dimension,
                        distance=models.Distance.COSINE,
                    ),
                )
        except Exception as ex:
            raise VectorStoreError(
                f"create_index '{name}': {ex}", timed_out=is_timeout(ex)
            ) from ex

        if existing is None:
            logger.info("Created Qdrant collection '%s' (dimension=%d)", name, dimension)
        elif existing != dimension:
            raise ConfigurationError(
                f"index '{name}' exists with dimension {existing}, requested {dimension}"
            )
        else:
            logger.info("Qdrant collection '%s' already exists, continuing", name)
        self._dimensions[name] = dimension

    def upsert(self, index_name: str, records: Sequence[IndexRecord]) -> None:
        dim = self._dimension(index_name)
        for rec in records:
            ensure_dimension(rec.vector, dim)
        if not records:
            return
        try:
            models = import_module("qdrant_client.models")
            points = [
                models.PointStruct(
                    id=rec.id,
                    vector=list(rec.vector),
                    payload={TEXT_KEY: rec.text, METADATA_KEY: dict(rec.metadata)},
                )
                for rec in records
            ]
            self._client.upsert(
                collection_name=index_name,
                points=points,
                wait=True,  # Wait for operation to complete
            )
        except Exception as ex:
            raise VectorStoreError(f"upsert: {ex}", timed_out=is_timeout(ex)) from ex

    def search(
        self,
        index_name: str,
        query_vector: Sequence[float],
        top_k: int = 5,
        threshold: float = 0.0,
    ) -> list[SearchResult]:
        if top_k <= 0:
            raise ValidationError("top_k must be > 0")
        ensure_dimension(query_vector, self._dimension(index_name))
        try:
            response = self._client.query_points(
                collection_name=index_name,
                query=list(query_vector),
                limit=top_k,
                score_threshold=threshold,
                with_payload=True,
                with_vectors=False,  # Don't return vectors (saves bandwidth)
            )
        except Exception as ex:
            raise VectorStoreError(f"search: {ex}", timed_out=is_timeout(ex)) from ex

        results: list[SearchResult] = []
        for hit in response.points:
            payload = hit.payload or {}
            text = str(payload.get(TEXT_KEY, ""))
            metadata = dict(payload.get(METADATA_KEY) or {})
            score = float(hit.score)
            if score < threshold:
                continue
            results.append(SearchResult(content=text, metadata=metadata, similarity=score))
        results.sort(key=lambda r: r.similarity, reverse=True)
        return results[:top_k]
