from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from kb_rag.application.ports.embedding_port import EmbeddingPort
from kb_rag.domain.errors import (
    ConfigurationError,
    DomainError,
    EmbeddingError,
    is_timeout,
)
from kb_rag.domain.models import ensure_dimension

logger = logging.getLogger(__name__)


@dataclass
class EmbeddingClient:
    """Batches texts to an embedding adapter and enforces the declared dimension.

    There is no partial success: the first failing sub-batch fails the whole
    call. Callers that need isolation must sub-batch before calling.
    """

    port: EmbeddingPort
    dimension: int
    batch_size: int = 64

    def __post_init__(self) -> None:
        if self.dimension <= 0:
            raise ConfigurationError(f"embedding dimension must be > 0, got {self.dimension}")
        if self.batch_size <= 0:
            raise ConfigurationError(f"embedding batch size must be > 0, got {self.batch_size}")

    def embed(self, texts: Sequence[str]) -> list[list[float]]:
        vectors: list[list[float]] = []
        for start in range(0, len(texts), self.batch_size):
            batch = list(texts[start : start + self.batch_size])
            try:
                out = self.port.embed_texts(batch)
            except DomainError:
                raise
            except Exception as ex:  # noqa: BLE001
                raise EmbeddingError(str(ex), timed_out=is_timeout(ex)) from ex
            if len(out) != len(batch):
                raise EmbeddingError(
                    f"provider returned {len(out)} vectors for {len(batch)} texts"
                )
            for vec in out:
                ensure_dimension(vec, self.dimension)
            vectors.extend([float(x) for x in vec] for vec in out)
        logger.debug("Embedded %d texts in batches of %d", len(texts), self.batch_size)
        return vectors

    def embed_query(self, text: str) -> list[float]:
        return self.embed([text])[0]
