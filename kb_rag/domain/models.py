# kb_rag/domain/models.py
# Domain models must be pure (no I/O, no external libs)
from __future__ import annotations

import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .errors import ConfigurationError

Vector = Sequence[float]

# Namespace for deterministic record keys (UUID5 is accepted by every backend)
_RECORD_NAMESPACE = uuid.UUID("6f1c1a52-3c3e-4f0e-9a43-6b0f3c2d9e11")


@dataclass(frozen=True)
class Document:
    """An ingested document. Immutable once stored."""

    id: str
    content: str
    metadata: Mapping[str, Any]
    created_at: datetime


@dataclass(frozen=True)
class Chunk:
    """
    A bounded span of a document's text, the unit of embedding.

    - text:         the visible chunk text
    - index:        0-based position within the document
    - document_id:  back-reference to the source document
    - metadata:     metadata inherited from the document
    """

    text: str
    index: int
    document_id: str = ""
    metadata: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class IndexRecord:
    """The unit stored in a vector index; one per chunk."""

    id: str
    vector: tuple[float, ...]
    text: str
    metadata: Mapping[str, Any]


@dataclass(frozen=True)
class SearchResult:
    """A retrieved passage with its similarity to the query."""

    content: str
    metadata: Mapping[str, Any]
    similarity: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": self.content,
            "metadata": dict(self.metadata),
            "similarity": self.similarity,
        }


def new_document_id() -> str:
    return f"doc_{uuid.uuid4().hex}"


def record_id(document_id: str, chunk_index: int) -> str:
    """Stable record key for a chunk of a document."""
    return str(uuid.uuid5(_RECORD_NAMESPACE, f"{document_id}::chunk::{chunk_index}"))


def ensure_dimension(vector: Vector, dimension: int) -> None:
    """Raise ConfigurationError when a vector does not match the declared dimension."""
    if len(vector) != dimension:
        raise ConfigurationError(
            f"vector dimension {len(vector)} does not match index dimension {dimension}"
        )
