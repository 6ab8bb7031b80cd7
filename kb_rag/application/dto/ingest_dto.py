from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class IngestDocumentRequest:
    content: str
    metadata: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DocumentResult:
    id: str
    chunks: int
    processed: bool
    timestamp: str  # ISO-8601, UTC

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "chunks": self.chunks,
            "processed": self.processed,
            "timestamp": self.timestamp,
        }
