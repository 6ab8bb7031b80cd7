# kb_rag/application/dto/query_dto.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from kb_rag.domain.models import SearchResult


@dataclass(frozen=True)
class QueryResult:
    """
    Grounded answer for a question.

    - answer:              text generated by the model
    - sources:             passages used as context, best match first
    - processing_time_ms:  wall time of retrieval + generation
    - model:               model that produced the answer
    """

    answer: str
    sources: list[SearchResult] = field(default_factory=list)
    processing_time_ms: int = 0
    model: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "answer": self.answer,
            "sources": [s.to_dict() for s in self.sources],
            "processingTime": self.processing_time_ms,
            "model": self.model,
        }


@dataclass(frozen=True)
class ChatResult:
    response: str
    model: str
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        return {"response": self.response, "model": self.model, "timestamp": self.timestamp}
