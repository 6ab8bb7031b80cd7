"""RAG service facade: query, add_document, chat.

Constructed once by the composition root and handed to request handlers;
it keeps no per-request state.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from kb_rag.application.dto.ingest_dto import DocumentResult, IngestDocumentRequest
from kb_rag.application.dto.query_dto import ChatResult, QueryResult
from kb_rag.application.ports.clock_port import ClockPort
from kb_rag.application.ports.vector_index_port import VectorIndexPort
from kb_rag.application.use_cases.generate_answer import GenerateAnswer
from kb_rag.application.use_cases.ingest_document import IngestDocument
from kb_rag.application.use_cases.retrieve_context import RetrieveContext
from kb_rag.domain.errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass
class RAGService:
    retriever: RetrieveContext
    generator: GenerateAnswer
    ingestor: IngestDocument
    vector_index: VectorIndexPort
    clock: ClockPort
    index_name: str
    dimension: int
    top_k: int = 5
    threshold: float = 0.7
    info: Mapping[str, Any] = field(default_factory=dict)

    def initialize(self) -> None:
        """Ensure the configured index exists (idempotent)."""
        self.vector_index.create_index(self.index_name, self.dimension)
        logger.info("Index '%s' ready (dimension=%d)", self.index_name, self.dimension)

    def query(self, question: str) -> QueryResult:
        started = time.perf_counter()
        sources = self.retriever.execute(question, top_k=self.top_k, threshold=self.threshold)
        answer = self.generator.execute(question, [s.content for s in sources])
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        logger.info("Answered query with %d sources in %d ms", len(sources), elapsed_ms)
        return QueryResult(
            answer=answer,
            sources=sources,
            processing_time_ms=elapsed_ms,
            model=self.generator.model,
        )

    def add_document(
        self, content: str, metadata: Mapping[str, Any] | None = None
    ) -> DocumentResult:
        return self.ingestor.execute(
            IngestDocumentRequest(content=content, metadata=dict(metadata or {}))
        )

    def chat(self, message: str, instructions: str | None = None) -> ChatResult:
        if not message or not message.strip():
            raise ValidationError("message must not be empty")
        response = self.generator.chat(message, instructions)
        return ChatResult(
            response=response,
            model=self.generator.model,
            timestamp=self.clock.now().isoformat(),
        )

    def service_info(self) -> dict[str, Any]:
        return {
            **self.info,
            "model": self.generator.model,
            "index": self.index_name,
            "dimension": self.dimension,
            "retrieval": {"topK": self.top_k, "threshold": self.threshold},
        }
