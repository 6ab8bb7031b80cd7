"""Application ports package."""

from kb_rag.application.ports.clock_port import ClockPort
from kb_rag.application.ports.embedding_port import EmbeddingPort
from kb_rag.application.ports.llm_port import ChatMessage, LLMPort, LLMResponse
from kb_rag.application.ports.vector_index_port import (
    IndexRecord,
    SearchResult,
    VectorIndexPort,
)

__all__ = [
    "ClockPort",
    "EmbeddingPort",
    "LLMPort",
    "ChatMessage",
    "LLMResponse",
    "IndexRecord",
    "SearchResult",
    "VectorIndexPort",
]
