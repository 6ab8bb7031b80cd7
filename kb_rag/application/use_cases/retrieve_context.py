# kb_rag/application/use_cases/retrieve_context.py
from __future__ import annotations

from dataclasses import dataclass

from kb_rag.application.embedding_client import EmbeddingClient
from kb_rag.application.ports.vector_index_port import SearchResult, VectorIndexPort
from kb_rag.domain.errors import ValidationError


@dataclass
class RetrieveContext:
    """
    Embed a question and fetch the nearest passages from the vector index.

    No caching and no retry here: embedding and search errors propagate
    unchanged to the caller.
    """

    embedding: EmbeddingClient
    vector_index: VectorIndexPort
    index_name: str

    def execute(
        self, question: str, top_k: int = 5, threshold: float = 0.7
    ) -> list[SearchResult]:
        if not question or not question.strip():
            raise ValidationError("question must not be empty")
        if top_k <= 0:
            raise ValidationError("top_k must be > 0")

        q_vec = self.embedding.embed_query(question)
        return self.vector_index.search(
            self.index_name, q_vec, top_k=top_k, threshold=threshold
        )
