from __future__ import annotations

import logging
from dataclasses import dataclass

from ...domain.errors import ValidationError
from ...domain.models import Document, IndexRecord, new_document_id, record_id
from ...domain.services.chunking import ChunkingParams, chunk_text
from ..dto.ingest_dto import DocumentResult, IngestDocumentRequest
from ..embedding_client import EmbeddingClient
from ..ports.clock_port import ClockPort
from ..ports.vector_index_port import VectorIndexPort

logger = logging.getLogger(__name__)

ADDED_BY = "kb-rag"


@dataclass
class IngestDocument:
    """Chunk -> embed (one call) -> upsert one record per chunk.

    Any failure fails the whole ingestion; records already written by a
    partially failed upsert are not rolled back.
    """

    embedding: EmbeddingClient
    vector_index: VectorIndexPort
    index_name: str
    clock: ClockPort
    chunking: ChunkingParams = ChunkingParams()

    def execute(self, req: IngestDocumentRequest) -> DocumentResult:
        # 1) Validieren
        if not req.content or not req.content.strip():
            raise ValidationError("content must not be empty")

        created_at = self.clock.now()
        doc = Document(
            id=new_document_id(),
            content=req.content,
            metadata=dict(req.metadata),
            created_at=created_at,
        )
        timestamp = created_at.isoformat()

        # 2) Chunken (pure Domain)
        chunks = chunk_text(doc.content, self.chunking, document_id=doc.id, metadata=doc.metadata)

        # 3) Embeddings, positional 1:1 with chunks
        vectors = self.embedding.embed([c.text for c in chunks])

        # 4) Persistenz im Index (mit Metadaten)
        records = [
            IndexRecord(
                id=record_id(doc.id, c.index),
                vector=tuple(vec),
                text=c.text,
                metadata={
                    **c.metadata,
                    "documentId": doc.id,
                    "chunkIndex": c.index,
                    "timestamp": timestamp,
                    "addedBy": ADDED_BY,
                },
            )
            for c, vec in zip(chunks, vectors, strict=True)
        ]
        self.vector_index.upsert(self.index_name, records)

        logger.info("Ingested document %s (%d chunks)", doc.id, len(chunks))
        return DocumentResult(id=doc.id, chunks=len(chunks), processed=True, timestamp=timestamp)
