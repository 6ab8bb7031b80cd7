from kb_rag.application.embedding_client import EmbeddingClient
from kb_rag.application.ports.clock_port import ClockPort
from kb_rag.application.ports.embedding_port import EmbeddingPort
from kb_rag.application.ports.llm_port import LLMPort
from kb_rag.application.ports.vector_index_port import VectorIndexPort
from kb_rag.application.rag_service import RAGService
from kb_rag.application.tools.knowledge_tools import build_tool_registry
from kb_rag.application.use_cases.generate_answer import GenerateAnswer
from kb_rag.application.use_cases.ingest_document import IngestDocument
from kb_rag.application.use_cases.retrieve_context import RetrieveContext
from kb_rag.config.settings import AppSettings
from kb_rag.domain.services.chunking import ChunkingParams
from kb_rag.infrastructure.embeddings.hf_sentence_transformers import HFEmbeddingAdapter
from kb_rag.infrastructure.embeddings.openai_embedding_adapter import OpenAIEmbeddingAdapter
from kb_rag.infrastructure.llm.openai_chat_adapter import OpenAIChatAdapter
from kb_rag.infrastructure.time.system_clock import SystemClock
from kb_rag.infrastructure.vectorstore.chroma_vector_index import ChromaVectorIndex
from kb_rag.infrastructure.vectorstore.in_memory_vector_index import InMemoryVectorIndex
from kb_rag.infrastructure.vectorstore.qdrant_vector_index import QdrantConfig, QdrantVectorIndex

__all__ = [
    "build_clock",
    "build_embedding",
    "build_embedding_client",
    "build_llm",
    "build_rag_service",
    "build_tool_registry",
    "build_vector_index",
]


def build_embedding(settings: AppSettings) -> EmbeddingPort:
    if settings.embedding_backend == "sentence_transformers":
        return HFEmbeddingAdapter(
            model_name=settings.embedding_model,
            device=settings.embedding_device,
        )
    return OpenAIEmbeddingAdapter(
        base_url=settings.embedding_base_url,
        api_key=settings.embedding_api_key,
        model=settings.embedding_model,
        timeout_s=settings.embedding_timeout_s,
    )


def build_embedding_client(settings: AppSettings) -> EmbeddingClient:
    return EmbeddingClient(
        port=build_embedding(settings),
        dimension=settings.embedding_dimension,
        batch_size=settings.embedding_batch_size,
    )


def build_vector_index(settings: AppSettings) -> VectorIndexPort:
    backend = settings.vector_backend

    if backend == "qdrant":
        return QdrantVectorIndex(
            QdrantConfig(
                url=settings.qdrant_url,
                api_key=settings.qdrant_api_key or None,
                timeout_s=settings.qdrant_timeout_s,
            )
        )

    if backend == "chroma":
        return ChromaVectorIndex(persist_dir=settings.chroma_dir)

    return InMemoryVectorIndex()


def build_llm(settings: AppSettings) -> LLMPort:
    return OpenAIChatAdapter(
        base_url=settings.llm_base_url,
        api_key=settings.llm_api_key,
        model=settings.llm_model,
        timeout_s=settings.llm_timeout_s,
    )


def build_clock() -> ClockPort:
    """Build clock adapter for time operations.

    Note:
        Tests should inject a fixed clock instead.
    """
    return SystemClock()


def build_rag_service(settings: AppSettings | None = None) -> RAGService:
    """Wire the RAG service from settings (default: load from environment).

    Settings are validated first, so a bad configuration fails here and not
    on the first request. The index itself is created by
    ``RAGService.initialize()``.
    """
    settings = (settings or AppSettings()).validate()

    embedding = build_embedding_client(settings)
    vector_index = build_vector_index(settings)
    clock = build_clock()

    retriever = RetrieveContext(
        embedding=embedding,
        vector_index=vector_index,
        index_name=settings.index_name,
    )
    generator = GenerateAnswer(
        llm=build_llm(settings),
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
    )
    ingestor = IngestDocument(
        embedding=embedding,
        vector_index=vector_index,
        index_name=settings.index_name,
        clock=clock,
        chunking=ChunkingParams(
            strategy=settings.chunk_strategy,
            size=settings.chunk_size,
            overlap=settings.chunk_overlap,
        ),
    )
    return RAGService(
        retriever=retriever,
        generator=generator,
        ingestor=ingestor,
        vector_index=vector_index,
        clock=clock,
        index_name=settings.index_name,
        dimension=settings.embedding_dimension,
        top_k=settings.retrieval_top_k,
        threshold=settings.retrieval_threshold,
        info={
            "service": settings.service_name,
            "version": settings.service_version,
            "embedding": f"{settings.embedding_backend}:{settings.embedding_model}",
            "vectorDb": settings.vector_backend,
            "tools": ["query_knowledge", "add_document", "chat"],
        },
    )
