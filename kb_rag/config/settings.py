"""Application settings with environment-driven configuration.

This is the ONLY place where environment variables are read. All other
layers receive settings via the composition root.
"""

import os
from dataclasses import dataclass, field

from kb_rag.domain.errors import ConfigurationError
from kb_rag.domain.services.chunking import STRATEGIES

VECTOR_BACKENDS = ("memory", "qdrant", "chroma")
EMBEDDING_BACKENDS = ("openai", "sentence_transformers")


def _env_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError as ex:
        raise ConfigurationError(f"{name} must be an integer, got '{raw}'") from ex


def _env_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except ValueError as ex:
        raise ConfigurationError(f"{name} must be a number, got '{raw}'") from ex


@dataclass(frozen=True)
class AppSettings:
    """Application settings loaded from environment variables."""

    # ===== Service =====
    service_name: str = field(default_factory=lambda: os.getenv("SERVICE_NAME", "kb-rag"))
    service_version: str = field(default_factory=lambda: os.getenv("SERVICE_VERSION", "0.1.0"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())

    # ===== Vector Index Configuration =====
    vector_backend: str = field(
        default_factory=lambda: os.getenv("VECTOR_BACKEND", "memory").lower()
    )
    # Supported: "memory" | "qdrant" | "chroma"

    index_name: str = field(default_factory=lambda: os.getenv("VECTOR_INDEX", "embeddings"))
    embedding_dimension: int = field(
        default_factory=lambda: _env_int("EMBEDDING_DIMENSION", "1024")
    )
    # Must equal the embedding model's output size for the lifetime of the index

    # Qdrant-specific
    qdrant_url: str = field(
        default_factory=lambda: os.getenv("QDRANT_URL", "http://localhost:6333")
    )
    qdrant_api_key: str = field(default_factory=lambda: os.getenv("QDRANT_API_KEY", ""))
    qdrant_timeout_s: int = field(default_factory=lambda: _env_int("QDRANT_TIMEOUT_S", "30"))

    # Chroma-specific
    chroma_dir: str = field(default_factory=lambda: os.getenv("CHROMA_DIR", "var/chroma"))

    # ===== Embedding Configuration =====
    embedding_backend: str = field(
        default_factory=lambda: os.getenv("EMBEDDING_BACKEND", "openai").lower()
    )
    # Supported: "openai" (any OpenAI-compatible API) | "sentence_transformers"

    embedding_model: str = field(
        default_factory=lambda: os.getenv("EMBEDDING_MODEL", "deepseek-embedding")
    )
    embedding_base_url: str = field(
        default_factory=lambda: os.getenv(
            "EMBEDDING_BASE_URL", os.getenv("LLM_BASE_URL", "https://api.deepseek.com/v1")
        )
    )
    embedding_api_key: str = field(
        default_factory=lambda: os.getenv(
            "EMBEDDING_API_KEY", os.getenv("LLM_API_KEY", os.getenv("DEEPSEEK_API_KEY", "EMPTY"))
        )
    )
    embedding_batch_size: int = field(
        default_factory=lambda: _env_int("EMBEDDING_BATCH_SIZE", "64")
    )
    embedding_timeout_s: float = field(
        default_factory=lambda: _env_float("EMBEDDING_TIMEOUT_S", "30")
    )
    embedding_device: str = field(default_factory=lambda: os.getenv("EMBEDDING_DEVICE", "cpu"))
    # Supported: "cpu" | "cuda" | "mps" (sentence_transformers only)

    # ===== LLM Configuration =====
    llm_base_url: str = field(
        default_factory=lambda: os.getenv("LLM_BASE_URL", "https://api.deepseek.com/v1")
    )
    llm_api_key: str = field(
        default_factory=lambda: os.getenv("LLM_API_KEY", os.getenv("DEEPSEEK_API_KEY", "EMPTY"))
    )
    llm_model: str = field(default_factory=lambda: os.getenv("LLM_MODEL", "deepseek-chat"))
    llm_timeout_s: float = field(default_factory=lambda: _env_float("LLM_TIMEOUT_S", "60"))
    llm_temperature: float = field(default_factory=lambda: _env_float("LLM_TEMPERATURE", "0.7"))
    llm_max_tokens: int = field(default_factory=lambda: _env_int("LLM_MAX_TOKENS", "1000"))

    # ===== Chunking / Retrieval =====
    chunk_strategy: str = field(
        default_factory=lambda: os.getenv("CHUNK_STRATEGY", "recursive").lower()
    )
    chunk_size: int = field(default_factory=lambda: _env_int("CHUNK_SIZE", "512"))
    chunk_overlap: int = field(default_factory=lambda: _env_int("CHUNK_OVERLAP", "50"))
    retrieval_top_k: int = field(default_factory=lambda: _env_int("RETRIEVAL_TOP_K", "5"))
    retrieval_threshold: float = field(
        default_factory=lambda: _env_float("RETRIEVAL_THRESHOLD", "0.7")
    )

    # ===== HTTP =====
    http_host: str = field(default_factory=lambda: os.getenv("HTTP_HOST", "0.0.0.0"))
    http_port: int = field(default_factory=lambda: _env_int("PORT", "3000"))

    def validate(self) -> "AppSettings":
        """Fail fast on settings the service cannot run with."""
        if self.vector_backend not in VECTOR_BACKENDS:
            raise ConfigurationError(
                f"VECTOR_BACKEND must be one of {VECTOR_BACKENDS}, got '{self.vector_backend}'"
            )
        if self.embedding_backend not in EMBEDDING_BACKENDS:
            raise ConfigurationError(
                f"EMBEDDING_BACKEND must be one of {EMBEDDING_BACKENDS}, "
                f"got '{self.embedding_backend}'"
            )
        if self.embedding_dimension <= 0:
            raise ConfigurationError("EMBEDDING_DIMENSION must be a positive integer")
        if not self.index_name:
            raise ConfigurationError("VECTOR_INDEX must not be empty")
        if self.chunk_strategy not in STRATEGIES:
            raise ConfigurationError(
                f"CHUNK_STRATEGY must be one of {STRATEGIES}, got '{self.chunk_strategy}'"
            )
        if not 0 <= self.chunk_overlap < self.chunk_size:
            raise ConfigurationError("CHUNK_OVERLAP must be >= 0 and smaller than CHUNK_SIZE")
        if self.retrieval_top_k <= 0:
            raise ConfigurationError("RETRIEVAL_TOP_K must be > 0")
        return self
