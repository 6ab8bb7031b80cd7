"""Domain errors (typed) for the RAG service.

Every layer raises one of these kinds; the HTTP and tool boundaries map the
kind to a status code and a ``details`` string.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for domain-specific errors."""


class ConfigurationError(DomainError):
    """Fatal misconfiguration (bad settings, dimension mismatch)."""


class ValidationError(DomainError):
    """Caller input is malformed."""


class NotFoundError(DomainError):
    """Unknown tool, index or protocol method."""


class ExternalServiceError(DomainError):
    """An embedding, vector store or LLM call failed or timed out.

    ``timed_out`` keeps the timeout/refusal distinction for observability;
    control flow is the same either way.
    """

    service = "external"

    def __init__(self, detail: str, *, timed_out: bool = False) -> None:
        self.detail = detail
        self.timed_out = timed_out
        prefix = f"{self.service} timed out" if timed_out else f"{self.service} failed"
        super().__init__(f"{prefix}: {detail}")


class EmbeddingError(ExternalServiceError):
    """Embedding backend failed."""

    service = "embedding"


class VectorStoreError(ExternalServiceError):
    """Vector store backend failed."""

    service = "vector store"


class LLMError(ExternalServiceError):
    """LLM backend failed."""

    service = "llm"


def is_timeout(ex: BaseException) -> bool:
    """Best-effort detection of provider timeouts (httpx, openai, grpc, stdlib)."""
    if isinstance(ex, TimeoutError):
        return True
    return any("timeout" in cls.__name__.lower() for cls in type(ex).__mro__)
