from collections.abc import Sequence
from dataclasses import dataclass, field
from importlib import import_module
from typing import Any

from kb_rag.application.ports.embedding_port import EmbeddingPort
from kb_rag.domain.errors import EmbeddingError, is_timeout


@dataclass
class OpenAIEmbeddingAdapter(EmbeddingPort):
    """Embeddings from any OpenAI-compatible endpoint (DeepSeek, OpenAI, vLLM)."""

    base_url: str  # e.g. "https://api.deepseek.com/v1"
    api_key: str = "EMPTY"
    model: str = "deepseek-embedding"
    timeout_s: float = 30.0
    _client: Any | None = field(default=None, init=False, repr=False)

    def _get_client(self) -> Any:
        if self._client is None:
            try:
                module = import_module("openai")
            except Exception as ex:  # pragma: no cover
                raise EmbeddingError("openai package not installed") from ex
            self._client = module.OpenAI(
                base_url=self.base_url, api_key=self.api_key, timeout=self.timeout_s
            )
        return self._client

    def embed_texts(self, texts: Sequence[str]) -> list[list[float]]:
        if not texts:
            return []
        client = self._get_client()
        try:
            resp: Any = client.embeddings.create(model=self.model, input=list(texts))
        except Exception as ex:  # noqa: BLE001
            # Translate external errors to domain-specific errors
            raise EmbeddingError(str(ex), timed_out=is_timeout(ex)) from ex
        # the API may return items out of order; ``index`` is authoritative
        items = sorted(resp.data, key=lambda d: d.index)
        return [list(map(float, item.embedding)) for item in items]
