from __future__ import annotations

import threading
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from kb_rag.application.ports.embedding_port import EmbeddingPort
from kb_rag.domain.errors import EmbeddingError

# Module attribute so tests can swap in a fake model class
SentenceTransformer: Any | None
try:  # pragma: no cover - exercised via tests with monkeypatch
    from sentence_transformers import SentenceTransformer
except Exception:  # noqa: BLE001
    SentenceTransformer = None


@dataclass
class HFEmbeddingAdapter(EmbeddingPort):
    """Local Sentence-Transformers embeddings, L2-normalized.

    The model loads on first use; batching across calls is left to
    ``EmbeddingClient``, ``encode_batch_size`` only bounds a single forward pass.
    """

    model_name: str = "BAAI/bge-m3"  # 1024-d
    device: str = "cpu"  # "cuda" | "mps" when available
    local_files_only: bool = False  # offline deployments
    encode_batch_size: int = 32
    _model: Any | None = field(default=None, init=False, repr=False)
    _load_lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def _load(self) -> Any:
        with self._load_lock:
            if self._model is None:
                if SentenceTransformer is None:
                    raise EmbeddingError("sentence-transformers not installed.")
                try:
                    self._model = SentenceTransformer(
                        self.model_name,
                        device=self.device,
                        local_files_only=self.local_files_only,
                    )
                except Exception as ex:  # noqa: BLE001
                    raise EmbeddingError(
                        f"cannot load model '{self.model_name}': {ex}"
                    ) from ex
            return self._model

    def embed_texts(self, texts: Sequence[str]) -> list[list[float]]:
        if not texts:
            return []
        model = self._load()
        try:
            encoded = model.encode(
                list(texts),
                batch_size=self.encode_batch_size,
                normalize_embeddings=True,
                convert_to_numpy=True,
                show_progress_bar=False,
            )
        except Exception as ex:  # noqa: BLE001
            raise EmbeddingError(f"encode with '{self.model_name}' failed: {ex}") from ex
        return [[float(x) for x in row] for row in encoded]
