from collections.abc import Sequence
from typing import Protocol, runtime_checkable


@runtime_checkable
class EmbeddingPort(Protocol):
    """Provider adapter: one vector per input text, same order."""

    def embed_texts(self, texts: Sequence[str]) -> list[list[float]]: ...
