from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from kb_rag.domain.models import IndexRecord, SearchResult

__all__ = ["IndexRecord", "SearchResult", "VectorIndexPort"]


@runtime_checkable
class VectorIndexPort(Protocol):
    def create_index(self, name: str, dimension: int) -> None:
        """Create the index; a no-op when it already exists with ``dimension``.

        Raises ConfigurationError when it exists with a different dimension.
        """
        ...

    def upsert(self, index_name: str, records: Sequence[IndexRecord]) -> None: ...

    def search(
        self,
        index_name: str,
        query_vector: Sequence[float],
        top_k: int = 5,
        threshold: float = 0.0,
    ) -> list[SearchResult]:
        """Best matches first; nothing below ``threshold``; at most ``top_k``."""
        ...
