import pytest

from kb_rag.application.embedding_client import EmbeddingClient
from kb_rag.application.use_cases.retrieve_context import RetrieveContext
from kb_rag.domain.errors import ValidationError, VectorStoreError
from kb_rag.domain.models import SearchResult


class FakeEmbedding:
    def __init__(self):
        self.calls = []

    def embed_texts(self, texts):
        self.calls.append(list(texts))
        return [[1.0, 0.0] for _ in texts]


class FakeIndex:
    def __init__(self, results=None, error=None):
        self.results = results or []
        self.error = error
        self.searches = []

    def create_index(self, name, dimension):
        pass

    def upsert(self, index_name, records):
        pass

    def search(self, index_name, query_vector, top_k=5, threshold=0.0):
        self.searches.append((index_name, list(query_vector), top_k, threshold))
        if self.error:
            raise self.error
        return self.results


def _uc(embedding, index):
    return RetrieveContext(
        embedding=EmbeddingClient(port=embedding, dimension=2),
        vector_index=index,
        index_name="kb",
    )


def test_embeds_question_as_single_batch_and_searches():
    hit = SearchResult(content="passage", metadata={}, similarity=0.8)
    emb, idx = FakeEmbedding(), FakeIndex(results=[hit])

    out = _uc(emb, idx).execute("What is RAG?", top_k=3, threshold=0.5)

    assert out == [hit]
    assert emb.calls == [["What is RAG?"]]
    assert idx.searches == [("kb", [1.0, 0.0], 3, 0.5)]


def test_empty_retrieval_is_valid():
    assert _uc(FakeEmbedding(), FakeIndex()).execute("anything") == []


@pytest.mark.parametrize("question", ["", "   "])
def test_blank_question_is_rejected_before_embedding(question):
    emb = FakeEmbedding()
    with pytest.raises(ValidationError):
        _uc(emb, FakeIndex()).execute(question)
    assert emb.calls == []


def test_non_positive_top_k_is_rejected():
    with pytest.raises(ValidationError):
        _uc(FakeEmbedding(), FakeIndex()).execute("q", top_k=0)


def test_search_errors_propagate_unchanged():
    err = VectorStoreError("connection refused")
    with pytest.raises(VectorStoreError) as exc:
        _uc(FakeEmbedding(), FakeIndex(error=err)).execute("q")
    assert exc.value is err
