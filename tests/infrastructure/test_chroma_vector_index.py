import json
import math

import pytest

import kb_rag.infrastructure.vectorstore.chroma_vector_index as chroma_mod
from kb_rag.domain.errors import ConfigurationError, NotFoundError, VectorStoreError
from kb_rag.domain.models import IndexRecord


class FakeCollection:
    def __init__(self, name, metadata):
        self.name = name
        self.metadata = metadata
        self.rows: dict[str, tuple] = {}

    def upsert(self, ids, embeddings, metadatas, documents):
        for rid, emb, meta, doc in zip(ids, embeddings, metadatas, documents):
            self.rows[rid] = (emb, meta, doc)

    def query(self, query_embeddings, n_results, include):
        q = query_embeddings[0]

        def distance(v):
            dot = sum(a * b for a, b in zip(q, v))
            norms = math.sqrt(sum(a * a for a in q)) * math.sqrt(sum(b * b for b in v))
            return 1.0 - dot / norms

        ranked = sorted(self.rows.values(), key=lambda row: distance(row[0]))[:n_results]
        return {
            "documents": [[row[2] for row in ranked]],
            "metadatas": [[row[1] for row in ranked]],
            "distances": [[distance(row[0]) for row in ranked]],
        }


class FakeClient:
    def __init__(self, path, return_objects=False):
        self.path = path
        self.return_objects = return_objects
        self.collections: dict[str, FakeCollection] = {}

    def list_collections(self):
        if self.return_objects:
            return list(self.collections.values())
        return list(self.collections)

    def get_collection(self, name):
        return self.collections[name]

    def create_collection(self, name, metadata=None):
        self.collections[name] = FakeCollection(name, metadata)
        return self.collections[name]


class FakeChromadb:
    def __init__(self, return_objects=False):
        self.return_objects = return_objects

    def PersistentClient(self, path):  # noqa: N802
        return FakeClient(path, self.return_objects)


@pytest.fixture(params=[False, True], ids=["names", "objects"])
def fake_chroma(request, monkeypatch):
    monkeypatch.setattr(chroma_mod, "chromadb", FakeChromadb(return_objects=request.param))


def test_upsert_and_search_with_cosine_similarity(fake_chroma, tmp_path):
    vs = chroma_mod.ChromaVectorIndex(persist_dir=str(tmp_path / "chroma"))
    vs.create_index("kb", 2)
    vs.upsert(
        "kb",
        [
            IndexRecord(id="a", vector=(1.0, 0.0), text="alpha", metadata={"tags": ["x"]}),
            IndexRecord(id="b", vector=(0.0, 1.0), text="beta", metadata={"n": 1, "gone": None}),
        ],
    )

    hits = vs.search("kb", [1.0, 0.0], top_k=5, threshold=0.0)

    assert [h.content for h in hits] == ["alpha", "beta"]
    assert hits[0].similarity == pytest.approx(1.0)
    assert hits[1].similarity == pytest.approx(0.0)
    # nicht-skalare Metadaten werden als JSON abgelegt, None entfällt
    assert json.loads(hits[0].metadata["tags"]) == ["x"]
    assert hits[1].metadata == {"n": 1}

    assert [h.content for h in vs.search("kb", [1.0, 0.0], top_k=5, threshold=0.5)] == ["alpha"]


def test_dimension_is_kept_in_collection_metadata(fake_chroma, tmp_path):
    vs = chroma_mod.ChromaVectorIndex(persist_dir=str(tmp_path))
    vs.create_index("kb", 1024)
    vs.create_index("kb", 1024)
    with pytest.raises(ConfigurationError):
        vs.create_index("kb", 1536)
    with pytest.raises(ConfigurationError):
        vs.search("kb", [1.0, 0.0])


def test_unknown_index(fake_chroma, tmp_path):
    vs = chroma_mod.ChromaVectorIndex(persist_dir=str(tmp_path))
    with pytest.raises(NotFoundError):
        vs.search("missing", [1.0])


def test_missing_package_is_reported(monkeypatch, tmp_path):
    monkeypatch.setattr(chroma_mod, "chromadb", None)
    with pytest.raises(VectorStoreError):
        chroma_mod.ChromaVectorIndex(persist_dir=str(tmp_path))
