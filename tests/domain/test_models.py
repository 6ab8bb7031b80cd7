import uuid
from datetime import UTC, datetime

import pytest

from kb_rag.domain.errors import ConfigurationError
from kb_rag.domain.models import (
    Document,
    SearchResult,
    ensure_dimension,
    new_document_id,
    record_id,
)


def test_document_is_immutable():
    created = datetime(2024, 1, 1, tzinfo=UTC)
    doc = Document(id="doc_1", content="x", metadata={}, created_at=created)
    with pytest.raises(AttributeError):
        doc.content = "y"  # type: ignore[misc]


def test_document_ids_are_unique_and_prefixed():
    ids = {new_document_id() for _ in range(200)}
    assert len(ids) == 200
    assert all(i.startswith("doc_") for i in ids)


def test_record_id_is_deterministic_uuid():
    a = record_id("doc_1", 0)
    assert a == record_id("doc_1", 0)
    assert a != record_id("doc_1", 1)
    assert a != record_id("doc_2", 0)
    uuid.UUID(a)  # Qdrant akzeptiert nur UUIDs oder Integer


def test_search_result_to_dict():
    r = SearchResult(content="passage", metadata={"documentId": "doc_1"}, similarity=0.9)
    assert r.to_dict() == {
        "content": "passage",
        "metadata": {"documentId": "doc_1"},
        "similarity": 0.9,
    }


def test_ensure_dimension():
    ensure_dimension([0.0] * 3, 3)
    with pytest.raises(ConfigurationError):
        ensure_dimension([0.0] * 2, 3)
