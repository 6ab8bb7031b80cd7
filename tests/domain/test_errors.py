"""Tests for the domain error taxonomy."""

import socket

import pytest

from kb_rag.domain.errors import (
    ConfigurationError,
    DomainError,
    EmbeddingError,
    ExternalServiceError,
    LLMError,
    NotFoundError,
    ValidationError,
    VectorStoreError,
    is_timeout,
)


@pytest.mark.parametrize(
    "err_cls", [ConfigurationError, ValidationError, NotFoundError, ExternalServiceError]
)
def test_every_kind_is_domain_error(err_cls):
    """All error kinds share the DomainError base."""
    err = err_cls("boom")
    assert isinstance(err, DomainError)


@pytest.mark.parametrize(
    "err_cls,service",
    [(EmbeddingError, "embedding"), (VectorStoreError, "vector store"), (LLMError, "llm")],
)
def test_external_errors_name_their_service(err_cls, service):
    err = err_cls("connection refused")
    assert isinstance(err, ExternalServiceError)
    assert err.detail == "connection refused"
    assert err.timed_out is False
    assert str(err) == f"{service} failed: connection refused"


def test_timed_out_is_kept_in_message():
    """The timeout/refusal distinction survives into the message."""
    err = LLMError("read timeout after 60s", timed_out=True)
    assert err.timed_out is True
    assert str(err).startswith("llm timed out:")


def test_is_timeout_detects_stdlib_and_named_timeouts():
    class ReadTimeout(Exception):
        pass

    class APITimeoutError(ReadTimeout):
        pass

    assert is_timeout(TimeoutError())
    assert is_timeout(socket.timeout())
    assert is_timeout(ReadTimeout())
    assert is_timeout(APITimeoutError())
    assert not is_timeout(ConnectionError("refused"))
