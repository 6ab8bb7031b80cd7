import sys
import types
from types import SimpleNamespace

import pytest

from kb_rag.application.ports.llm_port import ChatMessage
from kb_rag.domain.errors import EmbeddingError, LLMError
from kb_rag.infrastructure.embeddings.openai_embedding_adapter import OpenAIEmbeddingAdapter
from kb_rag.infrastructure.llm.openai_chat_adapter import OpenAIChatAdapter


class APITimeoutError(Exception):
    pass


class FakeOpenAI:
    """Stand-in for openai.OpenAI recording constructor and request arguments."""

    last: "FakeOpenAI | None" = None
    error: Exception | None = None

    def __init__(self, base_url, api_key, timeout):
        self.kwargs = {"base_url": base_url, "api_key": api_key, "timeout": timeout}
        self.requests = []
        FakeOpenAI.last = self
        self.embeddings = SimpleNamespace(create=self._embed)
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._complete))

    def _embed(self, model, input):
        self.requests.append({"model": model, "input": input})
        if FakeOpenAI.error:
            raise FakeOpenAI.error
        # absichtlich in umgekehrter Reihenfolge
        data = [
            SimpleNamespace(index=i, embedding=[float(len(t)), 1.0]) for i, t in enumerate(input)
        ]
        return SimpleNamespace(data=list(reversed(data)))

    def _complete(self, model, messages, temperature, max_tokens):
        self.requests.append(
            {
                "model": model,
                "messages": messages,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        if FakeOpenAI.error:
            raise FakeOpenAI.error
        return SimpleNamespace(
            choices=[
                SimpleNamespace(message=SimpleNamespace(content="pong"), finish_reason="stop")
            ],
            usage=SimpleNamespace(total_tokens=12),
        )


@pytest.fixture(autouse=True)
def fake_openai(monkeypatch):
    FakeOpenAI.last = None
    FakeOpenAI.error = None
    module = types.ModuleType("openai")
    module.OpenAI = FakeOpenAI
    monkeypatch.setitem(sys.modules, "openai", module)
    return module


class TestOpenAIEmbeddingAdapter:
    def test_orders_by_index_and_passes_timeout(self):
        adapter = OpenAIEmbeddingAdapter(
            base_url="https://api.deepseek.com/v1", api_key="k", model="emb", timeout_s=3.0
        )
        vectors = adapter.embed_texts(["a", "bbb"])

        assert vectors == [[1.0, 1.0], [3.0, 1.0]]
        assert FakeOpenAI.last.kwargs == {
            "base_url": "https://api.deepseek.com/v1",
            "api_key": "k",
            "timeout": 3.0,
        }
        assert FakeOpenAI.last.requests == [{"model": "emb", "input": ["a", "bbb"]}]

    def test_empty_input_skips_the_api(self):
        assert OpenAIEmbeddingAdapter(base_url="http://x").embed_texts([]) == []
        assert FakeOpenAI.last is None

    def test_timeout_is_flagged(self):
        FakeOpenAI.error = APITimeoutError("Request timed out.")
        with pytest.raises(EmbeddingError) as exc:
            OpenAIEmbeddingAdapter(base_url="http://x").embed_texts(["a"])
        assert exc.value.timed_out is True


class TestOpenAIChatAdapter:
    def test_chat_maps_messages_and_usage(self):
        adapter = OpenAIChatAdapter(base_url="http://llm/v1", model="deepseek-chat", timeout_s=9)
        resp = adapter.chat(
            [ChatMessage(role="system", content="s"), ChatMessage(role="user", content="ping")],
            temperature=0.1,
            max_tokens=20,
        )

        assert resp.text == "pong"
        assert resp.usage_tokens == 12
        assert FakeOpenAI.last.kwargs["timeout"] == 9
        assert FakeOpenAI.last.requests == [
            {
                "model": "deepseek-chat",
                "messages": [
                    {"role": "system", "content": "s"},
                    {"role": "user", "content": "ping"},
                ],
                "temperature": 0.1,
                "max_tokens": 20,
            }
        ]

    def test_provider_failure_is_llm_error(self):
        FakeOpenAI.error = ConnectionError("refused")
        with pytest.raises(LLMError) as exc:
            OpenAIChatAdapter(base_url="http://llm/v1").chat([ChatMessage("user", "hi")])
        assert exc.value.timed_out is False
        assert "refused" in str(exc.value)
