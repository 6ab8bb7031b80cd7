from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from kb_rag.application.ports.llm_port import ChatMessage, LLMPort
from kb_rag.domain.errors import ConfigurationError, DomainError, LLMError, is_timeout

RAG_INSTRUCTIONS = (
    "You are a helpful AI assistant that answers questions based on the provided context.\n"
    "Follow these rules strictly:\n"
    "1. Answer only from the provided context.\n"
    "2. If the context contains no relevant information, say clearly that no relevant "
    "information was found.\n"
    "3. Keep the answer concise and relevant."
)

CHAT_INSTRUCTIONS = "You are a helpful AI assistant capable of friendly and useful conversation."

MAX_TEMPERATURE = 2.0


def build_prompt(question: str, context: Sequence[str]) -> str:
    """Render the user turn: context passages in the given order, then the question."""
    ctx = "\n\n".join(context)
    return f"Context:\n{ctx}\n\nQuestion: {question}\n\nAnswer:"


@dataclass
class GenerateAnswer:
    llm: LLMPort
    system_instructions: str = RAG_INSTRUCTIONS
    chat_instructions: str = CHAT_INSTRUCTIONS
    temperature: float = 0.7
    max_tokens: int = 1000

    def __post_init__(self) -> None:
        if not 0.0 <= self.temperature <= MAX_TEMPERATURE:
            raise ConfigurationError(
                f"temperature must be within [0, {MAX_TEMPERATURE}], got {self.temperature}"
            )
        if self.max_tokens <= 0:
            raise ConfigurationError(f"max_tokens must be > 0, got {self.max_tokens}")

    @property
    def model(self) -> str:
        return self.llm.model

    def execute(
        self,
        question: str,
        context: Sequence[str],
        system_instructions: str | None = None,
    ) -> str:
        """Answer ``question`` grounded on ``context``.

        An empty context still reaches the model; the instructions ask it to
        say that nothing relevant was found.
        """
        messages = [
            ChatMessage(role="system", content=system_instructions or self.system_instructions),
            ChatMessage(role="user", content=build_prompt(question, context)),
        ]
        return self._complete(messages)

    def chat(self, message: str, system_instructions: str | None = None) -> str:
        """Direct dialogue: system instructions and the message, no retrieval."""
        messages = [
            ChatMessage(role="system", content=system_instructions or self.chat_instructions),
            ChatMessage(role="user", content=message),
        ]
        return self._complete(messages)

    def _complete(self, messages: list[ChatMessage]) -> str:
        try:
            response = self.llm.chat(
                messages, temperature=self.temperature, max_tokens=self.max_tokens
            )
        except DomainError:
            raise
        except Exception as ex:  # noqa: BLE001
            raise LLMError(str(ex), timed_out=is_timeout(ex)) from ex
        return response.text
