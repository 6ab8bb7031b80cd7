"""The three tools exposed over the RAG service."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from kb_rag.application.rag_service import RAGService
from kb_rag.application.tools.registry import Tool, ToolRegistry

QUERY_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "question": {"type": "string", "description": "The question to answer"},
    },
    "required": ["question"],
}

ADD_DOCUMENT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "content": {"type": "string", "description": "Document text"},
        "metadata": {"type": "object", "description": "Document metadata"},
    },
    "required": ["content"],
}

CHAT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "message": {"type": "string", "description": "Message to send"},
        "system": {"type": "string", "description": "Optional system prompt"},
    },
    "required": ["message"],
}


def _text_content(text: str, data: Mapping[str, Any]) -> dict[str, Any]:
    return {"content": [{"type": "text", "text": text}], "data": dict(data)}


def build_knowledge_tools(service: RAGService) -> list[Tool]:
    def query_knowledge(args: Mapping[str, Any]) -> dict[str, Any]:
        result = service.query(args["question"])
        text = (
            f"Answer: {result.answer}\n\n"
            f"Processing time: {result.processing_time_ms}ms\n\n"
            f"Sources: {len(result.sources)}\n\n"
            f"Model: {result.model}"
        )
        return _text_content(text, result.to_dict())

    def add_document(args: Mapping[str, Any]) -> dict[str, Any]:
        result = service.add_document(args["content"], args.get("metadata"))
        text = (
            "Document added\n"
            f"ID: {result.id}\n"
            f"Chunks: {result.chunks}\n"
            f"Timestamp: {result.timestamp}"
        )
        return _text_content(text, result.to_dict())

    def chat(args: Mapping[str, Any]) -> dict[str, Any]:
        result = service.chat(args["message"], args.get("system"))
        text = f"Answer: {result.response}\n\nModel: {result.model}\nTimestamp: {result.timestamp}"
        return _text_content(text, result.to_dict())

    return [
        Tool(
            name="query_knowledge",
            description="Answer a question from the knowledge base (retrieval + generation)",
            input_schema=QUERY_SCHEMA,
            handler=query_knowledge,
        ),
        Tool(
            name="add_document",
            description="Add a document to the knowledge base",
            input_schema=ADD_DOCUMENT_SCHEMA,
            handler=add_document,
        ),
        Tool(
            name="chat",
            description="Talk to the language model directly, without retrieval",
            input_schema=CHAT_SCHEMA,
            handler=chat,
        ),
    ]


def build_tool_registry(service: RAGService) -> ToolRegistry:
    registry = ToolRegistry()
    for tool in build_knowledge_tools(service):
        registry.register(tool)
    return registry
