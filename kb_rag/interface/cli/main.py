"""Command line entry point: index setup, ingestion, queries and the HTTP server."""

import argparse
import json
import sys
from pathlib import Path
from typing import Any

import uvicorn

from kb_rag.application.rag_service import RAGService
from kb_rag.config.composition import build_rag_service, build_tool_registry
from kb_rag.config.logging_config import configure_logging
from kb_rag.config.settings import AppSettings
from kb_rag.domain.errors import DomainError, ValidationError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kb-rag", description="RAG knowledge base service")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-index", help="Create the vector index (idempotent)")

    ingest = sub.add_parser("ingest", help="Add a text file to the knowledge base")
    ingest.add_argument("--path", required=True, help="UTF-8 text file")
    ingest.add_argument("--metadata", default=None, help="JSON object stored with every chunk")

    query = sub.add_parser("query", help="Ask a question")
    query.add_argument("--question", required=True)

    chat = sub.add_parser("chat", help="Talk to the LLM without retrieval")
    chat.add_argument("--message", required=True)
    chat.add_argument("--system", default=None, help="System prompt override")

    sub.add_parser("tools", help="List the registered tools")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    return parser


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _read_document(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as ex:
        raise ValidationError(f"cannot read '{path}': {ex}") from ex


def _parse_metadata(raw: str | None) -> dict[str, Any]:
    if raw is None:
        return {}
    try:
        metadata = json.loads(raw)
    except json.JSONDecodeError as ex:
        raise ValidationError(f"--metadata is not valid JSON: {ex}") from ex
    if not isinstance(metadata, dict):
        raise ValidationError("--metadata must be a JSON object")
    return metadata


def _run(args: argparse.Namespace, settings: AppSettings, service: RAGService) -> None:
    if args.command == "serve":
        from kb_rag.interface.http.api import create_app

        app = create_app(service, build_tool_registry(service))
        uvicorn.run(
            app,
            host=args.host or settings.http_host,
            port=args.port or settings.http_port,
            log_level=settings.log_level.lower(),
        )
        return

    if args.command == "tools":
        _print_json(build_tool_registry(service).list())
        return

    service.initialize()

    if args.command == "init-index":
        print(f"Index '{service.index_name}' ready (dimension={service.dimension})")
    elif args.command == "ingest":
        content = _read_document(args.path)
        metadata = {"source": Path(args.path).name, **_parse_metadata(args.metadata)}
        _print_json(service.add_document(content, metadata).to_dict())
    elif args.command == "query":
        result = service.query(args.question)
        print("\n" + "=" * 80)
        print("ANSWER:")
        print("=" * 80)
        print(result.answer)
        print("\n" + "=" * 80)
        print("SOURCES:")
        print("=" * 80)
        for i, src in enumerate(result.sources, 1):
            origin = src.metadata.get("source") or src.metadata.get("documentId", "?")
            print(f"[{i}] {origin} (similarity={src.similarity:.3f})")
        print(f"\n{result.model}, {result.processing_time_ms} ms")
    elif args.command == "chat":
        print(service.chat(args.message, args.system).response)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = AppSettings().validate()
        configure_logging(settings.log_level)
        service = build_rag_service(settings)
        _run(args, settings, service)
    except DomainError as err:
        print(f"[ERROR] {type(err).__name__}: {err}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
