"""HTTP API for the RAG service and its tools.

Konsumierbare API ohne Business-Logik; pure Delegation an RAGService und
ToolRegistry. Endpoints are plain ``def`` so FastAPI runs the blocking
use cases in its thread pool.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

try:
    from fastapi import Body, FastAPI, Request
    from fastapi.exceptions import RequestValidationError
    from fastapi.middleware.cors import CORSMiddleware
    from fastapi.responses import JSONResponse
    from pydantic import BaseModel
except ImportError as err:
    raise ImportError("FastAPI not installed. Install with: pip install kb-rag") from err

from kb_rag.application.rag_service import RAGService
from kb_rag.application.tools.protocol import dispatch_protocol_call
from kb_rag.application.tools.registry import ToolRegistry
from kb_rag.config.composition import build_rag_service, build_tool_registry
from kb_rag.config.logging_config import get_logger
from kb_rag.config.settings import AppSettings
from kb_rag.domain.errors import (
    DomainError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)

logger = get_logger(__name__)


# Pydantic models for request validation
class QueryRequestModel(BaseModel):
    """Request model for /query."""

    question: str


class DocumentRequestModel(BaseModel):
    """Request model for /documents."""

    content: str
    metadata: dict[str, Any] | None = None


class ChatRequestModel(BaseModel):
    """Request model for /chat."""

    message: str
    system: str | None = None


class ProtocolCallModel(BaseModel):
    """Request model for /mcp/call (``tools/list`` or ``tools/call``)."""

    method: str
    params: dict[str, Any] | None = None


def status_for(ex: DomainError) -> int:
    """Map an error kind to its HTTP status code."""
    if isinstance(ex, ValidationError):
        return 400
    if isinstance(ex, NotFoundError):
        return 404
    if isinstance(ex, ExternalServiceError):
        return 504 if ex.timed_out else 502
    # ConfigurationError and any other kind
    return 500


def _error_response(status: int, error: str, details: Any) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error": error, "details": details})


def create_app(
    service: RAGService | None = None,
    registry: ToolRegistry | None = None,
    settings: AppSettings | None = None,
) -> FastAPI:
    """Build the FastAPI app around an explicitly constructed service.

    Args:
        service: RAG service (default: wired from settings)
        registry: Tool registry (default: the knowledge tools over ``service``)
        settings: Settings used only when ``service`` is not given

    The index is created on startup via ``service.initialize()``.
    """
    if service is None:
        service = build_rag_service(settings)
    if registry is None:
        registry = build_tool_registry(service)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.service.initialize()
        logger.info("RAG service ready: %s", app.state.service.service_info())
        yield

    app = FastAPI(
        title="kb-rag",
        version=str(service.info.get("version", "0.1.0")),
        lifespan=lifespan,
    )
    app.state.service = service
    app.state.registry = registry

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, ex: DomainError) -> JSONResponse:
        status = status_for(ex)
        if status >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, ex)
        else:
            logger.info("%s %s rejected: %s", request.method, request.url.path, ex)
        return _error_response(status, type(ex).__name__, str(ex))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, ex: RequestValidationError
    ) -> JSONResponse:
        details = "; ".join(
            f"{'.'.join(str(p) for p in e.get('loc', ()))}: {e.get('msg', '')}"
            for e in ex.errors()
        )
        return _error_response(400, "ValidationError", details)

    @app.get("/health")
    def health() -> dict[str, Any]:
        """Health check with the static service description."""
        info = service.service_info()
        return {
            "status": "healthy",
            "service": info.get("service", "kb-rag"),
            "version": info.get("version"),
            "timestamp": service.clock.now().isoformat(),
            "model": info.get("model"),
            "embedding": info.get("embedding"),
            "vectorDb": info.get("vectorDb"),
        }

    @app.post("/query")
    def query(req: QueryRequestModel) -> dict[str, Any]:
        """Answer a question from the knowledge base.

        Example:
            POST /query
            {"question": "What is RAG?"}
        """
        return service.query(req.question).to_dict()

    @app.post("/documents")
    def add_document(req: DocumentRequestModel) -> dict[str, Any]:
        """Chunk, embed and index one document."""
        return service.add_document(req.content, req.metadata).to_dict()

    @app.post("/chat")
    def chat(req: ChatRequestModel) -> dict[str, Any]:
        return service.chat(req.message, req.system).to_dict()

    @app.get("/tools")
    def list_tools() -> dict[str, Any]:
        return {"tools": registry.list()}

    @app.post("/tools/{tool_name}")
    def call_tool(
        tool_name: str, args: dict[str, Any] | None = Body(default=None)
    ) -> dict[str, Any]:
        """Invoke a named tool; the request body holds its arguments."""
        return {"result": registry.invoke(tool_name, args or {})}

    @app.post("/mcp/call")
    def protocol_call(req: ProtocolCallModel) -> Any:
        """MCP-style ``tools/list`` / ``tools/call`` dispatch."""
        return dispatch_protocol_call(registry, req.method, req.params)

    @app.get("/info")
    def info() -> dict[str, Any]:
        return service.service_info()

    return app
