"""
FastAPI server for docs-qa.

Exposes document management, question answering and health endpoints.
Callers identify themselves with an `X-User-Id` header; no authentication is
performed here.
"""

from fastapi import FastAPI, Header
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .config import DEFAULT_USER, resolve_db_path
from .errors import InvalidQuery
from .health import health_report, probe_capabilities
from .indexing import DocumentIngestor
from .storage import DuckDBDocumentStore
from .workflow import get_orchestrator

app = FastAPI(title="docs-qa", description="Question answering over uploaded documents")


class DocumentCreateRequest(BaseModel):
    """Request model for storing a text document."""

    name: str
    content: str
    content_type: str = "text/plain"


class AskRequest(BaseModel):
    """Request model for questions."""

    query: str
    k: int = 3
    use_ai: bool = True


def _open_store() -> DuckDBDocumentStore:
    return DuckDBDocumentStore(resolve_db_path())


def _error(code: str, message: str, status_code: int, **extra) -> JSONResponse:
    return JSONResponse(
        {"error": {"code": code, "message": message, **extra}}, status_code=status_code
    )


@app.post("/api/documents", status_code=201)
async def create_document(
    request: DocumentCreateRequest,
    x_user_id: str = Header(default=DEFAULT_USER),
):
    """Store a document and precompute embeddings for its first chunks."""
    orchestrator = get_orchestrator()
    store = _open_store()
    try:
        ingestor = DocumentIngestor(store, embedding_provider=orchestrator.embedding_provider)
        result = await ingestor.ingest_text(
            user_id=x_user_id,
            name=request.name,
            content=request.content,
            content_type=request.content_type,
        )
    except ValueError as exc:
        return _error("UPLOAD_FAILED", str(exc), 400)
    except Exception as exc:
        return _error("UPLOAD_FAILED", str(exc), 500)
    finally:
        store.close()

    document = result.document
    return {
        "id": document.id,
        "filename": document.name,
        "size": document.size_bytes,
        "type": document.content_type,
        "uploaded_at": document.upload_date.isoformat(),
        "content_length": len(document.content),
        "embeddings_created": result.embeddings_created,
        "ai_ready": orchestrator.ai_enabled,
    }


@app.get("/api/documents")
async def list_documents(
    limit: int = 10,
    offset: int = 0,
    q: str = "",
    x_user_id: str = Header(default=DEFAULT_USER),
):
    """List a user's documents, newest first."""
    try:
        with _open_store() as store:
            documents, total = store.list_documents(
                user_id=x_user_id, limit=limit, offset=offset, query=q or None
            )
    except Exception as exc:
        return _error("FETCH_FAILED", str(exc), 500)

    next_offset = offset + limit if offset + len(documents) < total else None
    return {
        "items": [
            {
                "id": document.id,
                "filename": document.name,
                "size": document.size_bytes,
                "type": document.content_type,
                "uploaded_at": document.upload_date.isoformat(),
            }
            for document in documents
        ],
        "total": total,
        "next_offset": next_offset,
        "ai_enabled": get_orchestrator().ai_enabled,
    }


@app.get("/api/documents/{doc_id}")
async def get_document(doc_id: str, x_user_id: str = Header(default=DEFAULT_USER)):
    """Return a document's extracted content."""
    with _open_store() as store:
        document = store.get_document(user_id=x_user_id, doc_id=doc_id)
    if document is None:
        return _error("NOT_FOUND", "Document not found", 404)
    return {
        "id": document.id,
        "filename": document.name,
        "type": document.content_type,
        "content": document.content,
        "size": document.size_bytes,
        "uploaded_at": document.upload_date.isoformat(),
    }


@app.delete("/api/documents/{doc_id}")
async def delete_document(doc_id: str, x_user_id: str = Header(default=DEFAULT_USER)):
    """Delete a document."""
    with _open_store() as store:
        deleted = store.delete_document(user_id=x_user_id, doc_id=doc_id)
    if not deleted:
        return _error("NOT_FOUND", "Document not found", 404)
    return {"message": "Document deleted successfully", "id": doc_id}


@app.post("/api/ask")
async def ask_question(request: AskRequest, x_user_id: str = Header(default=DEFAULT_USER)):
    """Answer a question from the caller's documents."""
    orchestrator = get_orchestrator()
    try:
        with _open_store() as store:
            documents = store.find_by_user(x_user_id)
        response = await orchestrator.search(
            request.query, documents, k=max(request.k, 1), use_ai=request.use_ai
        )
    except InvalidQuery as exc:
        return _error("FIELD_REQUIRED", str(exc), 400, field="query")
    except Exception as exc:
        return _error(
            "SEARCH_FAILED",
            "Search service encountered an error.",
            500,
            details=str(exc),
            ai_enabled=orchestrator.ai_enabled,
        )
    return response.model_dump(mode="json")


@app.get("/api/health")
async def health():
    """Report service status and rate-limit usage."""
    orchestrator = get_orchestrator()
    try:
        return await health_report(
            embedding_provider=orchestrator.embedding_provider,
            generation_provider=orchestrator.generation_provider,
            rate_limiter=orchestrator.generation_provider.rate_limiter,
        )
    except Exception as exc:
        return JSONResponse(
            {"status": "ERROR", "message": "Health check failed", "error": str(exc)},
            status_code=500,
        )


@app.get("/api/health/gemini")
async def gemini_health():
    """Probe the embedding and generation models."""
    orchestrator = get_orchestrator()
    if not (
        orchestrator.embedding_provider.is_configured
        and orchestrator.generation_provider.is_configured
    ):
        return JSONResponse(
            {
                "status": "SETUP_REQUIRED",
                "message": "Gemini API is not configured",
                "setup_instructions": {
                    "step1": "Visit https://aistudio.google.com/",
                    "step2": 'Click "Get API key" and create a new key',
                    "step3": "Set GEMINI_API_KEY=your_key_here in the environment",
                    "step4": "Restart the server",
                },
            },
            status_code=400,
        )
    return await probe_capabilities(
        embedding_provider=orchestrator.embedding_provider,
        generation_provider=orchestrator.generation_provider,
    )


def run_server(host: str = "127.0.0.1", port: int = 8000):
    """Run the FastAPI server."""
    import uvicorn

    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
