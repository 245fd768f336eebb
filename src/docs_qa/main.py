import asyncio
from typing import Annotated, List, Optional

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table
from typer import Argument, Exit, Option, Typer

from .config import configure_logging, resolve_db_path, resolve_default_user
from .health import health_report
from .indexing import DocumentIngestor
from .models import SearchResponse
from .storage import DuckDBDocumentStore
from .workflow import AnswerEndEvent, AskEvent, RetrievalEvent, get_orchestrator, workflow

app = Typer(help="Ask questions about your documents.")
console = Console()

DbPathOption = Annotated[
    Optional[str], Option("--db-path", help="DuckDB file holding your documents.")
]
UserOption = Annotated[
    Optional[str], Option("--user", "-u", help="User whose documents to use.")
]


@app.callback()
def main(
    verbose: Annotated[bool, Option("--verbose", "-v", help="Show info logs.")] = False,
) -> None:
    configure_logging("INFO" if verbose else None)


def _open_store(db_path: str | None) -> DuckDBDocumentStore:
    return DuckDBDocumentStore(resolve_db_path(db_path))


def render_response(response: SearchResponse) -> None:
    console.print(
        Panel(
            Markdown(response.ai_answer),
            title_align="left",
            title=f"Answer ({response.search_method})",
            border_style="bold green",
        )
    )
    if not response.answers:
        return
    table = Table(title=f"{response.total_found} relevant documents")
    table.add_column("Document")
    table.add_column("Confidence", justify="right")
    table.add_column("Page", justify="right")
    table.add_column("Snippet")
    for answer in response.answers:
        table.add_row(
            answer.document_name,
            f"{answer.confidence}%",
            str(answer.page_reference),
            answer.content_snippet,
        )
    console.print(table)


async def run_question(
    query: str,
    *,
    user: str,
    db_path: str | None = None,
    k: int = 3,
    use_ai: bool = True,
) -> AnswerEndEvent:
    with _open_store(db_path) as store:
        documents = store.find_by_user(user)

    handler = workflow.run(
        start_event=AskEvent(query=query, documents=documents, k=k, use_ai=use_ai)
    )
    with console.status(status="Searching your documents...") as status:
        async for event in handler.stream_events():
            if isinstance(event, RetrievalEvent):
                content = f"Retrieved **{event.result_count}** passages using `{event.method}`."
                if event.error:
                    content += f"\n\nSemantic search failed: {event.error}"
                console.print(
                    Panel(
                        Markdown(content),
                        title_align="left",
                        title="Retrieval",
                        border_style="bold yellow",
                    )
                )
                status.update("Writing the answer...")
        result = await handler
    return result


@app.command()
def ask(
    query: Annotated[str, Option("--query", "-q", help="Question to answer.")],
    k: Annotated[int, Option("--k", "-k", min=1, help="Number of passages to keep.")] = 3,
    no_ai: Annotated[bool, Option("--no-ai", help="Keyword search only.")] = False,
    user: UserOption = None,
    db_path: DbPathOption = None,
) -> None:
    """Answer a question from your stored documents."""
    result = asyncio.run(
        run_question(
            query,
            user=resolve_default_user(user),
            db_path=db_path,
            k=k,
            use_ai=not no_ai,
        )
    )
    if result.error is not None or result.response is None:
        console.print(f"[bold red]{result.error or 'No answer produced'}[/]")
        raise Exit(code=1)
    render_response(result.response)


async def ingest_files(ingestor: DocumentIngestor, *, user_id: str, files: list[str]) -> bool:
    """Store each file; return True when every file was stored."""
    ok = True
    for file_path in files:
        try:
            result = await ingestor.ingest_file(user_id=user_id, path=file_path)
        except ValueError as exc:
            console.print(f"[bold red]{file_path}: {exc}[/]")
            ok = False
            continue
        console.print(
            f"[green]Stored[/] {result.document.name} as {result.document.id} "
            f"({len(result.document.content)} chars, "
            f"{result.embeddings_created} embeddings)"
        )
    return ok


@app.command()
def add(
    files: Annotated[List[str], Argument(help="Text files to store.")],
    user: UserOption = None,
    db_path: DbPathOption = None,
) -> None:
    """Store text documents, embedding their first chunks when Gemini is configured."""
    with _open_store(db_path) as store:
        ingestor = DocumentIngestor(store, embedding_provider=get_orchestrator().embedding_provider)
        ok = asyncio.run(
            ingest_files(ingestor, user_id=resolve_default_user(user), files=files)
        )
    if not ok:
        raise Exit(code=1)


@app.command(name="list")
def list_documents(
    query: Annotated[Optional[str], Option("--query", "-q", help="Filter by text.")] = None,
    limit: Annotated[int, Option("--limit", min=1)] = 20,
    user: UserOption = None,
    db_path: DbPathOption = None,
) -> None:
    """List stored documents."""
    with _open_store(db_path) as store:
        documents, total = store.list_documents(
            user_id=resolve_default_user(user), limit=limit, query=query
        )
    table = Table(title=f"{total} documents")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Uploaded")
    for document in documents:
        table.add_row(
            document.id,
            document.name,
            document.content_type,
            document.upload_date.strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)


@app.command()
def remove(
    doc_id: Annotated[str, Argument(help="Document id to delete.")],
    user: UserOption = None,
    db_path: DbPathOption = None,
) -> None:
    """Delete a stored document."""
    with _open_store(db_path) as store:
        deleted = store.delete_document(user_id=resolve_default_user(user), doc_id=doc_id)
    if not deleted:
        console.print(f"[bold red]Document not found: {doc_id}[/]")
        raise Exit(code=1)
    console.print(f"Deleted {doc_id}")


@app.command()
def health() -> None:
    """Show Gemini availability and rate-limit usage."""
    orchestrator = get_orchestrator()
    report = asyncio.run(
        health_report(
            embedding_provider=orchestrator.embedding_provider,
            generation_provider=orchestrator.generation_provider,
            rate_limiter=orchestrator.generation_provider.rate_limiter,
        )
    )
    console.print_json(data=report)


@app.command()
def serve(
    host: Annotated[str, Option("--host")] = "127.0.0.1",
    port: Annotated[int, Option("--port")] = 8000,
) -> None:
    """Run the HTTP API."""
    from .server import run_server

    run_server(host=host, port=port)
