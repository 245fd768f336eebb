from typing import Annotated, Any

from workflows import Context, Workflow, step
from workflows.events import Event, StartEvent, StopEvent
from workflows.resource import Resource

from .errors import InvalidQuery
from .models import Document, SearchResponse
from .search import RetrievalOutcome, SearchOrchestrator, validate_query

_ORCHESTRATOR: SearchOrchestrator | None = None


class AskEvent(StartEvent):
    query: str
    documents: list[Document]
    k: int = 3
    use_ai: bool = True


class RetrievalEvent(Event):
    """Streamed once the retrieval strategies have run."""

    method: str
    result_count: int
    error: str | None = None


class RetrievedEvent(Event):
    query: str
    documents: list[Document]
    use_ai: bool
    outcome: Any


class AnswerEndEvent(StopEvent):
    response: SearchResponse | None = None
    error: str | None = None


def get_orchestrator(*args, **kwargs) -> SearchOrchestrator:
    global _ORCHESTRATOR
    if _ORCHESTRATOR is None:
        _ORCHESTRATOR = SearchOrchestrator()
    return _ORCHESTRATOR


def set_orchestrator(orchestrator: SearchOrchestrator | None) -> None:
    global _ORCHESTRATOR
    _ORCHESTRATOR = orchestrator


class QuestionWorkflow(Workflow):
    @step
    async def retrieve(
        self,
        ev: AskEvent,
        ctx: Context,
        orchestrator: Annotated[SearchOrchestrator, Resource(get_orchestrator, cache=False)],
    ) -> RetrievedEvent | AnswerEndEvent:
        try:
            query = validate_query(ev.query)
        except InvalidQuery as exc:
            return AnswerEndEvent(error=str(exc))
        if not ev.documents:
            return AnswerEndEvent(response=orchestrator.no_documents_response(query))

        outcome = await orchestrator.retrieve(query, ev.documents, k=ev.k, use_ai=ev.use_ai)
        ctx.write_event_to_stream(
            RetrievalEvent(
                method=outcome.method,
                result_count=len(outcome.results),
                error=outcome.error,
            )
        )
        return RetrievedEvent(
            query=query, documents=ev.documents, use_ai=ev.use_ai, outcome=outcome
        )

    @step
    async def synthesize(
        self,
        ev: RetrievedEvent,
        orchestrator: Annotated[SearchOrchestrator, Resource(get_orchestrator, cache=False)],
    ) -> AnswerEndEvent:
        outcome: RetrievalOutcome = ev.outcome
        ai_answer = await orchestrator.answer(ev.query, outcome, use_ai=ev.use_ai)
        response = orchestrator.build_response(
            ev.query, ev.documents, outcome, ai_answer, use_ai=ev.use_ai
        )
        return AnswerEndEvent(response=response)


# Rate-limit waits can add up to a minute per capability call.
workflow = QuestionWorkflow(timeout=600)
