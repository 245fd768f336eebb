from __future__ import annotations

import itertools
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import pytest

from docs_qa.models import Document
from docs_qa.rate_limit import RateLimiter, reset_rate_limiter
from docs_qa.workflow import set_orchestrator


# ---------------------------------------------------------------------------
# Fake Gemini client
# ---------------------------------------------------------------------------


@dataclass
class FakeEmbedding:
    values: list[float]


@dataclass
class FakeEmbedResult:
    embeddings: list[FakeEmbedding]


@dataclass
class FakeGenerateResult:
    text: str | None


def _constant_vector(text: str) -> list[float]:
    return [1.0, 0.0, 0.0]


class FakeModels:
    """Records calls; embeddings come from `embed_fn`, answers from `answer`."""

    def __init__(self) -> None:
        self.embed_calls: list[dict[str, Any]] = []
        self.generate_calls: list[dict[str, Any]] = []
        self.embed_fn: Callable[[str], list[float]] = _constant_vector
        self.answer: str | None = "Generated answer"
        self.embed_error: Exception | None = None
        self.generate_error: Exception | None = None

    async def embed_content(
        self, *, model: str, contents: list[str], config: dict
    ) -> FakeEmbedResult:
        self.embed_calls.append({"model": model, "contents": contents, "config": config})
        if self.embed_error is not None:
            raise self.embed_error
        return FakeEmbedResult(
            embeddings=[FakeEmbedding(values=list(self.embed_fn(text))) for text in contents]
        )

    async def generate_content(
        self, *, model: str, contents: str, config: dict
    ) -> FakeGenerateResult:
        self.generate_calls.append({"model": model, "contents": contents, "config": config})
        if self.generate_error is not None:
            raise self.generate_error
        return FakeGenerateResult(text=self.answer)


class FakeAio:
    def __init__(self, models: FakeModels) -> None:
        self.models = models


class FakeGenAIClient:
    def __init__(self) -> None:
        self.models = FakeModels()
        self.aio = FakeAio(self.models)

    @property
    def call_count(self) -> int:
        return len(self.models.embed_calls) + len(self.models.generate_calls)


# ---------------------------------------------------------------------------
# Fake clock
# ---------------------------------------------------------------------------


class FakeClock:
    """Monotonic clock that only moves when told to, or when slept on."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch) -> None:
    for name in (
        "GEMINI_API_KEY",
        "GOOGLE_API_KEY",
        "DOCS_QA_EMBEDDING_MODEL",
        "DOCS_QA_EMBEDDING_DIM",
        "DOCS_QA_GENERATION_MODEL",
        "DOCS_QA_MAX_REQUESTS_PER_MINUTE",
        "DOCS_QA_USER",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_rate_limiter()
    set_orchestrator(None)
    yield
    reset_rate_limiter()
    set_orchestrator(None)


@pytest.fixture()
def fake_client() -> FakeGenAIClient:
    return FakeGenAIClient()


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def rate_limiter() -> RateLimiter:
    """A generous limiter so tests never wait."""
    return RateLimiter(1000)


@pytest.fixture()
def make_document() -> Callable[..., Document]:
    counter = itertools.count(1)
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _make(content: str, name: str | None = None, **overrides: Any) -> Document:
        index = next(counter)
        fields: dict[str, Any] = {
            "id": f"doc_{index}",
            "user_id": "local",
            "name": name or f"document_{index}.txt",
            "content": content,
            "upload_date": base + timedelta(minutes=index),
            "size_bytes": len(content.encode("utf-8")),
        }
        fields.update(overrides)
        return Document(**fields)

    return _make
