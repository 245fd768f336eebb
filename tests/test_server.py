"""Tests for the REST endpoints."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from docs_qa.embeddings import EmbeddingProvider
from docs_qa.generation import GenerationProvider
from docs_qa.search import SearchOrchestrator
from docs_qa.server import app
from docs_qa.workflow import set_orchestrator

REFUND_TEXT = "The refund policy allows returns within thirty days of purchase. " * 3


@pytest.fixture()
def db_path(tmp_path: Path, monkeypatch) -> str:
    path = str(tmp_path / "server.duckdb")
    monkeypatch.setenv("DOCS_QA_DB_PATH", path)
    return path


@pytest.fixture()
def client(db_path, fake_client, rate_limiter) -> TestClient:
    fake_client.models.answer = "Returns are accepted for thirty days."
    set_orchestrator(
        SearchOrchestrator(
            embedding_provider=EmbeddingProvider(
                client=fake_client, dim=3, rate_limiter=rate_limiter
            ),
            generation_provider=GenerationProvider(client=fake_client, rate_limiter=rate_limiter),
            rate_limiter=rate_limiter,
        )
    )
    return TestClient(app)


@pytest.fixture()
def offline_client(db_path, rate_limiter) -> TestClient:
    set_orchestrator(SearchOrchestrator(rate_limiter=rate_limiter))
    return TestClient(app)


def _upload(client: TestClient, *, user: str = "alice", content: str = REFUND_TEXT) -> dict:
    response = client.post(
        "/api/documents",
        json={"name": "refunds.txt", "content": content},
        headers={"X-User-Id": user},
    )
    assert response.status_code == 201
    return response.json()


def test_upload_then_ask_uses_semantic_search(client: TestClient) -> None:
    uploaded = _upload(client)
    assert uploaded["ai_ready"] is True
    assert uploaded["embeddings_created"] == 1

    response = client.post(
        "/api/ask", json={"query": "refund policy"}, headers={"X-User-Id": "alice"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["search_method"] == "semantic"
    assert data["ai_answer"] == "Returns are accepted for thirty days."
    assert data["answers"][0]["document_id"] == uploaded["id"]
    assert data["answers"][0]["confidence"] == 100


def test_upload_rejects_empty_content(client: TestClient) -> None:
    response = client.post("/api/documents", json={"name": "blank.txt", "content": "  "})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "UPLOAD_FAILED"


def test_ask_rejects_short_query(client: TestClient) -> None:
    response = client.post("/api/ask", json={"query": "a"})

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "FIELD_REQUIRED"
    assert error["field"] == "query"


def test_ask_without_documents(client: TestClient) -> None:
    response = client.post("/api/ask", json={"query": "refund policy"})

    assert response.status_code == 200
    data = response.json()
    assert data["search_method"] == "no_documents"
    assert data["answers"] == []


def test_documents_are_scoped_per_user(client: TestClient) -> None:
    uploaded = _upload(client, user="alice")

    assert client.get("/api/documents", headers={"X-User-Id": "bob"}).json()["total"] == 0
    assert client.get(f"/api/documents/{uploaded['id']}", headers={"X-User-Id": "bob"}).status_code == 404

    listing = client.get("/api/documents", headers={"X-User-Id": "alice"}).json()
    assert listing["total"] == 1
    assert listing["items"][0]["filename"] == "refunds.txt"
    assert listing["next_offset"] is None


def test_get_and_delete_document(client: TestClient) -> None:
    uploaded = _upload(client)
    headers = {"X-User-Id": "alice"}

    fetched = client.get(f"/api/documents/{uploaded['id']}", headers=headers)
    assert fetched.status_code == 200
    assert fetched.json()["content"] == REFUND_TEXT

    assert client.delete(f"/api/documents/{uploaded['id']}", headers=headers).status_code == 200
    missing = client.delete(f"/api/documents/{uploaded['id']}", headers=headers)
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "NOT_FOUND"


def test_keyword_only_ask_when_ai_unavailable(offline_client: TestClient) -> None:
    _upload(offline_client)

    response = offline_client.post(
        "/api/ask",
        json={"query": "refund policy", "use_ai": False},
        headers={"X-User-Id": "alice"},
    )

    data = response.json()
    assert data["search_method"] == "keyword"
    assert data["search_type"] == "keyword"
    assert data["ai_enabled"] is False


def test_health_reports_active_gemini(client: TestClient) -> None:
    data = client.get("/api/health").json()

    assert data["status"] == "OK"
    assert data["services"]["gemini_api"] == "ACTIVE"
    assert data["limits"]["requests_per_minute"] == 1000


def test_gemini_health_requires_setup(offline_client: TestClient) -> None:
    response = offline_client.get("/api/health/gemini")

    assert response.status_code == 400
    assert response.json()["status"] == "SETUP_REQUIRED"


def test_gemini_health_probes_both_models(client: TestClient) -> None:
    data = client.get("/api/health/gemini").json()

    assert data["status"] == "SUCCESS"
    assert data["tests"]["embedding"]["dimensions"] == 3
    assert data["tests"]["generation"]["status"] == "SUCCESS"
