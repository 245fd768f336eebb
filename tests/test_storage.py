"""Tests for the DuckDB document store."""

from pathlib import Path

from docs_qa.storage import DuckDBDocumentStore


def test_round_trip_preserves_document(tmp_path: Path, make_document) -> None:
    document = make_document(
        "Stored content for the round trip.",
        embeddings=[[0.1, 0.2], [0.3, 0.4]],
        embedding_model="gemini-embedding-001",
    )

    with DuckDBDocumentStore(str(tmp_path / "docs.duckdb")) as store:
        store.add_document(document)
        loaded = store.get_document(user_id="local", doc_id=document.id)

    assert loaded == document


def test_documents_are_scoped_by_user(tmp_path: Path, make_document) -> None:
    mine = make_document("My private notes about the launch.")
    theirs = make_document("Someone else's notes.", user_id="other")

    with DuckDBDocumentStore(str(tmp_path / "docs.duckdb")) as store:
        store.add_document(mine)
        store.add_document(theirs)

        assert [doc.id for doc in store.find_by_user("local")] == [mine.id]
        assert store.get_document(user_id="local", doc_id=theirs.id) is None
        assert store.delete_document(user_id="local", doc_id=theirs.id) is False


def test_find_by_user_returns_newest_first(tmp_path: Path, make_document) -> None:
    older = make_document("Written first.")
    newer = make_document("Written second.")

    with DuckDBDocumentStore(str(tmp_path / "docs.duckdb")) as store:
        store.add_document(older)
        store.add_document(newer)
        documents = store.find_by_user("local")

    assert [doc.id for doc in documents] == [newer.id, older.id]


def test_list_documents_filters_and_paginates(tmp_path: Path, make_document) -> None:
    documents = [make_document(f"Invoice number {i} for March.") for i in range(3)]
    documents.append(make_document("Meeting minutes.", name="minutes.txt"))

    with DuckDBDocumentStore(str(tmp_path / "docs.duckdb")) as store:
        for document in documents:
            store.add_document(document)

        page, total = store.list_documents(user_id="local", limit=2, offset=0, query="invoice")
        rest, _ = store.list_documents(user_id="local", limit=2, offset=2, query="invoice")
        by_name, name_total = store.list_documents(user_id="local", query="MINUTES")

    assert total == 3
    assert len(page) == 2
    assert len(rest) == 1
    assert name_total == 1
    assert by_name[0].name == "minutes.txt"


def test_delete_document(tmp_path: Path, make_document) -> None:
    document = make_document("Short-lived document.")

    with DuckDBDocumentStore(str(tmp_path / "docs.duckdb")) as store:
        store.add_document(document)
        assert store.delete_document(user_id="local", doc_id=document.id) is True
        assert store.get_document(user_id="local", doc_id=document.id) is None
        assert store.delete_document(user_id="local", doc_id=document.id) is False


def test_store_persists_across_connections(tmp_path: Path, make_document) -> None:
    db_path = str(tmp_path / "docs.duckdb")
    document = make_document("Persisted between sessions.")

    with DuckDBDocumentStore(db_path) as store:
        store.add_document(document)
    with DuckDBDocumentStore(db_path, read_only=True) as store:
        assert store.find_by_user("local")[0].id == document.id
