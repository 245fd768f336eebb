"""
DuckDB storage backend for user documents.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

import duckdb

from ..models import Document

_COLUMNS = (
    "id, user_id, name, content, content_type, upload_date, size_bytes, "
    "embeddings_json, embedding_model"
)


class DuckDBDocumentStore:
    """DuckDB-backed persistence for documents, scoped by user."""

    def __init__(
        self,
        db_path: str,
        *,
        read_only: bool = False,
        initialize: bool = True,
    ) -> None:
        self.db_path = str(Path(db_path).expanduser().resolve())
        self.read_only = read_only
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = duckdb.connect(self.db_path, read_only=read_only)
        if initialize and not read_only:
            self.initialize()

    def close(self) -> None:
        """Close the underlying DuckDB connection."""
        self._conn.close()

    def __enter__(self) -> DuckDBDocumentStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def initialize(self) -> None:
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS documents (
                id VARCHAR PRIMARY KEY,
                user_id VARCHAR NOT NULL,
                name VARCHAR NOT NULL,
                content VARCHAR NOT NULL,
                content_type VARCHAR NOT NULL,
                upload_date VARCHAR NOT NULL,
                size_bytes BIGINT NOT NULL DEFAULT 0,
                embeddings_json VARCHAR NOT NULL DEFAULT '[]',
                embedding_model VARCHAR
            );
            """
        )

    def add_document(self, document: Document) -> None:
        self._conn.execute(
            f"INSERT INTO documents ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            [
                document.id,
                document.user_id,
                document.name,
                document.content,
                document.content_type,
                document.upload_date.isoformat(),
                document.size_bytes,
                json.dumps(document.embeddings),
                document.embedding_model,
            ],
        )

    def find_by_user(self, user_id: str) -> list[Document]:
        rows = self._conn.execute(
            f"""
            SELECT {_COLUMNS}
            FROM documents
            WHERE user_id = ?
            ORDER BY upload_date DESC, id ASC
            """,
            [user_id],
        ).fetchall()
        return [self._row_to_document(row) for row in rows]

    def list_documents(
        self,
        *,
        user_id: str,
        limit: int = 10,
        offset: int = 0,
        query: str | None = None,
    ) -> tuple[list[Document], int]:
        where = "user_id = ?"
        params: list[Any] = [user_id]
        if query:
            where += " AND (content ILIKE '%' || ? || '%' OR name ILIKE '%' || ? || '%')"
            params.extend([query, query])

        total_row = self._conn.execute(
            f"SELECT COUNT(*) FROM documents WHERE {where}", params
        ).fetchone()
        rows = self._conn.execute(
            f"""
            SELECT {_COLUMNS}
            FROM documents
            WHERE {where}
            ORDER BY upload_date DESC, id ASC
            LIMIT ? OFFSET ?
            """,
            [*params, max(limit, 0), max(offset, 0)],
        ).fetchall()
        total = int(total_row[0]) if total_row is not None else 0
        return [self._row_to_document(row) for row in rows], total

    def get_document(self, *, user_id: str, doc_id: str) -> Document | None:
        row = self._conn.execute(
            f"SELECT {_COLUMNS} FROM documents WHERE id = ? AND user_id = ?",
            [doc_id, user_id],
        ).fetchone()
        if row is None:
            return None
        return self._row_to_document(row)

    def delete_document(self, *, user_id: str, doc_id: str) -> bool:
        if self.get_document(user_id=user_id, doc_id=doc_id) is None:
            return False
        self._conn.execute(
            "DELETE FROM documents WHERE id = ? AND user_id = ?",
            [doc_id, user_id],
        )
        return True

    @staticmethod
    def _row_to_document(row: tuple[Any, ...]) -> Document:
        return Document(
            id=str(row[0]),
            user_id=str(row[1]),
            name=str(row[2]),
            content=str(row[3]),
            content_type=str(row[4]),
            upload_date=datetime.fromisoformat(str(row[5])),
            size_bytes=int(row[6]),
            embeddings=json.loads(str(row[7])),
            embedding_model=str(row[8]) if row[8] is not None else None,
        )
