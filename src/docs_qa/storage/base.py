"""
Storage interface for user documents.
"""

from __future__ import annotations

from typing import Protocol

from ..models import Document


class DocumentStore(Protocol):
    """Protocol for the document persistence the search core reads from."""

    def initialize(self) -> None:
        """Initialize required tables/indexes."""

    def add_document(self, document: Document) -> None:
        """Store a new document."""

    def find_by_user(self, user_id: str) -> list[Document]:
        """Return every document owned by a user, newest first."""

    def list_documents(
        self,
        *,
        user_id: str,
        limit: int = 10,
        offset: int = 0,
        query: str | None = None,
    ) -> tuple[list[Document], int]:
        """Return one page of a user's documents and the total match count."""

    def get_document(self, *, user_id: str, doc_id: str) -> Document | None:
        """Get a user's document by id."""

    def delete_document(self, *, user_id: str, doc_id: str) -> bool:
        """Delete a user's document. Return False when it did not exist."""

    def close(self) -> None:
        """Release the underlying connection."""
