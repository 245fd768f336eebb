"""
Document ingestion: validate text, precompute a few chunk embeddings, store.
"""

from __future__ import annotations

import asyncio
import logging
import mimetypes
import uuid
from dataclasses import dataclass
from pathlib import Path

from ..embeddings import EmbeddingProvider
from ..errors import CapabilityError
from ..models import Document
from ..storage import DocumentStore
from .chunker import split_text

logger = logging.getLogger(__name__)

MIN_CONTENT_LENGTH = 10
MIN_EMBEDDABLE_LENGTH = 100
EMBED_CHUNK_SIZE = 800
EMBED_CHUNK_OVERLAP = 150
MAX_EMBEDDED_CHUNKS = 2

SUPPORTED_EXTENSIONS: dict[str, str] = {
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".markdown": "text/markdown",
    ".csv": "text/csv",
}


@dataclass(frozen=True)
class IngestResult:
    """Summary of one stored document."""

    document: Document
    embeddings_created: int


def new_document_id() -> str:
    return f"doc_{uuid.uuid4().hex}"


class DocumentIngestor:
    """Store documents for a user, embedding their first chunks when possible."""

    def __init__(
        self,
        store: DocumentStore,
        embedding_provider: EmbeddingProvider | None = None,
    ) -> None:
        self.store = store
        self.embedding_provider = embedding_provider

    async def ingest_text(
        self,
        *,
        user_id: str,
        name: str,
        content: str,
        content_type: str = "text/plain",
        size_bytes: int | None = None,
    ) -> IngestResult:
        if not content or len(content.strip()) < MIN_CONTENT_LENGTH:
            raise ValueError("Could not extract meaningful content from the file")

        embeddings = await self._precompute_embeddings(content)
        embedding_model = None
        if embeddings and self.embedding_provider is not None:
            embedding_model = self.embedding_provider.model

        document = Document(
            id=new_document_id(),
            user_id=user_id,
            name=name,
            content=content,
            content_type=content_type,
            size_bytes=size_bytes if size_bytes is not None else len(content.encode("utf-8")),
            embeddings=embeddings,
            embedding_model=embedding_model,
        )
        self.store.add_document(document)
        logger.info(
            "Stored document %s (%d chars, %d embeddings)",
            document.id,
            len(content),
            len(embeddings),
        )
        return IngestResult(document=document, embeddings_created=len(embeddings))

    async def ingest_file(self, *, user_id: str, path: str | Path) -> IngestResult:
        file_path = Path(path)
        if not file_path.is_file():
            raise ValueError(f"No such file: {file_path}")
        content_type = SUPPORTED_EXTENSIONS.get(file_path.suffix.lower())
        if content_type is None:
            guessed, _ = mimetypes.guess_type(file_path.name)
            if guessed is None or not guessed.startswith("text/"):
                raise ValueError(f"Unsupported file type: {file_path.suffix or file_path.name}")
            content_type = guessed

        raw = file_path.read_bytes()
        return await self.ingest_text(
            user_id=user_id,
            name=file_path.name,
            content=raw.decode("utf-8", errors="replace"),
            content_type=content_type,
            size_bytes=len(raw),
        )

    async def _precompute_embeddings(self, content: str) -> list[list[float]]:
        provider = self.embedding_provider
        if provider is None or not provider.is_configured:
            return []
        if len(content) <= MIN_EMBEDDABLE_LENGTH:
            return []

        chunks = split_text(content, EMBED_CHUNK_SIZE, EMBED_CHUNK_OVERLAP)[:MAX_EMBEDDED_CHUNKS]
        vectors = await asyncio.gather(*(self._embed_chunk(provider, chunk) for chunk in chunks))
        return [vector for vector in vectors if vector is not None]

    @staticmethod
    async def _embed_chunk(provider: EmbeddingProvider, chunk: str) -> list[float] | None:
        try:
            return await provider.embed(chunk)
        except CapabilityError as exc:
            logger.warning("Failed to generate embedding for one chunk: %s", exc)
            return None
