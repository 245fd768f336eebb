"""Chunking and ingestion components."""

from .chunker import SmartChunker, TextChunk, fixed_stride_split, split_text
from .ingest import DocumentIngestor, IngestResult

__all__ = [
    "SmartChunker",
    "TextChunk",
    "fixed_stride_split",
    "split_text",
    "DocumentIngestor",
    "IngestResult",
]
