"""Storage backends for docs-qa documents."""

from .base import DocumentStore
from .duckdb import DuckDBDocumentStore

__all__ = [
    "DocumentStore",
    "DuckDBDocumentStore",
]
