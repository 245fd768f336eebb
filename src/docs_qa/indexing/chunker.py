"""
Chunking utilities for document content.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

MIN_CHUNK_LENGTH = 50

# Preferred break points, strongest first.
_BOUNDARIES: tuple[str, ...] = ("\n\n", "\n", ". ", "? ", "! ", " ")


@dataclass(frozen=True)
class TextChunk:
    """A content chunk with source offsets."""

    text: str
    position: int
    start_char: int
    end_char: int


class SmartChunker:
    """
    Paragraph-aware chunker with overlap.

    This implementation is char-based to keep it deterministic and lightweight.
    A window is cut at the strongest boundary found in its second half:
    paragraph, then line, then sentence, then word.
    """

    def __init__(self, chunk_size: int = 800, overlap: int = 100) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        if overlap < 0:
            raise ValueError("overlap must be >= 0")
        if overlap >= chunk_size:
            raise ValueError("overlap must be smaller than chunk_size")

        self.chunk_size = chunk_size
        self.overlap = overlap

    def chunk_text(self, text: str) -> list[TextChunk]:
        """
        Split text into chunks while preferring paragraph boundaries.
        """
        normalized = text.strip()
        if not normalized:
            return []

        chunks: list[TextChunk] = []
        start = 0
        position = 0
        total = len(normalized)

        while start < total:
            tentative_end = min(start + self.chunk_size, total)
            end = tentative_end

            if tentative_end < total:
                end = self._boundary_end(normalized, start, tentative_end)

            chunk_text = normalized[start:end].strip()
            if chunk_text:
                chunks.append(
                    TextChunk(
                        text=chunk_text,
                        position=position,
                        start_char=start,
                        end_char=end,
                    )
                )
                position += 1

            if end >= total:
                break
            start = max(start + 1, end - self.overlap)

        return chunks

    def _boundary_end(self, text: str, start: int, tentative_end: int) -> int:
        floor = start + (self.chunk_size // 2)
        for separator in _BOUNDARIES:
            boundary = text.rfind(separator, floor, tentative_end)
            if boundary != -1:
                # Keep the separator with the left-hand chunk, never past the window.
                return min(boundary + len(separator), tentative_end)
        return tentative_end


def fixed_stride_split(text: str, chunk_size: int, chunk_overlap: int) -> list[str]:
    """
    Slice `text` into full-size windows every `chunk_size - chunk_overlap` chars.

    Trailing text shorter than a full window is not emitted.
    """
    step = chunk_size - chunk_overlap
    if chunk_size <= 0 or step <= 0:
        return []
    chunks: list[str] = []
    for start in range(0, len(text), step):
        if start + chunk_size > len(text):
            break
        chunks.append(text[start : start + chunk_size])
    return chunks


def split_text(text: str, chunk_size: int = 800, chunk_overlap: int = 100) -> list[str]:
    """
    Split text into overlapping chunks of at most `chunk_size` characters.

    Uses `SmartChunker` and falls back to `fixed_stride_split` if it fails.
    Chunks shorter than `MIN_CHUNK_LENGTH` are dropped on both paths.
    """
    try:
        pieces = [chunk.text for chunk in SmartChunker(chunk_size, chunk_overlap).chunk_text(text)]
    except Exception:
        logger.warning("Text splitting failed, using fixed-stride split", exc_info=True)
        pieces = fixed_stride_split(text, chunk_size, chunk_overlap)

    chunks = [piece for piece in pieces if len(piece) >= MIN_CHUNK_LENGTH]
    logger.debug("Split %d chars into %d chunks", len(text), len(chunks))
    return chunks
