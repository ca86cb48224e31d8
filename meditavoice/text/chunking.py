"""Fixed-width text chunking for provider input limits.

Responsibilities:
- Split narration text into bounded chunks for per-request provider limits.
- Preserve index metadata required for in-order audio reassembly.
"""

from __future__ import annotations

from ..models.datatypes import TextChunk


class FixedWidthChunker:
    """Split text into consecutive substrings of at most `max_chars` characters.

    Boundaries ignore sentence and word structure; only order is preserved.
    """

    def __init__(self, max_chars: int) -> None:
        """Initialize the chunker with a positive per-chunk character limit."""

        if max_chars <= 0:
            raise ValueError("`max_chars` must be a positive integer.")
        self.max_chars = max_chars

    def split(self, text: str) -> list[TextChunk]:
        """Return ordered chunks covering `text` exactly; empty text yields no chunks."""

        chunks: list[TextChunk] = []
        for index, start in enumerate(range(0, len(text), self.max_chars)):
            end = min(start + self.max_chars, len(text))
            chunks.append(
                TextChunk(index=index, text=text[start:end], char_start=start, char_end=end)
            )
        return chunks
