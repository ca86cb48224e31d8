"""Text preparation for narration: cleaning rules, normalization, and chunking."""

from .chunking import FixedWidthChunker
from .normalizer import NarrationNormalizer, normalize_for_narration

__all__ = ["FixedWidthChunker", "NarrationNormalizer", "normalize_for_narration"]
