"""Narration text normalization.

Responsibilities:
- Turn raw generated scripts into minimal text safe for speech synthesis.
- Run regex rules first, then line-based metadata filtering on their output.
"""

from __future__ import annotations

import re
from typing import Sequence

from .cleaners import DEFAULT_RULES, CleanerRule


_METADATA_LINE_RE = re.compile(r"^(?:Title|Duration|Tags|Author|Category):", re.IGNORECASE)


class NarrationNormalizer:
    """Normalize model output into trimmed, metadata-free narration lines."""

    def __init__(self, rules: Sequence[CleanerRule] = DEFAULT_RULES) -> None:
        """Initialize the normalizer with an ordered rule sequence."""

        self.rules = tuple(rules)

    def normalize(self, text: str) -> str:
        """Return cleaned narration text; may be empty, never raises for string input."""

        cleaned = text
        for rule in self.rules:
            cleaned = rule.apply(cleaned)

        kept_lines: list[str] = []
        for line in cleaned.split("\n"):
            trimmed = line.strip()
            if not trimmed:
                continue
            if _METADATA_LINE_RE.match(trimmed):
                continue
            kept_lines.append(trimmed)
        return "\n".join(kept_lines)


def normalize_for_narration(text: str) -> str:
    """Normalize text with the default rule set."""

    return NarrationNormalizer().normalize(text)
