"""Deterministic narration cleaning rules.

Responsibilities:
- Provide composable cleanup rules for model-generated meditation scripts.
- Keep preprocessing predictable so repeated cleaning is a no-op.
"""

from __future__ import annotations

import re
from typing import Protocol


class CleanerRule(Protocol):
    """Protocol for text cleaning rules."""

    def apply(self, text: str) -> str:
        """Apply a single cleaning transformation."""


class StripEmphasis:
    """Remove markdown bold and italic markers while keeping the wrapped text."""

    _BOLD_RE = re.compile(r"\*\*(.*?)\*\*")
    _ITALIC_RE = re.compile(r"\*(.*?)\*")

    def apply(self, text: str) -> str:
        """Unwrap `**bold**` first, then `*italic*`."""

        text = self._BOLD_RE.sub(r"\1", text)
        return self._ITALIC_RE.sub(r"\1", text)


class StripHeadingMarkers:
    """Remove markdown heading markers (`#` to `######` plus whitespace)."""

    def apply(self, text: str) -> str:
        """Apply heading-marker cleanup rule."""

        return re.sub(r"#{1,6}\s+", "", text)


class StripCodeFences:
    """Drop fenced code blocks together with their content."""

    def apply(self, text: str) -> str:
        """Remove everything between paired triple backticks."""

        return re.sub(r"```[^`]*```", "", text)


class BlankScriptLabels:
    """Blank out `Title:`, `Meditation:` and `Script:` label lines (case-sensitive)."""

    _LABEL_RE = re.compile(r"^(?:Title|Meditation|Script):.*$", re.MULTILINE)

    def apply(self, text: str) -> str:
        """Replace matching label lines with empty lines."""

        return self._LABEL_RE.sub("", text)


DEFAULT_RULES: tuple[CleanerRule, ...] = (
    StripEmphasis(),
    StripHeadingMarkers(),
    StripCodeFences(),
    BlankScriptLabels(),
)
