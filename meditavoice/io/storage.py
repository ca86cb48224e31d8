"""Audio file storage for downloadable meditation audio.

Responsibilities:
- Write synthesized MP3 files under one audio directory with safe names.
- Expose the directory the static `/audio` route serves.
"""

from __future__ import annotations

from pathlib import Path
import time

from ..parsing import normalize_optional_string, sanitize_filename_stem


class AudioFileStore:
    """Filesystem-backed store for `.mp3` files."""

    def __init__(self, root: Path) -> None:
        """Initialize the store with a root audio directory."""

        self.root = root

    def ensure_root(self) -> Path:
        """Create the audio directory when missing and return it."""

        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def resolve_filename(self, requested: str | None) -> str:
        """Return a sanitized `.mp3` filename, or a timestamped default."""

        normalized = normalize_optional_string(requested)
        if normalized is None:
            return f"meditation-{int(time.time() * 1000)}.mp3"
        return f"{sanitize_filename_stem(normalized)}.mp3"

    def save_audio(self, filename: str | None, data: bytes) -> Path:
        """Save audio bytes and return the final path."""

        path = self.ensure_root() / self.resolve_filename(filename)
        path.write_bytes(data)
        return path
