"""Persistence layer: relational schema, meditation stores, and audio files."""

from .meditation_store import InMemoryMeditationStore, MeditationStore, SqlMeditationStore
from .storage import AudioFileStore

__all__ = [
    "AudioFileStore",
    "InMemoryMeditationStore",
    "MeditationStore",
    "SqlMeditationStore",
]
