"""Text-generation stage: prompts and the meditation script generator."""

from .script_generator import MeditationScriptGenerator

__all__ = ["MeditationScriptGenerator"]
