"""Top-level package for Meditavoice.

This package generates guided-meditation scripts and narrates them through a
fixed-priority chain of text-to-speech providers. The main synthesis entry
point is `FallbackSpeechSynthesizer`; the HTTP API is built by `create_app`.
"""

from .tts.fallback import FallbackSpeechSynthesizer

__all__ = ["FallbackSpeechSynthesizer", "__version__"]

__version__ = "0.1.0"
