"""HTTP clients for text generation, speech, and payment providers."""

from .base import ProviderError, ProviderHTTPClient
from .elevenlabs import ElevenLabsClient
from .groq import GroqClient
from .openai import OpenAISpeechClient
from .playai import PlayAIClient
from .stripe import StripeClient

__all__ = [
    "ElevenLabsClient",
    "GroqClient",
    "OpenAISpeechClient",
    "PlayAIClient",
    "ProviderError",
    "ProviderHTTPClient",
    "StripeClient",
]
