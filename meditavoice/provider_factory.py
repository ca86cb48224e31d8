"""Provider factory helpers for synthesis, generation, payments, and storage.

Responsibilities:
- Build provider clients from resolved credentials and shared timeouts.
- Assemble the fixed-priority TTS chain and the voice catalog.
- Share one database engine between the store, blog, and influencer services.
- Keep the API and CLI layers independent from concrete class construction.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.engine import Engine

from .clients.elevenlabs import ElevenLabsClient
from .clients.groq import GroqClient
from .clients.openai import OpenAISpeechClient
from .clients.playai import PlayAIClient
from .clients.stripe import StripeClient
from .config import MeditavoiceConfig, ProviderCredentials
from .content.blog import BlogPostLibrary
from .influencers import InfluencerRegistry
from .io.database import create_database_engine
from .io.meditation_store import InMemoryMeditationStore, MeditationStore, SqlMeditationStore
from .io.storage import AudioFileStore
from .llm.script_generator import MeditationScriptGenerator
from .payments import PaymentService
from .telemetry.logger import RunLogger
from .tts.catalog import VoiceCatalog
from .tts.fallback import FallbackSpeechSynthesizer
from .tts.synthesizer import (
    ElevenLabsSynthesizer,
    GroqSynthesizer,
    OpenAISynthesizer,
    PlayAISynthesizer,
)


@dataclass(slots=True)
class ServiceBundle:
    """Every collaborator the HTTP app and CLI commands depend on."""

    store: MeditationStore
    synthesizer: FallbackSpeechSynthesizer
    catalog: VoiceCatalog
    generator: MeditationScriptGenerator
    payments: PaymentService
    blog: BlogPostLibrary
    influencers: InfluencerRegistry
    audio_store: AudioFileStore


class ProviderFactory:
    """Factory for provider-backed services configured from `MeditavoiceConfig`."""

    def __init__(self, config: MeditavoiceConfig, run_logger: RunLogger | None = None) -> None:
        """Resolve credentials once; secrets stay inside the built clients."""

        self.config = config
        self.credentials: ProviderCredentials = config.resolved_credentials()
        self.run_logger = run_logger or RunLogger()
        self._engine: Engine | None = None

    @property
    def engine(self) -> Engine:
        """Return the shared database engine, creating tables on first use."""

        if self._engine is None:
            self._engine = create_database_engine(self.config.database_url)
        return self._engine

    def create_elevenlabs_client(self) -> ElevenLabsClient:
        return ElevenLabsClient(
            api_key=self.credentials.elevenlabs_api_key,
            timeout_seconds=self.config.http_timeout_seconds,
        )

    def create_openai_client(self) -> OpenAISpeechClient:
        return OpenAISpeechClient(
            api_key=self.credentials.openai_api_key,
            timeout_seconds=self.config.http_timeout_seconds,
        )

    def create_groq_client(self) -> GroqClient:
        return GroqClient(
            api_key=self.credentials.groq_api_key,
            timeout_seconds=self.config.http_timeout_seconds,
        )

    def create_playai_client(self) -> PlayAIClient:
        return PlayAIClient(
            api_key=self.credentials.playai_api_key,
            user_id=self.config.playai_user_id,
            timeout_seconds=self.config.http_timeout_seconds,
        )

    def create_tts_chain(self) -> FallbackSpeechSynthesizer:
        """Create the chain in fixed priority: ElevenLabs, OpenAI, Groq, PlayAI."""

        return FallbackSpeechSynthesizer(
            [
                ElevenLabsSynthesizer(
                    self.create_elevenlabs_client(),
                    max_chunk_chars=self.config.elevenlabs_chunk_chars,
                    run_logger=self.run_logger,
                ),
                OpenAISynthesizer(self.create_openai_client()),
                GroqSynthesizer(self.create_groq_client()),
                PlayAISynthesizer(self.create_playai_client()),
            ],
            run_logger=self.run_logger,
        )

    def create_voice_catalog(self) -> VoiceCatalog:
        """Create the voice catalog over live ElevenLabs and PlayAI listings."""

        return VoiceCatalog(
            elevenlabs=self.create_elevenlabs_client(),
            playai=self.create_playai_client(),
            openai_configured=self.credentials.openai_api_key is not None,
            groq_configured=self.credentials.groq_api_key is not None,
            run_logger=self.run_logger,
        )

    def create_script_generator(self) -> MeditationScriptGenerator:
        return MeditationScriptGenerator(
            self.create_groq_client(),
            default_model=self.config.groq_model,
            run_logger=self.run_logger,
        )

    def create_payment_service(self) -> PaymentService:
        client = StripeClient(
            api_key=self.credentials.stripe_secret_key,
            timeout_seconds=self.config.http_timeout_seconds,
        )
        return PaymentService(client, run_logger=self.run_logger)

    def create_meditation_store(self) -> MeditationStore:
        """Create the store selected by `storage_backend`."""

        if self.config.storage_backend == "memory":
            return InMemoryMeditationStore()
        if self.config.storage_backend == "sql":
            return SqlMeditationStore(self.engine)
        raise ValueError(f"Unsupported storage backend `{self.config.storage_backend}`.")

    def create_blog_library(self) -> BlogPostLibrary:
        return BlogPostLibrary(self.engine, run_logger=self.run_logger)

    def create_influencer_registry(self) -> InfluencerRegistry:
        return InfluencerRegistry(self.engine, run_logger=self.run_logger)

    def create_audio_store(self) -> AudioFileStore:
        return AudioFileStore(self.config.audio_dir)

    def build_services(self) -> ServiceBundle:
        """Build every collaborator for one process."""

        self.run_logger.log_event(
            "startup",
            "providers",
            configured=",".join(self.credentials.configured_providers()) or None,
            storage=self.config.storage_backend,
        )
        return ServiceBundle(
            store=self.create_meditation_store(),
            synthesizer=self.create_tts_chain(),
            catalog=self.create_voice_catalog(),
            generator=self.create_script_generator(),
            payments=self.create_payment_service(),
            blog=self.create_blog_library(),
            influencers=self.create_influencer_registry(),
            audio_store=self.create_audio_store(),
        )
