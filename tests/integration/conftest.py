"""Integration-test fixtures wiring real services to faked provider HTTP."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from meditavoice.api.app import create_app
from meditavoice.config import MeditavoiceConfig, RuntimeConfigSources
from meditavoice.provider_factory import ProviderFactory, ServiceBundle


@pytest.fixture
def api_config(tmp_path: Path) -> MeditavoiceConfig:
    """Config with OpenAI, Groq, and Stripe keys and an in-memory database."""

    return MeditavoiceConfig(
        database_url="sqlite://",
        audio_dir=tmp_path / "audio",
        admin_password="let-me-in",
        runtime_sources=RuntimeConfigSources(
            env={
                "OPENAI_API_KEY": "sk-test",
                "GROQ_API_KEY": "gsk-test",
                "STRIPE_SECRET_KEY": "sk_test_stripe",
            }
        ),
    )


@pytest.fixture
def services(api_config: MeditavoiceConfig) -> ServiceBundle:
    return ProviderFactory(api_config).build_services()


@pytest.fixture
def client(api_config: MeditavoiceConfig, services: ServiceBundle, fake_http) -> TestClient:  # type: ignore[no-untyped-def]
    """Test client over the app; depends on `fake_http` so no request leaves the process."""

    return TestClient(create_app(api_config, services))
