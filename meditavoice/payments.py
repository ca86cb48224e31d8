"""Checkout flow for premium meditation downloads.

Responsibilities:
- Validate checkout requests before calling Stripe.
- Report session payment status in the shape the web client expects.
"""

from __future__ import annotations

from typing import Any, Mapping

from .clients.stripe import StripeClient
from .parsing import normalize_optional_string, parse_positive_number
from .telemetry.logger import RunLogger


class PaymentsUnavailableError(RuntimeError):
    """Raised when payments are requested but no Stripe key is configured."""


class PaymentService:
    """Thin orchestration layer over `StripeClient`."""

    def __init__(self, client: StripeClient, run_logger: RunLogger | None = None) -> None:
        self.client = client
        self.run_logger = run_logger or RunLogger()

    @property
    def is_configured(self) -> bool:
        """Return whether a Stripe secret key is present."""

        return self.client.is_configured

    def create_checkout(
        self,
        *,
        amount: object,
        success_url: str,
        cancel_url: str,
        metadata: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Validate the amount and create a checkout session.

        Raises:
            ValueError: If the amount is not a positive number or URLs are blank.
            PaymentsUnavailableError: If Stripe is not configured.
        """

        parsed_amount = parse_positive_number(amount, "amount")
        success = normalize_optional_string(success_url)
        cancel = normalize_optional_string(cancel_url)
        if success is None or cancel is None:
            raise ValueError("`successUrl` and `cancelUrl` are required.")
        self._require_configured()

        session = self.client.create_checkout_session(
            amount=parsed_amount,
            success_url=success,
            cancel_url=cancel,
            metadata={str(key): str(value) for key, value in dict(metadata or {}).items()},
        )
        self.run_logger.log_event("payments", "checkout_created", amount=parsed_amount)
        return session

    def checkout_status(self, session_id: str) -> dict[str, Any]:
        """Return `{status, success, metadata, customerId}` for one session."""

        self._require_configured()
        return self.client.retrieve_checkout_session(session_id)

    def _require_configured(self) -> None:
        if not self.client.is_configured:
            raise PaymentsUnavailableError("Payments are not configured.")
