"""Stripe Checkout HTTP client.

Responsibilities:
- Create one-off card checkout sessions for premium downloads.
- Retrieve checkout sessions to report payment status.

Notes:
- Stripe's REST API takes form-encoded bodies with bracketed nested keys and
  HTTP basic auth using the secret key as username.
"""

from __future__ import annotations

import math
from typing import Any, Mapping
from urllib.parse import quote

from .base import ProviderError, ProviderHTTPClient


CHECKOUT_CURRENCY = "eur"
CHECKOUT_PRODUCT_NAME = "Manifestation AI Blueprint - Starter Package"
CHECKOUT_PRODUCT_DESCRIPTION = "Complete manifestation guide with AI meditation tools"
CHECKOUT_PRODUCT_TAG = "meditation_download"


class StripeClient(ProviderHTTPClient):
    """Minimal requests-based Stripe client for Checkout sessions."""

    provider_id = "stripe"
    provider_label = "Stripe"
    api_key_env = "STRIPE_SECRET_KEY"
    default_base_url = "https://api.stripe.com/v1"

    def create_checkout_session(
        self,
        *,
        amount: float,
        success_url: str,
        cancel_url: str,
        metadata: Mapping[str, str] | None = None,
    ) -> dict[str, Any]:
        """Create a one-item card checkout session and return `{sessionId, url}`."""

        self._require_api_key()
        form = {
            "payment_method_types[0]": "card",
            "line_items[0][price_data][currency]": CHECKOUT_CURRENCY,
            "line_items[0][price_data][product_data][name]": CHECKOUT_PRODUCT_NAME,
            "line_items[0][price_data][product_data][description]": CHECKOUT_PRODUCT_DESCRIPTION,
            "line_items[0][price_data][unit_amount]": str(to_minor_units(amount)),
            "line_items[0][quantity]": "1",
            "mode": "payment",
            "success_url": success_url,
            "cancel_url": cancel_url,
        }
        merged_metadata = {"product": CHECKOUT_PRODUCT_TAG, **dict(metadata or {})}
        for key, value in merged_metadata.items():
            form[f"metadata[{key}]"] = str(value)

        session = self._post_form_json(
            endpoint_path="/checkout/sessions",
            form=form,
            auth=(self.api_key, ""),
        )
        self._require_session_object(session)
        return {"sessionId": session.get("id"), "url": session.get("url")}

    def retrieve_checkout_session(self, session_id: str) -> dict[str, Any]:
        """Return payment status details for an existing checkout session."""

        self._require_api_key()
        session = self._get_json(
            endpoint_path=f"/checkout/sessions/{quote(session_id, safe='')}",
            auth=(self.api_key, ""),
        )
        self._require_session_object(session)
        payment_status = session.get("payment_status")
        return {
            "status": payment_status,
            "success": payment_status == "paid",
            "metadata": session.get("metadata") or {},
            "customerId": session.get("customer"),
        }

    def _require_session_object(self, payload: Any) -> None:
        """Reject responses that are not a checkout session object."""

        if not isinstance(payload, dict) or not isinstance(payload.get("id"), str):
            raise ProviderError(
                "Stripe response is not a checkout session object.",
                provider=self.provider_id,
                failure_kind="invalid_response",
            )


def to_minor_units(amount: float) -> int:
    """Convert a major-unit currency amount to integer cents, rounding halves up."""

    return math.floor(amount * 100 + 0.5)
