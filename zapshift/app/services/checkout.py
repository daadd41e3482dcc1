"""
Hosted checkout integration (Stripe Checkout).

Talks to the provider's REST API with httpx. Requests are form-encoded with
Stripe's bracketed keys; the secret key is sent as the basic-auth username.
"""

import logging
from typing import Any, Dict

import httpx

from zapshift.app.core.config import Settings
from zapshift.app.core.exceptions import CheckoutSessionNotFoundError, PaymentProviderError
from zapshift.app.schemas.payment import CheckoutSession

logger = logging.getLogger("zapshift.checkout")

SESSION_ID_PLACEHOLDER = "{CHECKOUT_SESSION_ID}"


def to_smallest_unit(cost: float) -> int:
    """Whole currency units (fractions dropped) to cents."""
    return int(cost) * 100


class StripeCheckoutClient:
    def __init__(
        self,
        secret_key: str,
        site_domain: str,
        http_client: httpx.AsyncClient,
        api_base: str = "https://api.stripe.com/v1",
        currency: str = "usd",
    ):
        self.secret_key = secret_key
        self.site_domain = site_domain.rstrip("/")
        self.http_client = http_client
        self.api_base = api_base.rstrip("/")
        self.currency = currency

    @classmethod
    def from_settings(cls, settings: Settings, http_client: httpx.AsyncClient) -> "StripeCheckoutClient":
        return cls(
            secret_key=settings.stripe_secret_key,
            site_domain=settings.site_domain,
            http_client=http_client,
            api_base=settings.stripe_api_base,
            currency=settings.checkout_currency,
        )

    @property
    def success_url(self) -> str:
        return f"{self.site_domain}/dashboard/payment-success?session_id={SESSION_ID_PLACEHOLDER}"

    @property
    def cancel_url(self) -> str:
        return f"{self.site_domain}/dashboard/payment-cancelled"

    def build_session_form(self, cost: float, parcel_name: str, sender_email: str, parcel_id: str) -> Dict[str, Any]:
        return {
            "mode": "payment",
            "line_items[0][quantity]": 1,
            "line_items[0][price_data][currency]": self.currency,
            "line_items[0][price_data][unit_amount]": to_smallest_unit(cost),
            "line_items[0][price_data][product_data][name]": parcel_name,
            "customer_email": sender_email,
            "metadata[parcelId]": parcel_id,
            "metadata[parcelName]": parcel_name,
            "success_url": self.success_url,
            "cancel_url": self.cancel_url,
        }

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            return await self.http_client.request(
                method,
                f"{self.api_base}{path}",
                auth=(self.secret_key, ""),
                **kwargs,
            )
        except httpx.HTTPError as exc:
            logger.error("Checkout provider unreachable: %s %s: %s", method, path, exc)
            raise PaymentProviderError()

    @staticmethod
    def _raise_for_provider_error(response: httpx.Response) -> None:
        if response.is_success:
            return
        try:
            error = response.json().get("error", {})
        except ValueError:
            error = {}
        logger.error(
            "Checkout provider error %s: %s (%s)",
            response.status_code,
            error.get("message", response.text[:200]),
            error.get("type", "unknown"),
        )
        raise PaymentProviderError(error.get("message") or "Payment provider request failed")

    async def create_session(self, cost: float, parcel_name: str, sender_email: str, parcel_id: str) -> CheckoutSession:
        response = await self._request(
            "POST",
            "/checkout/sessions",
            data=self.build_session_form(cost, parcel_name, sender_email, parcel_id),
        )
        self._raise_for_provider_error(response)
        session = CheckoutSession.model_validate(response.json())
        logger.info("Checkout session %s created for parcel %s", session.id, parcel_id)
        return session

    async def retrieve_session(self, session_id: str) -> CheckoutSession:
        response = await self._request("GET", f"/checkout/sessions/{session_id}")
        if response.status_code == 404:
            raise CheckoutSessionNotFoundError(session_id)
        self._raise_for_provider_error(response)
        payload = response.json()
        if not payload.get("customer_email"):
            payload["customer_email"] = (payload.get("customer_details") or {}).get("email")
        return CheckoutSession.model_validate(payload)
