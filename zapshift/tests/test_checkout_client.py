"""
Unit tests for the Stripe Checkout client over a mocked transport.
"""

import base64
from urllib.parse import parse_qs

import httpx
import pytest

from zapshift.app.core.exceptions import CheckoutSessionNotFoundError, PaymentProviderError
from zapshift.app.services.checkout import StripeCheckoutClient, to_smallest_unit


def make_client(handler):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return StripeCheckoutClient(
        secret_key="sk_test_123",
        site_domain="https://zapshift.test/",
        http_client=http_client,
        api_base="https://api.stripe.test/v1",
    )


def test_cost_converted_from_whole_units():
    assert to_smallest_unit(50) == 5000
    assert to_smallest_unit(12.75) == 1200


@pytest.mark.asyncio
async def test_create_session_sends_single_line_item():
    captured = {}

    def handler(request):
        captured["request"] = request
        return httpx.Response(200, json={
            "id": "cs_test_1",
            "object": "checkout.session",
            "url": "https://checkout.stripe.com/c/pay/cs_test_1",
            "payment_status": "unpaid",
            "metadata": {"parcelId": "p1", "parcelName": "Box"},
        })

    session = await make_client(handler).create_session(50, "Box", "a@x.com", "p1")

    assert session.url == "https://checkout.stripe.com/c/pay/cs_test_1"
    request = captured["request"]
    assert request.method == "POST"
    assert str(request.url) == "https://api.stripe.test/v1/checkout/sessions"
    expected_auth = base64.b64encode(b"sk_test_123:").decode()
    assert request.headers["Authorization"] == f"Basic {expected_auth}"

    form = {key: values[0] for key, values in parse_qs(request.content.decode()).items()}
    assert form["mode"] == "payment"
    assert form["line_items[0][quantity]"] == "1"
    assert form["line_items[0][price_data][currency]"] == "usd"
    assert form["line_items[0][price_data][unit_amount]"] == "5000"
    assert form["line_items[0][price_data][product_data][name]"] == "Box"
    assert form["customer_email"] == "a@x.com"
    assert form["metadata[parcelId]"] == "p1"
    assert form["metadata[parcelName]"] == "Box"
    assert form["success_url"] == "https://zapshift.test/dashboard/payment-success?session_id={CHECKOUT_SESSION_ID}"
    assert form["cancel_url"] == "https://zapshift.test/dashboard/payment-cancelled"


@pytest.mark.asyncio
async def test_retrieve_session_reads_provider_fields():
    def handler(request):
        assert str(request.url) == "https://api.stripe.test/v1/checkout/sessions/cs_1"
        return httpx.Response(200, json={
            "id": "cs_1",
            "payment_status": "paid",
            "payment_intent": "pi_1",
            "amount_total": 5000,
            "currency": "usd",
            "customer_email": None,
            "customer_details": {"email": "a@x.com"},
            "metadata": {"parcelId": "p1", "parcelName": "Box"},
        })

    session = await make_client(handler).retrieve_session("cs_1")

    assert session.payment_status == "paid"
    assert session.payment_intent == "pi_1"
    assert session.amount_total == 5000
    assert session.customer_email == "a@x.com"
    assert session.metadata["parcelId"] == "p1"


@pytest.mark.asyncio
async def test_retrieve_missing_session():
    def handler(request):
        return httpx.Response(404, json={"error": {"type": "invalid_request_error", "message": "No such checkout.session"}})

    with pytest.raises(CheckoutSessionNotFoundError):
        await make_client(handler).retrieve_session("cs_missing")


@pytest.mark.asyncio
async def test_provider_error_is_wrapped():
    def handler(request):
        return httpx.Response(400, json={"error": {"type": "invalid_request_error", "message": "Invalid email"}})

    with pytest.raises(PaymentProviderError) as exc_info:
        await make_client(handler).create_session(50, "Box", "bad", "p1")
    assert exc_info.value.status_code == 502
    assert exc_info.value.message == "Invalid email"


@pytest.mark.asyncio
async def test_unreachable_provider_is_wrapped():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(PaymentProviderError):
        await make_client(handler).retrieve_session("cs_1")
