"""
Payment API Endpoints.

Checkout session creation, payment confirmation after the provider redirect,
and the caller's payment history.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from zapshift.app.core.dependencies import (
    get_payment_confirmation_service,
    get_payment_history_service,
    get_verified_email,
)
from zapshift.app.schemas.payment import CheckoutSessionCreate, CheckoutSessionResponse
from zapshift.app.services.payment_service import (
    ConfirmationFailed,
    PaymentConfirmationService,
    PaymentHistoryService,
)

router = APIRouter(tags=["Payments"])


@router.post("/create-checkout-session", response_model=CheckoutSessionResponse)
async def create_checkout_session(
    payment_info: CheckoutSessionCreate,
    service: PaymentConfirmationService = Depends(get_payment_confirmation_service),
):
    """
    Start a hosted checkout for a parcel.

    The client redirects the sender to the returned URL.
    """
    url = await service.create_checkout_url(
        cost=payment_info.cost,
        parcel_name=payment_info.parcel_name,
        sender_email=payment_info.sender_email,
        parcel_id=payment_info.parcel_id,
    )
    return CheckoutSessionResponse(url=url)


@router.patch("/payment-success", response_model=Dict[str, Any])
async def confirm_payment(
    session_id: str = Query(..., min_length=1, description="Checkout session ID"),
    service: PaymentConfirmationService = Depends(get_payment_confirmation_service),
):
    """
    Reconcile a checkout session with local records.

    Safe to call repeatedly: once recorded, the same tracking id is returned.
    """
    outcome = await service.confirm_payment(session_id)
    if isinstance(outcome, ConfirmationFailed):
        raise outcome.error
    return outcome.to_response()


@router.get("/payments", response_model=List[Dict[str, Any]])
async def list_payments(
    email: Optional[str] = Query(None, description="Sender email; must be the caller's own"),
    verified_email: str = Depends(get_verified_email),
    service: PaymentHistoryService = Depends(get_payment_history_service),
):
    """Payment history, most recent first."""
    return await service.list_payments(verified_email, email)
