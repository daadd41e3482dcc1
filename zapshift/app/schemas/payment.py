"""
Payment and checkout Pydantic schemas.
"""

from typing import Dict, Optional

from pydantic import Field

from zapshift.app.schemas.common import CamelModel


class CheckoutSessionCreate(CamelModel):
    """Body of POST /create-checkout-session."""
    cost: float = Field(..., ge=1, description="Cost in whole currency units")
    parcel_name: str = Field(..., min_length=1)
    sender_email: str = Field(..., min_length=3)
    parcel_id: str = Field(..., min_length=1)


class CheckoutSessionResponse(CamelModel):
    url: str


class CheckoutSession(CamelModel):
    """The subset of a provider checkout session this service reads."""
    id: str
    url: Optional[str] = None
    payment_status: Optional[str] = None
    payment_intent: Optional[str] = None
    amount_total: Optional[int] = None
    currency: Optional[str] = None
    customer_email: Optional[str] = None
    metadata: Dict[str, str] = Field(default_factory=dict)
