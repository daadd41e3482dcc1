"""
Payment confirmation and payment history.

Confirmation reconciles a provider checkout session with local records and
returns one of four explicit outcomes:

    AlreadyProcessed   a payment with this transaction id is already recorded
    PaidFirstTime      provider says paid; parcel marked paid, payment inserted
    NotPaid            provider reports any other status; nothing written
    ConfirmationFailed session unknown, parcel reference unusable or missing

The parcel update and the payment insert are two separate writes with no
transaction around them. A failure in between leaves the parcel marked paid
without a payment record; retrying the confirmation repairs it because the
idempotency check looks at payments only.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError

from zapshift.app.core.exceptions import (
    AppException,
    CheckoutSessionNotFoundError,
    InvalidIdentifierError,
    PaymentProviderError,
    ResourceNotFoundError,
)
from zapshift.app.core.guards import ensure_self_access
from zapshift.app.db.mongo import PARCELS, PAYMENTS, USERS, DocumentStore, serialize_document, to_object_id
from zapshift.app.models.enums import PaymentStatus, UserRole
from zapshift.app.schemas.common import UpdateResult
from zapshift.app.services.checkout import StripeCheckoutClient
from zapshift.app.services.tracking import generate_tracking_id

logger = logging.getLogger("zapshift.payments")


@dataclass
class AlreadyProcessed:
    tracking_id: Optional[str]
    transaction_id: str

    def to_response(self) -> Dict[str, Any]:
        return {
            "success": True,
            "message": "Payment already processed",
            "trackingId": self.tracking_id,
            "transactionId": self.transaction_id,
        }


@dataclass
class PaidFirstTime:
    parcel_update: UpdateResult
    tracking_id: str
    transaction_id: str
    payment: Dict[str, Any]

    def to_response(self) -> Dict[str, Any]:
        return {
            "success": True,
            "modifyParcel": self.parcel_update.model_dump(by_alias=True),
            "trackingId": self.tracking_id,
            "transactionId": self.transaction_id,
            "paymentInfo": self.payment,
        }


@dataclass
class NotPaid:
    payment_status: Optional[str]

    def to_response(self) -> Dict[str, Any]:
        return {"success": False}


@dataclass
class ConfirmationFailed:
    error: AppException


ConfirmationOutcome = Union[AlreadyProcessed, PaidFirstTime, NotPaid, ConfirmationFailed]


class PaymentConfirmationService:

    def __init__(self, store: DocumentStore, checkout: StripeCheckoutClient):
        self.store = store
        self.checkout = checkout

    async def create_checkout_url(self, cost: float, parcel_name: str, sender_email: str, parcel_id: str) -> str:
        session = await self.checkout.create_session(cost, parcel_name, sender_email, parcel_id)
        return session.url

    async def confirm_payment(self, session_id: str) -> ConfirmationOutcome:
        try:
            session = await self.checkout.retrieve_session(session_id)
        except CheckoutSessionNotFoundError as exc:
            logger.warning("Confirmation for unknown checkout session %s", session_id)
            return ConfirmationFailed(exc)

        transaction_id = session.payment_intent
        if transaction_id:
            existing = await self.store.find_one(PAYMENTS, {"transactionId": transaction_id})
            if existing:
                logger.info("Payment %s already processed", transaction_id)
                return AlreadyProcessed(existing.get("trackingId"), transaction_id)

        if session.payment_status != PaymentStatus.PAID.value:
            outcome = NotPaid(session.payment_status)
            logger.info("Checkout session %s not paid (%s)", session_id, outcome.payment_status)
            return outcome

        if not transaction_id:
            # transactionId is the idempotency key; never record a payment without one
            logger.error("Paid checkout session %s has no payment intent", session_id)
            return ConfirmationFailed(PaymentProviderError("Paid checkout session has no payment intent"))

        parcel_id = session.metadata.get("parcelId")
        try:
            parcel_oid = to_object_id(parcel_id)
        except InvalidIdentifierError as exc:
            logger.error("Checkout session %s carries unusable parcel id %r", session_id, parcel_id)
            return ConfirmationFailed(exc)

        tracking_id = generate_tracking_id()
        parcel_update = await self.store.update_one(
            PARCELS,
            {"_id": parcel_oid},
            {"paymentStatus": PaymentStatus.PAID.value, "trackingId": tracking_id},
        )
        if parcel_update.matched_count == 0:
            logger.error("Paid checkout session %s references missing parcel %s", session_id, parcel_id)
            return ConfirmationFailed(ResourceNotFoundError("Parcel", parcel_id))

        payment = {
            "amount": session.amount_total / 100 if session.amount_total is not None else 0,
            "transactionId": transaction_id,
            "currency": session.currency,
            "paymentStatus": session.payment_status,
            "senderEmail": session.customer_email,
            "parcelId": parcel_id,
            "parcelName": session.metadata.get("parcelName"),
            "paidAt": datetime.now(timezone.utc),
            "trackingId": tracking_id,
        }
        try:
            await self.store.insert_one(PAYMENTS, payment)
        except DuplicateKeyError:
            return await self._resolve_duplicate(parcel_oid, transaction_id)

        logger.info("Payment %s recorded for parcel %s, tracking %s", transaction_id, parcel_id, tracking_id)
        return PaidFirstTime(parcel_update, tracking_id, transaction_id, serialize_document(payment))

    async def _resolve_duplicate(self, parcel_oid, transaction_id: str) -> AlreadyProcessed:
        # A concurrent confirmation inserted first; point the parcel back at its tracking id.
        existing = await self.store.find_one(PAYMENTS, {"transactionId": transaction_id})
        tracking_id = existing.get("trackingId") if existing else None
        if tracking_id:
            await self.store.update_one(PARCELS, {"_id": parcel_oid}, {"trackingId": tracking_id})
        logger.warning("Concurrent confirmation for %s resolved to existing payment", transaction_id)
        return AlreadyProcessed(tracking_id, transaction_id)


class PaymentHistoryService:

    def __init__(self, store: DocumentStore):
        self.store = store

    async def list_payments(self, verified_email: str, email: Optional[str] = None) -> List[dict]:
        if email:
            ensure_self_access(email, verified_email)
            query = {"senderEmail": email}
        elif await self._is_admin(verified_email):
            query = {}
        else:
            query = {"senderEmail": verified_email}
        return await self.store.find_many(PAYMENTS, query, sort=[("paidAt", DESCENDING)])

    async def _is_admin(self, email: str) -> bool:
        user = await self.store.find_one(USERS, {"email": email})
        return bool(user) and user.get("role") == UserRole.ADMIN.value
