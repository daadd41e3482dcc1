"""
FastAPI dependencies.

Long-lived clients (document store, checkout client, identity verifier) are
built once in the application lifespan and kept on ``app.state``; these
dependencies hand them to endpoints and build the per-request services.
Tests replace them through ``app.dependency_overrides``.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from zapshift.app.core.exceptions import AuthenticationError
from zapshift.app.core.identity import IdentityVerifier
from zapshift.app.db.mongo import DocumentStore
from zapshift.app.services.checkout import StripeCheckoutClient
from zapshift.app.services.parcel_service import ParcelService
from zapshift.app.services.payment_service import PaymentConfirmationService, PaymentHistoryService
from zapshift.app.services.rider_service import RiderService
from zapshift.app.services.user_service import UserService

# auto_error=False: a missing header must be a 401, not FastAPI's default 403
security = HTTPBearer(auto_error=False)


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_checkout_client(request: Request) -> StripeCheckoutClient:
    return request.app.state.checkout


def get_identity_verifier(request: Request) -> IdentityVerifier:
    return request.app.state.identity_verifier


async def get_verified_email(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> str:
    """
    Authenticate the caller from ``Authorization: Bearer <token>``.

    Missing header, wrong scheme and invalid or expired tokens all fail
    the same way.

    Raises:
        AuthenticationError: 401
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()
    return await verifier.verify(credentials.credentials)


def get_parcel_service(store: DocumentStore = Depends(get_store)) -> ParcelService:
    return ParcelService(store)


def get_payment_confirmation_service(
    store: DocumentStore = Depends(get_store),
    checkout: StripeCheckoutClient = Depends(get_checkout_client),
) -> PaymentConfirmationService:
    return PaymentConfirmationService(store, checkout)


def get_payment_history_service(store: DocumentStore = Depends(get_store)) -> PaymentHistoryService:
    return PaymentHistoryService(store)


def get_user_service(store: DocumentStore = Depends(get_store)) -> UserService:
    return UserService(store)


def get_rider_service(store: DocumentStore = Depends(get_store)) -> RiderService:
    return RiderService(store)
