"""
API Router.

Aggregates all endpoint routers.
"""

from fastapi import APIRouter
from zapshift.app.api.endpoints import parcels, payments, riders, users

router = APIRouter()

router.include_router(parcels.router)
router.include_router(payments.router)
router.include_router(users.router)
router.include_router(riders.router)
