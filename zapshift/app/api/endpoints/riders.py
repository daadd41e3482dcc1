"""
Rider API Endpoints.

Applications, listing by status, and the approval workflow.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Path, Query
from fastapi.exceptions import RequestValidationError

from zapshift.app.core.dependencies import get_rider_service
from zapshift.app.models.enums import RiderStatus
from zapshift.app.schemas.common import InsertResult, UpdateResult
from zapshift.app.schemas.rider import RiderApplication, RiderStatusUpdate
from zapshift.app.services.rider_service import RiderService

router = APIRouter(prefix="/riders", tags=["Riders"])


def status_filter(
    status: Optional[str] = Query(None, description="Filter by application status"),
) -> Optional[RiderStatus]:
    """An empty ``status`` means no filter; unknown values are a 422."""
    if not status:
        return None
    try:
        return RiderStatus(status)
    except ValueError:
        allowed = ", ".join(repr(s.value) for s in RiderStatus)
        raise RequestValidationError([{
            "type": "enum",
            "loc": ("query", "status"),
            "msg": f"Input should be {allowed}",
            "input": status,
        }])


@router.get("", response_model=List[Dict[str, Any]])
async def list_riders(
    status: Optional[RiderStatus] = Depends(status_filter),
    service: RiderService = Depends(get_rider_service),
):
    return await service.list_riders(status.value if status else None)


@router.post("", response_model=InsertResult)
async def apply_as_rider(
    application: RiderApplication,
    service: RiderService = Depends(get_rider_service),
):
    """Submit a rider application; it starts as pending."""
    return await service.apply(application.to_document())


@router.patch("/{rider_id}", response_model=UpdateResult)
async def update_rider_status(
    update: RiderStatusUpdate,
    rider_id: str = Path(..., description="Rider application ID"),
    service: RiderService = Depends(get_rider_service),
):
    """
    Change an application's status.

    Approval also promotes the user account matching ``email`` to rider.
    """
    return await service.update_status(rider_id, update.status, update.email)
