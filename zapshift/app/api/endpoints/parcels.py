"""
Parcel API Endpoints.

Senders submit, list, edit and remove parcels.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Path, Query

from zapshift.app.core.dependencies import get_parcel_service
from zapshift.app.schemas.common import DeleteResult, InsertResult, UpdateResult
from zapshift.app.schemas.parcel import ParcelCreate, ParcelUpdate
from zapshift.app.services.parcel_service import ParcelService

router = APIRouter(prefix="/parcels", tags=["Parcels"])


@router.get("", response_model=List[Dict[str, Any]])
async def list_parcels(
    email: Optional[str] = Query(None, description="Only parcels sent by this email"),
    service: ParcelService = Depends(get_parcel_service),
):
    """List parcels, newest first."""
    return await service.list_parcels(email)


@router.get("/{parcel_id}", response_model=Dict[str, Any])
async def get_parcel(
    parcel_id: str = Path(..., description="Parcel ID"),
    service: ParcelService = Depends(get_parcel_service),
):
    """Get one parcel; 404 if it does not exist."""
    return await service.get_parcel(parcel_id)


@router.post("", response_model=InsertResult)
async def create_parcel(
    parcel_data: ParcelCreate,
    service: ParcelService = Depends(get_parcel_service),
):
    """Submit a parcel. Any extra fields the client sends are stored as-is."""
    return await service.create_parcel(parcel_data.to_document())


@router.patch("/{parcel_id}", response_model=UpdateResult)
async def update_parcel(
    parcel_data: ParcelUpdate,
    parcel_id: str = Path(..., description="Parcel ID"),
    service: ParcelService = Depends(get_parcel_service),
):
    """Merge the provided fields into the parcel."""
    return await service.update_parcel(parcel_id, parcel_data.to_document())


@router.delete("/{parcel_id}", response_model=DeleteResult)
async def delete_parcel(
    parcel_id: str = Path(..., description="Parcel ID"),
    service: ParcelService = Depends(get_parcel_service),
):
    return await service.delete_parcel(parcel_id)
