"""
Parcel Pydantic schemas.

Parcels carry arbitrary caller-supplied fields; only the few fields the
payment flow reads are typed.
"""

from typing import Any, Dict, Optional

from pydantic import ConfigDict, Field

from zapshift.app.schemas.common import CamelModel

SERVER_MANAGED_FIELDS = ("_id", "createdAt")


class ParcelFields(CamelModel):
    model_config = ConfigDict(extra="allow")

    sender_email: Optional[str] = Field(None, description="Sender email address")
    parcel_name: Optional[str] = Field(None, description="Parcel name / description")
    cost: Optional[float] = Field(None, ge=0, description="Shipping cost in whole currency units")

    def to_document(self) -> Dict[str, Any]:
        """Caller-supplied fields only, camelCased, without server-managed keys."""
        data = self.model_dump(by_alias=True, exclude_unset=True)
        for key in SERVER_MANAGED_FIELDS:
            data.pop(key, None)
        return data


class ParcelCreate(ParcelFields):
    """Schema for submitting a new parcel."""


class ParcelUpdate(ParcelFields):
    """Schema for a partial parcel update; only provided fields change."""
