"""
Rider application schemas.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from zapshift.app.models.enums import RiderStatus


class RiderApplication(BaseModel):
    """Rider application; applicant fields (name, region, license, ...) pass through."""
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    email: Optional[str] = None

    def to_document(self) -> Dict[str, Any]:
        data = self.model_dump(exclude_unset=True)
        for key in ("_id", "status", "createdAt"):
            data.pop(key, None)
        return data


class RiderStatusUpdate(BaseModel):
    status: RiderStatus = Field(..., description="New application status")
    email: Optional[str] = Field(None, description="Applicant's user email, promoted on approval")
