from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class UserCreate(BaseModel):
    """Registration body. Extra profile fields (name, photoURL, ...) are kept."""
    model_config = ConfigDict(extra="allow")

    email: str = Field(..., min_length=3, description="Unique email address")

    def to_document(self) -> Dict[str, Any]:
        data = self.model_dump()
        data.pop("_id", None)
        return data
