"""
Write-result schemas shared by every collection.

Field names are camelCase on the wire, matching the driver result shape the
web client already consumes (``insertedId``, ``modifiedCount``, ...).
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InsertResult(CamelModel):
    acknowledged: bool = True
    inserted_id: str


class UpdateResult(CamelModel):
    acknowledged: bool = True
    matched_count: int
    modified_count: int
    upserted_count: int = 0
    upserted_id: Optional[str] = None


class DeleteResult(CamelModel):
    acknowledged: bool = True
    deleted_count: int


class MessageResponse(BaseModel):
    message: str
