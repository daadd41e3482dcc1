"""
Parcel Service.

CRUD over parcel documents. Listing is filtered by sender email and sorted
newest first; there is no pagination.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo import DESCENDING

from zapshift.app.core.exceptions import ResourceNotFoundError
from zapshift.app.db.mongo import PARCELS, DocumentStore
from zapshift.app.schemas.common import DeleteResult, InsertResult, UpdateResult


class ParcelService:

    def __init__(self, store: DocumentStore):
        self.store = store

    async def list_parcels(self, email: Optional[str] = None) -> List[dict]:
        query = {"senderEmail": email} if email else {}
        return await self.store.find_many(PARCELS, query, sort=[("createdAt", DESCENDING)])

    async def get_parcel(self, parcel_id: str) -> dict:
        parcel = await self.store.find_by_id(PARCELS, parcel_id)
        if parcel is None:
            raise ResourceNotFoundError("Parcel", parcel_id)
        return parcel

    async def create_parcel(self, fields: Dict[str, Any]) -> InsertResult:
        document = dict(fields)
        document["createdAt"] = datetime.now(timezone.utc)
        return await self.store.insert_one(PARCELS, document)

    async def update_parcel(self, parcel_id: str, fields: Dict[str, Any]) -> UpdateResult:
        if not fields:
            # an empty $set is rejected by the server
            existing = await self.store.find_by_id(PARCELS, parcel_id)
            return UpdateResult(matched_count=1 if existing else 0, modified_count=0)
        return await self.store.update_by_id(PARCELS, parcel_id, fields)

    async def delete_parcel(self, parcel_id: str) -> DeleteResult:
        return await self.store.delete_by_id(PARCELS, parcel_id)
