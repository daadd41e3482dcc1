"""
Document store gateway.

Wraps the four MongoDB collections (users, parcels, payments, riders) behind
generic find/insert/update/delete helpers. The gateway receives an already
constructed database handle, so tests can pass an in-memory fake.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, AsyncMongoClient

from zapshift.app.core.config import Settings
from zapshift.app.core.exceptions import InvalidIdentifierError
from zapshift.app.schemas.common import DeleteResult, InsertResult, UpdateResult

logger = logging.getLogger("zapshift.db")

USERS = "users"
PARCELS = "parcels"
PAYMENTS = "payments"
RIDERS = "riders"

SortSpec = Sequence[Tuple[str, int]]


def to_object_id(value: Any) -> ObjectId:
    """Parse a 24-hex string into an ObjectId, raising InvalidIdentifierError."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        raise InvalidIdentifierError(value)


def serialize_document(doc: Optional[dict]) -> Optional[dict]:
    if doc is None:
        return None
    d = dict(doc)
    if isinstance(d.get("_id"), ObjectId):
        d["_id"] = str(d["_id"])
    return d


class DocumentStore:
    """Generic CRUD over the service's collections."""

    def __init__(self, database, client: Optional[AsyncMongoClient] = None):
        self.database = database
        self.client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "DocumentStore":
        client = AsyncMongoClient(settings.database_url, tz_aware=True)
        return cls(client[settings.database_name], client=client)

    def collection(self, name: str):
        return self.database[name]

    async def ensure_indexes(self) -> None:
        """Create the uniqueness constraints the services rely on."""
        await self.collection(PAYMENTS).create_index(
            [("transactionId", ASCENDING)], unique=True, name="uniq_transaction_id"
        )
        await self.collection(USERS).create_index(
            [("email", ASCENDING)], unique=True, name="uniq_user_email"
        )
        logger.info("Indexes ensured on %s and %s", PAYMENTS, USERS)

    async def ping(self) -> bool:
        try:
            await self.database.command("ping")
            return True
        except Exception as exc:
            logger.warning("Database ping failed: %s", exc)
            return False

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()

    # Reads

    async def find_many(
        self,
        name: str,
        query: Optional[Dict[str, Any]] = None,
        sort: Optional[SortSpec] = None,
    ) -> List[dict]:
        cursor = self.collection(name).find(query or {}, sort=list(sort) if sort else None)
        docs = await cursor.to_list(length=None)
        return [serialize_document(doc) for doc in docs]

    async def find_one(self, name: str, query: Dict[str, Any]) -> Optional[dict]:
        doc = await self.collection(name).find_one(query)
        return serialize_document(doc)

    async def find_by_id(self, name: str, document_id: str) -> Optional[dict]:
        return await self.find_one(name, {"_id": to_object_id(document_id)})

    # Writes

    async def insert_one(self, name: str, document: Dict[str, Any]) -> InsertResult:
        result = await self.collection(name).insert_one(document)
        return InsertResult(acknowledged=result.acknowledged, inserted_id=str(result.inserted_id))

    async def update_one(self, name: str, query: Dict[str, Any], fields: Dict[str, Any]) -> UpdateResult:
        result = await self.collection(name).update_one(query, {"$set": fields})
        upserted_id = result.upserted_id
        return UpdateResult(
            acknowledged=result.acknowledged,
            matched_count=result.matched_count,
            modified_count=result.modified_count,
            upserted_count=1 if upserted_id is not None else 0,
            upserted_id=str(upserted_id) if upserted_id is not None else None,
        )

    async def update_by_id(self, name: str, document_id: str, fields: Dict[str, Any]) -> UpdateResult:
        return await self.update_one(name, {"_id": to_object_id(document_id)}, fields)

    async def delete_by_id(self, name: str, document_id: str) -> DeleteResult:
        result = await self.collection(name).delete_one({"_id": to_object_id(document_id)})
        return DeleteResult(acknowledged=result.acknowledged, deleted_count=result.deleted_count)
