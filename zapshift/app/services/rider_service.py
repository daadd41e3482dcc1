"""
Rider Service.

Rider applications start as ``pending``. Approving one promotes the linked
user account to the ``rider`` role. The two writes are not transactional:
if the role update fails, the rider stays approved, the failure is logged
and the request errors out.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from zapshift.app.db.mongo import RIDERS, USERS, DocumentStore
from zapshift.app.models.enums import RiderStatus, UserRole
from zapshift.app.schemas.common import InsertResult, UpdateResult

logger = logging.getLogger("zapshift.riders")


class RiderService:

    def __init__(self, store: DocumentStore):
        self.store = store

    async def list_riders(self, status: Optional[str] = None) -> List[dict]:
        query = {"status": status} if status else {}
        return await self.store.find_many(RIDERS, query)

    async def apply(self, fields: Dict[str, Any]) -> InsertResult:
        rider = dict(fields)
        rider["status"] = RiderStatus.PENDING.value
        rider["createdAt"] = datetime.now(timezone.utc)
        return await self.store.insert_one(RIDERS, rider)

    async def update_status(self, rider_id: str, status: RiderStatus, email: Optional[str] = None) -> UpdateResult:
        result = await self.store.update_by_id(
            RIDERS,
            rider_id,
            {"status": status.value, "updatedAt": datetime.now(timezone.utc)},
        )

        if status == RiderStatus.APPROVED:
            if result.matched_count == 0:
                logger.warning("Approval for unknown rider %s; no user role promoted", rider_id)
                return result
            if not email:
                logger.warning("Rider %s approved without an email; no user role promoted", rider_id)
                return result
            try:
                promoted = await self.store.update_one(USERS, {"email": email}, {"role": UserRole.RIDER.value})
            except Exception:
                logger.exception("Rider %s approved but role promotion for %s failed", rider_id, email)
                raise
            if promoted.matched_count == 0:
                logger.info("Rider %s approved; no user account for %s", rider_id, email)
            else:
                logger.info("Promoted %s to rider", email)

        return result
