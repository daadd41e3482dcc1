"""
User Service.

Registration is idempotent by email: a second registration for the same
address returns a message and leaves the stored record untouched.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Union

from pymongo.errors import DuplicateKeyError

from zapshift.app.db.mongo import USERS, DocumentStore
from zapshift.app.models.enums import UserRole
from zapshift.app.schemas.common import InsertResult, MessageResponse

logger = logging.getLogger("zapshift.users")

USER_EXISTS = MessageResponse(message="User already exists")


class UserService:

    def __init__(self, store: DocumentStore):
        self.store = store

    async def register_user(self, fields: Dict[str, Any]) -> Union[InsertResult, MessageResponse]:
        email = fields["email"]
        if await self.store.find_one(USERS, {"email": email}):
            return USER_EXISTS

        user = dict(fields)
        user["role"] = UserRole.USER.value
        user["createdAt"] = datetime.now(timezone.utc)
        try:
            result = await self.store.insert_one(USERS, user)
        except DuplicateKeyError:
            logger.info("Concurrent registration for %s lost the race", email)
            return USER_EXISTS

        logger.info("Registered user %s", email)
        return result
