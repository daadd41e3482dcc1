from typing import Union

from fastapi import APIRouter, Depends

from zapshift.app.core.dependencies import get_user_service
from zapshift.app.schemas.common import InsertResult, MessageResponse
from zapshift.app.schemas.user import UserCreate
from zapshift.app.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("", response_model=Union[InsertResult, MessageResponse])
async def register_user(
    user_data: UserCreate,
    service: UserService = Depends(get_user_service),
):
    """Register a user once per email; repeats return a message instead."""
    return await service.register_user(user_data.to_document())
