from typing import List, Optional

from fastapi import APIRouter, Depends

from diagnoease.constants import Access
from diagnoease.models import User
from diagnoease.schemas import InsertAck, UpdateAck, UserCreate, UserUpdate
from diagnoease.security import Identity, require, user_owner
from diagnoease.services import user_service

router = APIRouter(tags=["users"])


@router.post("/user", response_model=InsertAck)
async def create_user(payload: UserCreate):
    """Public registration."""
    user = await user_service.create_user(payload)
    return InsertAck(insertedId=str(user.id))


@router.get(
    "/users",
    response_model=List[User],
    dependencies=[Depends(require(Access.ADMIN_ONLY))],
)
async def list_users():
    return await user_service.list_users()


@router.get(
    "/user/{email}",
    response_model=Optional[User],
    dependencies=[Depends(require(Access.SELF_OR_ADMIN))],
)
async def get_user(email: str):
    """Profile by email; null when there is no such user."""
    return await user_service.get_user_by_email(email)


@router.patch("/user/{user_id}", response_model=UpdateAck)
async def update_user(
    user_id: str,
    payload: UserUpdate,
    identity: Identity = Depends(require(Access.SELF_OR_ADMIN, owner=user_owner)),
):
    return await user_service.update_user(user_id, payload, identity)
