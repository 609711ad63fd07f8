from typing import List, Optional

from beanie import UpdateResponse
from beanie.operators import Set
from fastapi import HTTPException
from pymongo.errors import DuplicateKeyError

from diagnoease.constants import Role
from diagnoease.models import User
from diagnoease.schemas import UpdateAck, UserCreate, UserUpdate
from diagnoease.security import Identity, is_admin
from diagnoease.utils.ids import parse_object_id
from diagnoease.utils.logger import get_logger

logger = get_logger("user_service")

ADMIN_ONLY_FIELDS = {"role", "status"}


async def create_user(data: UserCreate) -> User:
    """Register a user. Self-registration always gets the default role."""
    if await User.find_one(User.email == data.email):
        raise HTTPException(status_code=400, detail="Email already exists")
    user = User(**data.model_dump(), role=Role.USER)
    try:
        await user.insert()
    except DuplicateKeyError:
        # concurrent registration won the unique index
        raise HTTPException(status_code=400, detail="Email already exists")
    logger.info(f"Registered user {user.email} ({user.id})")
    return user


async def list_users() -> List[User]:
    return await User.find_all().to_list()


async def get_user_by_email(email: str) -> Optional[User]:
    return await User.find_one(User.email == email)


async def update_user(user_id: str, data: UserUpdate, identity: Identity) -> UpdateAck:
    """Apply the fields the caller actually sent; role/status need an admin."""
    oid = parse_object_id(user_id)
    fields = data.model_dump(exclude_unset=True, mode="json")
    if ADMIN_ONLY_FIELDS & fields.keys() and not await is_admin(identity.email):
        raise HTTPException(status_code=403, detail="Only admins can change role or status")
    if not fields:
        matched = await User.find(User.id == oid).count()
        return UpdateAck(matchedCount=matched)
    result = await User.find_one(User.id == oid).update(
        Set(fields), response_type=UpdateResponse.UPDATE_RESULT
    )
    if "role" in fields:
        logger.info(f"{identity.email} set role of user {user_id} to {fields['role']}")
    return UpdateAck.from_result(result)
