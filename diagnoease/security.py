from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from pydantic import BaseModel, Field

from diagnoease.config import get_settings
from diagnoease.constants import Access, Role
from diagnoease.models import Appointment, User
from diagnoease.utils.ids import try_object_id
from diagnoease.utils.logger import get_logger

settings = get_settings()
logger = get_logger("security")

# tokenUrl is only used by the Swagger "Authorize" dialog
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/jwt")

UNAUTHORIZED_DETAIL = "Unauthorized access"
FORBIDDEN_DETAIL = "Forbidden access"


class Identity(BaseModel):
    """Claims decoded from a verified access token."""
    email: str
    claims: Dict[str, Any] = Field(default_factory=dict)


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=UNAUTHORIZED_DETAIL,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _forbidden() -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=FORBIDDEN_DETAIL)


# ------------------------ JWT helpers ------------------------


def create_access_token(email: str, expires_delta: Optional[timedelta] = None) -> str:
    """Sign an access token carrying only the email claim (365 days by default)."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS))
    to_encode = {"email": email, "iat": now, "exp": expire, "type": "access"}
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str, token_type: str = "access") -> dict:
    """Decode JWT token and verify signature, expiry and type."""
    try:
        payload = jwt.decode(
            token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError as e:
        logger.info(f"Rejected token: {e}")
        raise _unauthorized()
    if payload.get("type") != token_type:
        raise _unauthorized()
    return payload


# ------------------------ Auth Guard ------------------------


async def get_identity(token: str = Depends(oauth2_scheme)) -> Identity:
    """Verify the bearer token and return the caller's identity.
    Raises 401 if the token is empty, invalid, expired, or carries no email.
    """
    if not token:
        raise _unauthorized()
    payload = decode_token(token, token_type="access")
    email = payload.get("email")
    if not isinstance(email, str) or not email:
        raise _unauthorized()
    return Identity(email=email, claims=payload)


# ------------------------ Role Guard ------------------------


async def is_admin(email: str) -> bool:
    """One users lookup per call; roles are never cached."""
    user = await User.find_one(User.email == email)
    return user is not None and user.role == Role.ADMIN


# ------------------------ Authorization policies ------------------------

OwnerResolver = Callable[[Request], Awaitable[Optional[str]]]


def path_owner(param: str = "email") -> OwnerResolver:
    """Owner is the email given in a path parameter."""

    async def resolve(request: Request) -> Optional[str]:
        return request.path_params.get(param)

    return resolve


async def user_owner(request: Request) -> Optional[str]:
    """Owner of /user/{user_id}: the email stored on that user."""
    oid = try_object_id(request.path_params.get("user_id", ""))
    if oid is None:
        return None
    user = await User.get(oid)
    return user.email if user else None


async def appointment_owner(request: Request) -> Optional[str]:
    """Owner of /booking/{appointment_id}: the email embedded in the appointment."""
    oid = try_object_id(request.path_params.get("appointment_id", ""))
    if oid is None:
        return None
    appointment = await Appointment.get(oid)
    return appointment.user.email if appointment else None


async def evaluate_access(access: Access, identity: Optional[Identity], owner_email: Optional[str] = None) -> None:
    """Single evaluation point for every route policy.

    SELF_OR_ADMIN with no resolvable owner lets the request through; the
    handler then reports zero affected documents or null.
    """
    if access == Access.PUBLIC:
        return
    if identity is None:
        raise _unauthorized()
    if access == Access.AUTHENTICATED:
        return
    if access == Access.SELF_OR_ADMIN:
        if owner_email is None or owner_email == identity.email:
            return
        if await is_admin(identity.email):
            return
        logger.warning(f"{identity.email} denied access to resource owned by {owner_email}")
        raise _forbidden()
    if access == Access.ADMIN_ONLY:
        if await is_admin(identity.email):
            return
        logger.warning(f"{identity.email} denied admin-only access")
        raise _forbidden()
    raise ValueError(f"Unknown access policy: {access}")


def require(access: Access, owner: Optional[OwnerResolver] = None) -> Callable:
    """FastAPI dependency factory attaching a policy to a route.
    Usage: Depends(require(Access.ADMIN_ONLY))
           Depends(require(Access.SELF_OR_ADMIN, owner=appointment_owner))
    """
    if access == Access.PUBLIC:

        async def public() -> None:
            return None

        return public

    resolve_owner = owner or path_owner("email")

    async def checker(request: Request, identity: Identity = Depends(get_identity)) -> Identity:
        owner_email = await resolve_owner(request) if access == Access.SELF_OR_ADMIN else None
        await evaluate_access(access, identity, owner_email)
        return identity

    return checker
