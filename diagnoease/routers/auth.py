from fastapi import APIRouter, Request, Response

from diagnoease.config import get_settings
from diagnoease.rate_limit import limiter
from diagnoease.schemas import SuccessOut, TokenOut, TokenRequest
from diagnoease.security import create_access_token
from diagnoease.utils.logger import get_logger

router = APIRouter(tags=["auth"])
settings = get_settings()
logger = get_logger("auth")

TOKEN_COOKIE = "token"


@router.post("/jwt", response_model=TokenOut)
@limiter.limit(settings.TOKEN_RATE_LIMIT)
async def issue_token(request: Request, payload: TokenRequest):
    """Issue an access token for the email the client signed in with.

    Sign-in itself happens at the client's identity provider; this endpoint
    does not check credentials, so only the email claim is ever signed.
    """
    token = create_access_token(payload.email)
    logger.info(
        f"Issued token for {payload.email} "
        f"(client {request.client.host if request.client else 'unknown'})"
    )
    return TokenOut(token=token)


@router.post("/logout", response_model=SuccessOut)
async def logout(response: Response):
    """Clear the legacy token cookie. Header tokens simply expire."""
    response.delete_cookie(
        TOKEN_COOKIE,
        httponly=True,
        secure=settings.is_production,
        samesite="none" if settings.is_production else "strict",
    )
    return SuccessOut(success=True)
