# app/api/v1/deps.py
import jwt
from fastapi import Header, Request

from app.core.errors import AuthError, RateLimitedError, ValidationError
from app.core.rate_limiter import RateLimiter
from app.core.security import decode_access_token, user_id_from_claims
from app.services.payments import PaymentGateway
from app.services.storage import ImageStorage

async def get_current_user_id(
    request: Request,
    authorization: str | None = Header(default=None),
) -> int:
    """
    FastAPI dependency guarding every protected route.

    The Authorization header must be exactly "Bearer <token>". The token is
    verified (signature and expiry) and the numeric `user_id` claim is
    returned and also stored on request.state.user_id. The database is not
    consulted here.

    Raises:
        AuthError (401): AUTH_REQUIRED when the header is missing,
            AUTH_INVALID_TOKEN when it is malformed, the token does not
            verify, or the claim is not a non-negative integer

    Usage:
        @router.get("/protected/thing")
        async def handler(user_id: int = Depends(get_current_user_id)):
            ...
    """
    if not authorization:
        raise AuthError("Missing authentication token", code="AUTH_REQUIRED")

    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        raise AuthError("Invalid authentication token")

    try:
        payload = decode_access_token(parts[1])
    except jwt.InvalidTokenError:
        raise AuthError("Invalid authentication token")

    user_id = user_id_from_claims(payload)
    if user_id is None:
        raise AuthError("Invalid user ID in token")

    request.state.user_id = user_id
    return user_id

def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"

def _enforce_rate_limit(request: Request, limiter: RateLimiter, message: str) -> None:
    if not limiter.is_allowed(client_ip(request)):
        raise RateLimitedError(message)

async def login_rate_limit(request: Request) -> None:
    """Per-IP attempt limit for /public/login (limiter lives on app.state)"""
    _enforce_rate_limit(
        request,
        request.app.state.login_limiter,
        "Too many login attempts, try again in a few minutes",
    )

async def register_rate_limit(request: Request) -> None:
    """Per-IP attempt limit for /public/register (limiter lives on app.state)"""
    _enforce_rate_limit(
        request,
        request.app.state.register_limiter,
        "Too many registration attempts, try again later",
    )

def get_image_storage(request: Request) -> ImageStorage:
    return request.app.state.image_storage

def get_payment_gateway(request: Request) -> PaymentGateway:
    return request.app.state.payment_gateway

def parse_id(raw: str | None, field: str, required: bool = False) -> int | None:
    """
    Parse an optional numeric id taken from a query string or form field.
    Blank means absent; anything that is not a non-negative integer is a 400.
    """
    if raw is None or raw.strip() == "":
        if required:
            raise ValidationError(f"{field} is required")
        return None
    raw = raw.strip()
    if not (raw.isascii() and raw.isdigit()):
        raise ValidationError(f"Invalid {field}")
    return int(raw)
