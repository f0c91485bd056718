# app/api/v1/routers/auth.py
from fastapi import APIRouter, Depends, status

from app.api.v1.deps import get_current_user_id, login_rate_limit, register_rate_limit
from app.schemas.auth import (
    ChangePasswordIn,
    LoginRequest,
    MessageOut,
    RegisterIn,
    RegisterOut,
    TokenOut,
    UpdateMeIn,
    UpdateMeOut,
    UserOut,
)
from app.services import accounts

router = APIRouter(tags=["auth"])

@router.post(
    "/public/register",
    response_model=RegisterOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(register_rate_limit)],
)
async def register(body: RegisterIn):
    """
    Register a new store owner account.

    Username is sanitised (trimmed, HTML-escaped, max 50 chars), email is
    lowercased and the phone number reduced to its digits before the
    uniqueness checks. The password is hashed before storage.

    Returns:
        201 with the created user

    Raises:
        400: invalid field (VALIDATION_ERROR) or duplicate username, email or
            number (USERNAME_EXISTS / EMAIL_EXISTS / NUMBER_EXISTS)
        429: too many registration attempts from this IP
    """
    u = await accounts.register_user(body.username, body.email, body.password, body.number)
    return {"message": "User registered successfully", "user": accounts.user_to_dict(u)}

@router.post("/public/login", response_model=TokenOut, dependencies=[Depends(login_rate_limit)])
async def login(payload: LoginRequest):
    """
    Authenticate with email and password and return a JWT access token.

    Raises:
        400: malformed email or over-long password
        401: AUTH_INVALID_CREDENTIALS (unknown email or wrong password)
        429: too many login attempts from this IP
    """
    token = await accounts.authenticate(payload.email, payload.password)
    return {"token": token}

@router.get("/protected/me", response_model=UserOut)
async def me(user_id: int = Depends(get_current_user_id)):
    """Return the authenticated user's profile."""
    return accounts.user_to_dict(await accounts.get_user(user_id))

@router.put("/protected/me", response_model=UpdateMeOut)
async def update_me(body: UpdateMeIn, user_id: int = Depends(get_current_user_id)):
    """
    Partially update the authenticated user's profile.

    Only username, email and number present in the body are changed; the
    same validation and uniqueness rules as registration apply.
    """
    u = await accounts.update_profile(user_id, body.model_dump(exclude_unset=True))
    return {"message": "Profile updated successfully", "user": accounts.user_to_dict(u)}

@router.put("/protected/me/password", response_model=MessageOut)
async def change_password(body: ChangePasswordIn, user_id: int = Depends(get_current_user_id)):
    """
    Change the authenticated user's password.

    The current password must be supplied and match (401 otherwise).
    """
    await accounts.change_password(user_id, body.current_password, body.new_password)
    return {"message": "Password changed successfully"}
