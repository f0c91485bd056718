# app/schemas/auth.py
"""
Pydantic schemas for authentication and profile endpoints.
Field-level rules (formats, uniqueness) live in app.services.accounts; these
models only describe the shape of requests and responses.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

class RegisterIn(BaseModel):
    """Request model for user registration"""
    username: str  # Store name, letters/digits/spaces
    email: str
    password: str = Field(min_length=6, max_length=128)
    number: str  # Phone number, any formatting; digits are kept

class LoginRequest(BaseModel):
    """Request model for login; users sign in with their email"""
    email: str
    password: str

class TokenOut(BaseModel):
    """Response model for a successful login"""
    token: str  # JWT access token for the Authorization: Bearer header

class UserOut(BaseModel):
    """User information without sensitive fields"""
    id: int
    username: str
    email: str
    number: str
    plan_id: Optional[int] = None  # None means the free tier
    created_at: datetime

class RegisterOut(BaseModel):
    message: str
    user: UserOut

class UpdateMeIn(BaseModel):
    """Partial profile update; omitted fields are left unchanged"""
    username: Optional[str] = None
    email: Optional[str] = None
    number: Optional[str] = None

class UpdateMeOut(BaseModel):
    message: str
    user: UserOut

class ChangePasswordIn(BaseModel):
    current_password: str
    new_password: str = Field(min_length=6, max_length=128)

class MessageOut(BaseModel):
    message: str
