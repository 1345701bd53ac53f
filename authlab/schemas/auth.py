from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    username: str
    password: str


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=150)
    password: str
    confirm_password: str
    email: Optional[EmailStr] = None


class SessionOut(BaseModel):
    mfa_verified: bool
    expires_at_utc: datetime

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    success: bool = True
    user_id: str
    mfa_required: bool
    next: str = Field(..., description="Where the client should go next")


class StatusUser(BaseModel):
    id: str
    username: str
    email: Optional[str] = None
    totp_enabled: bool
    email_mfa_enabled: bool

    model_config = {"from_attributes": True}


class StatusResponse(BaseModel):
    authenticated: bool
    user: Optional[StatusUser] = None
    session: Optional[SessionOut] = None
