from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from authlab.models.auth_event import AuthEventType
from authlab.schemas.events import EventDetails, parse_details
from authlab.schemas.passkeys import PasskeyOut


class UserOut(BaseModel):
    id: str
    username: str
    email: Optional[str] = None
    totp_enabled: bool
    email_mfa_enabled: bool
    created_at_utc: datetime

    model_config = {"from_attributes": True}


class UserSecretsOut(UserOut):
    totp_secret: Optional[str] = None


class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=150)
    password: str = Field(..., min_length=1)
    email: Optional[EmailStr] = None


class UserUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=1, max_length=150)
    email: Optional[EmailStr] = None
    totp_enabled: Optional[bool] = None
    email_mfa_enabled: Optional[bool] = None


class PasswordResetRequest(BaseModel):
    password: str = Field(..., min_length=1)


class SessionAdminOut(BaseModel):
    id: str
    user_id: str
    mfa_verified: bool
    expires_at_utc: datetime
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None
    created_at_utc: datetime

    model_config = {"from_attributes": True}


class EmailCodeOut(BaseModel):
    id: str
    code: str
    expires_at_utc: datetime
    used: bool
    created_at_utc: datetime

    model_config = {"from_attributes": True}


class AuthEventOut(BaseModel):
    id: str
    user_id: Optional[str] = None
    event_type: AuthEventType
    details: Optional[EventDetails] = None
    created_at_utc: datetime

    model_config = {"from_attributes": True}

    @field_validator("details", mode="before")
    @classmethod
    def _parse_details(cls, value: Any):
        if isinstance(value, dict):
            return parse_details(value)
        return value


class UserDetailOut(BaseModel):
    user: UserSecretsOut
    sessions: List[SessionAdminOut]
    passkeys: List[PasskeyOut]
    email_codes: List[EmailCodeOut]
    recent_events: List[AuthEventOut]


class TotpCodeOut(BaseModel):
    code: str
    remaining_seconds: int
    totp_enabled: bool


class DeletedCount(BaseModel):
    success: bool = True
    deleted_count: int
