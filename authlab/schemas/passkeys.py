from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class AuthenticationOptionsRequest(BaseModel):
    username: Optional[str] = Field(None, description="Narrows the allow list when no session exists")


class CeremonyOptionsResponse(BaseModel):
    success: bool = True
    options: Dict[str, Any]
    request_token: str


class RegistrationVerifyRequest(BaseModel):
    response: Dict[str, Any]
    request_token: str = Field(..., min_length=1)
    friendly_name: Optional[str] = Field(None, max_length=255)


class AuthenticationVerifyRequest(BaseModel):
    response: Dict[str, Any]
    request_token: str = Field(..., min_length=1)


class AuthenticationVerifyResponse(BaseModel):
    success: bool = True
    action: str


class PasskeyOut(BaseModel):
    id: str
    friendly_name: Optional[str] = None
    device_type: Optional[str] = None
    backed_up: bool
    counter: int
    transports: Optional[List[str]] = None
    created_at_utc: datetime
    last_used_at_utc: Optional[datetime] = None

    model_config = {"from_attributes": True}
