from typing import List, Optional

from pydantic import BaseModel, Field


class CodeRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=16)


class TotpSetupResponse(BaseModel):
    success: bool = True
    secret: str
    otpauth_url: str
    qr_code_data_url: str


class MfaStatusResponse(BaseModel):
    mfa_verified: bool
    methods: List[str]


class EmailCodeSentResponse(BaseModel):
    success: bool = True
    message: str
    # only populated while the harness exposes codes
    code: Optional[str] = None


class ActionResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
