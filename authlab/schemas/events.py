"""
Typed payloads attached to audit events.

Each payload carries a ``kind`` tag so stored JSON can be parsed back into the
right model without guessing from the event type.
"""
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter


class LoginFailedDetails(BaseModel):
    kind: Literal["login_failed"] = "login_failed"
    reason: Literal["user_not_found", "invalid_password"]
    username: str | None = None


class MfaFailedDetails(BaseModel):
    kind: Literal["mfa_failed"] = "mfa_failed"
    action: Literal["enable", "verify"]


class EmailCodeSentDetails(BaseModel):
    kind: Literal["email_code_sent"] = "email_code_sent"
    # shown in the admin panel
    code: str


class PasswordResetDetails(BaseModel):
    kind: Literal["password_reset"] = "password_reset"
    by: Literal["admin", "user"] = "admin"


class PasskeyRegisteredDetails(BaseModel):
    kind: Literal["passkey_registered"] = "passkey_registered"
    credential_id: str
    friendly_name: str | None = None


class PasskeyDeletedDetails(BaseModel):
    kind: Literal["passkey_deleted"] = "passkey_deleted"
    credential_id: str
    by: Literal["admin", "user"] = "user"


class PasskeyAuthDetails(BaseModel):
    kind: Literal["passkey_auth"] = "passkey_auth"
    action: Literal["mfa_verified", "logged_in"]
    credential_id: str


class PasskeyFailedDetails(BaseModel):
    kind: Literal["passkey_failed"] = "passkey_failed"
    action: Literal["register", "auth"]
    error: str


EventDetails = Annotated[
    Union[
        LoginFailedDetails,
        MfaFailedDetails,
        EmailCodeSentDetails,
        PasswordResetDetails,
        PasskeyRegisteredDetails,
        PasskeyDeletedDetails,
        PasskeyAuthDetails,
        PasskeyFailedDetails,
    ],
    Field(discriminator="kind"),
]

event_details_adapter = TypeAdapter(EventDetails)


def parse_details(raw: dict | None) -> EventDetails | None:
    if raw is None:
        return None
    return event_details_adapter.validate_python(raw)
