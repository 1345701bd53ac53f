from .user import User
from .session import AuthSession
from .passkey import PasskeyCredential
from .challenge import ChallengePurpose, WebAuthnChallenge
from .email_code import EmailCode
from .auth_event import AuthEvent, AuthEventType

__all__ = [
    "User",
    "AuthSession",
    "PasskeyCredential",
    "ChallengePurpose",
    "WebAuthnChallenge",
    "EmailCode",
    "AuthEvent",
    "AuthEventType",
]
