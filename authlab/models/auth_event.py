"""
Authentication audit trail
"""
import enum
import uuid

from sqlalchemy import JSON, Column, DateTime, Enum, ForeignKey, String

from authlab.core.time import utcnow
from authlab.db.base import Base


class AuthEventType(str, enum.Enum):
    """Types of authentication events"""
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    LOGOUT = "logout"
    REGISTER = "register"
    PASSWORD_RESET = "password_reset"
    MFA_TOTP_ENABLED = "mfa_totp_enabled"
    MFA_TOTP_DISABLED = "mfa_totp_disabled"
    MFA_TOTP_VERIFIED = "mfa_totp_verified"
    MFA_TOTP_FAILED = "mfa_totp_failed"
    MFA_EMAIL_ENABLED = "mfa_email_enabled"
    MFA_EMAIL_DISABLED = "mfa_email_disabled"
    MFA_EMAIL_SENT = "mfa_email_sent"
    MFA_EMAIL_VERIFIED = "mfa_email_verified"
    MFA_EMAIL_FAILED = "mfa_email_failed"
    PASSKEY_REGISTERED = "passkey_registered"
    PASSKEY_DELETED = "passkey_deleted"
    PASSKEY_AUTH_SUCCESS = "passkey_auth_success"
    PASSKEY_AUTH_FAILED = "passkey_auth_failed"


class AuthEvent(Base):
    """Append-only record of every security relevant outcome"""
    __tablename__ = "auth_events"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    event_type = Column(Enum(AuthEventType, values_callable=lambda e: [m.value for m in e]), nullable=False)
    details = Column(JSON, nullable=True)
    created_at_utc = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
