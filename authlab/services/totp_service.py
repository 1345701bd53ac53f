"""TOTP second factor: NONE -> PENDING (secret stored) -> ENABLED (confirmed)."""
from dataclasses import dataclass

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from authlab.core.mfa import TotpAdapter, qr_data_url
from authlab.services.user_service import get_user, get_user_or_404, users


@dataclass
class TotpSetup:
    secret: str
    otpauth_url: str
    qr_code_data_url: str


def setup_totp(db: Session, user_id: str, totp: TotpAdapter) -> TotpSetup:
    user = get_user_or_404(db, user_id)
    secret = totp.generate_secret()
    otpauth_url = totp.provisioning_uri(user.username, secret)

    # Store the secret but don't enable TOTP until the user proves they scanned it
    users.update_fields(db, user.id, totp_secret=secret)
    return TotpSetup(secret=secret, otpauth_url=otpauth_url, qr_code_data_url=qr_data_url(otpauth_url))


def verify_totp_and_enable(db: Session, user_id: str, code: str, totp: TotpAdapter) -> bool:
    user = get_user(db, user_id)
    if not user or not user.totp_secret:
        return False
    if not totp.verify(code, user.totp_secret):
        return False
    users.update_fields(db, user.id, totp_enabled=True)
    return True


def verify_totp(db: Session, user_id: str, code: str, totp: TotpAdapter) -> bool:
    user = get_user(db, user_id)
    if not user or not user.totp_enabled or not user.totp_secret:
        return False
    return totp.verify(code, user.totp_secret)


def current_totp_code(db: Session, user_id: str, totp: TotpAdapter) -> dict:
    user = get_user_or_404(db, user_id)
    if not user.totp_secret:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="TOTP not configured")
    return {
        "code": totp.current_code(user.totp_secret),
        "remaining_seconds": totp.seconds_remaining(),
        "totp_enabled": bool(user.totp_enabled),
    }


def disable_totp(db: Session, user_id: str) -> bool:
    user = get_user(db, user_id)
    if not user:
        return False
    users.update_fields(db, user.id, totp_enabled=False, totp_secret=None)
    return True
