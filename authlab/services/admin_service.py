"""
Administrative inspection and teardown.

None of these operations check a session; the admin router is open.
"""
import logging

from fastapi import HTTPException, status
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from authlab.db.init_db import reset_db
from authlab.models import AuthEventType
from authlab.schemas.admin import UserCreate, UserUpdate
from authlab.schemas.events import PasswordResetDetails
from authlab.services import (
    auth_event_service,
    email_code_service,
    passkey_service,
    session_service,
    totp_service,
    user_service,
)
from authlab.services.auth_event_service import log_event

logger = logging.getLogger(__name__)


def list_users(db: Session):
    return user_service.list_users(db)


def create_user(db: Session, body: UserCreate):
    return user_service.create_user(db, body.username, body.password, body.email)


def get_user_detail(db: Session, user_id: str) -> dict:
    user = user_service.get_user_or_404(db, user_id)
    return {
        "user": user,
        "sessions": session_service.list_sessions_for_user(db, user_id),
        "passkeys": passkey_service.list_passkeys(db, user_id),
        "email_codes": email_code_service.list_email_codes(db, user_id),
        "recent_events": auth_event_service.list_events_for_user(db, user_id, limit=20),
    }


def update_user(db: Session, user_id: str, body: UserUpdate):
    user = user_service.get_user_or_404(db, user_id)
    fields = body.model_dump(exclude_unset=True, exclude_none=True)
    if fields.get("totp_enabled") and not user.totp_secret:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="TOTP secret has not been set up")
    return user_service.update_user(db, user_id, **fields)


def delete_user(db: Session, user_id: str) -> None:
    if not user_service.delete_user(db, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    logger.info("Deleted user %s and everything it owned", user_id)


def reset_password(db: Session, user_id: str, password: str) -> None:
    user_service.update_password(db, user_id, password)
    log_event(db, AuthEventType.PASSWORD_RESET, user_id, PasswordResetDetails(by="admin"))


def force_disable_totp(db: Session, user_id: str) -> None:
    if not totp_service.disable_totp(db, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    log_event(db, AuthEventType.MFA_TOTP_DISABLED, user_id)


def generate_email_code(db: Session, user_id: str):
    user_service.get_user_or_404(db, user_id)
    return email_code_service.create_email_code(db, user_id)


def list_active_email_codes(db: Session, user_id: str):
    user_service.get_user_or_404(db, user_id)
    return email_code_service.list_active_email_codes(db, user_id)


def list_passkeys(db: Session, user_id: str):
    user_service.get_user_or_404(db, user_id)
    return passkey_service.list_passkeys(db, user_id)


def delete_passkey(db: Session, user_id: str, credential_id: str) -> None:
    user_service.get_user_or_404(db, user_id)
    if not passkey_service.delete_passkey(db, user_id, credential_id, by="admin"):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Passkey not found")


def delete_session(db: Session, token: str) -> None:
    if not session_service.delete_session(db, token):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")


def reset_database(engine: Engine) -> None:
    reset_db(engine)
