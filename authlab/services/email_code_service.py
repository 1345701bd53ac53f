import logging
from datetime import timedelta

from sqlalchemy.orm import Session

from authlab.core import security
from authlab.core.config import get_settings
from authlab.core.time import utcnow
from authlab.db.repository import Repository
from authlab.models import EmailCode
from authlab.services.user_service import get_user_or_404, users

logger = logging.getLogger(__name__)

codes = Repository(EmailCode)


def create_email_code(db: Session, user_id: str) -> EmailCode:
    """Issue a fresh code; every earlier unused code for the user stops working."""
    now = utcnow()
    try:
        db.query(EmailCode).filter(
            EmailCode.user_id == user_id, EmailCode.used.is_(False)
        ).update({EmailCode.used: True}, synchronize_session=False)
        email_code = EmailCode(
            user_id=user_id,
            code=security.generate_numeric_code(6),
            expires_at_utc=now + timedelta(minutes=get_settings().email_code_minutes),
            created_at_utc=now,
        )
        db.add(email_code)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(email_code)
    logger.debug("Email code for user %s: %s", user_id, email_code.code)
    return email_code


def verify_email_code(db: Session, user_id: str, code: str) -> bool:
    """
    Consume a code. The match and the used flag flip happen in one statement,
    so two concurrent attempts with the same code cannot both succeed.
    """
    if not code:
        return False
    consumed = (
        db.query(EmailCode)
        .filter(
            EmailCode.user_id == user_id,
            EmailCode.code == code,
            EmailCode.used.is_(False),
            EmailCode.expires_at_utc > utcnow(),
        )
        .update({EmailCode.used: True}, synchronize_session=False)
    )
    db.commit()
    if consumed != 1:
        logger.info("Email code rejected for user %s", user_id)
    return consumed == 1


def list_active_email_codes(db: Session, user_id: str) -> list[EmailCode]:
    return (
        db.query(EmailCode)
        .filter(EmailCode.user_id == user_id, EmailCode.used.is_(False), EmailCode.expires_at_utc > utcnow())
        .order_by(EmailCode.created_at_utc.desc())
        .all()
    )


def list_email_codes(db: Session, user_id: str) -> list[EmailCode]:
    return codes.list_by_owner(db, user_id)


def set_email_mfa(db: Session, user_id: str, enabled: bool):
    get_user_or_404(db, user_id)
    return users.update_fields(db, user_id, email_mfa_enabled=enabled)
