import logging
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.orm import Session

from authlab.core import security
from authlab.core.config import get_settings
from authlab.core.time import utcnow
from authlab.db.repository import Repository
from authlab.models import AuthSession

logger = logging.getLogger(__name__)

sessions = Repository(AuthSession)


@dataclass
class ClientInfo:
    user_agent: str | None = None
    ip_address: str | None = None


def _clip(value: str | None, length: int) -> str | None:
    return value[:length] if value else None


def cleanup_expired_sessions(db: Session) -> int:
    deleted = (
        db.query(AuthSession)
        .filter(AuthSession.expires_at_utc <= utcnow())
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted


def create_session(db: Session, user_id: str, client: ClientInfo | None = None, mfa_verified: bool = False) -> AuthSession:
    client = client or ClientInfo()
    cleanup_expired_sessions(db)
    session = sessions.create(
        db,
        id=security.generate_session_token(),
        user_id=user_id,
        mfa_verified=mfa_verified,
        expires_at_utc=utcnow() + timedelta(hours=get_settings().session_hours),
        user_agent=_clip(client.user_agent, 512),
        ip_address=_clip(client.ip_address, 45),
    )
    logger.debug("Created session for user %s (mfa_verified=%s)", user_id, mfa_verified)
    return session


def get_valid_session(db: Session, token: str | None) -> AuthSession | None:
    if not token:
        return None
    return (
        db.query(AuthSession)
        .filter(AuthSession.id == token, AuthSession.expires_at_utc > utcnow())
        .first()
    )


def mark_mfa_verified(db: Session, token: str) -> bool:
    """Flip the session to verified. Already verified sessions are left alone."""
    updated = (
        db.query(AuthSession)
        .filter(AuthSession.id == token, AuthSession.mfa_verified.is_(False))
        .update({AuthSession.mfa_verified: True}, synchronize_session=False)
    )
    db.commit()
    session = db.get(AuthSession, token)
    if session is not None:
        db.refresh(session)
    return updated > 0


def list_sessions(db: Session) -> list[AuthSession]:
    return sessions.list_all(db)


def list_sessions_for_user(db: Session, user_id: str) -> list[AuthSession]:
    return sessions.list_by_owner(db, user_id)


def delete_session(db: Session, token: str) -> bool:
    return sessions.delete(db, token)


def delete_sessions_for_user(db: Session, user_id: str) -> int:
    return sessions.delete_by_owner(db, user_id)


def delete_all_sessions(db: Session) -> int:
    return sessions.delete_all(db)
