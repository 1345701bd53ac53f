import logging
from dataclasses import dataclass

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from authlab.core.config import get_settings
from authlab.models import AuthEventType, AuthSession, User
from authlab.schemas.events import LoginFailedDetails
from authlab.services import session_service, user_service
from authlab.services.auth_event_service import log_event
from authlab.services.session_service import ClientInfo

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"


@dataclass
class AuthResult:
    user: User
    session: AuthSession

    @property
    def mfa_required(self) -> bool:
        return not self.session.mfa_verified


def initial_mfa_verified(user: User) -> bool:
    """A password login is complete on its own only when no second factor is configured."""
    return not user.mfa_required


def register(
    db: Session,
    username: str,
    password: str,
    confirm_password: str | None = None,
    email: str | None = None,
    client: ClientInfo | None = None,
) -> AuthResult:
    settings = get_settings()
    if not username or not password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username and password are required")
    if confirm_password is not None and password != confirm_password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Passwords do not match")
    if len(password) < settings.min_password_length:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Password must be at least {settings.min_password_length} characters",
        )

    user = user_service.create_user(db, username, password, email)
    log_event(db, AuthEventType.REGISTER, user.id)

    # No MFA can be configured yet
    session = session_service.create_session(db, user.id, client, mfa_verified=True)
    return AuthResult(user=user, session=session)


def login(db: Session, username: str, password: str, client: ClientInfo | None = None) -> AuthResult:
    if not username or not password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username and password are required")

    user = user_service.get_user_by_username(db, username)
    if not user:
        log_event(db, AuthEventType.LOGIN_FAILED, None, LoginFailedDetails(reason="user_not_found", username=username))
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    if not user_service.verify_password(user, password):
        log_event(db, AuthEventType.LOGIN_FAILED, user.id, LoginFailedDetails(reason="invalid_password"))
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    session = session_service.create_session(db, user.id, client, mfa_verified=initial_mfa_verified(user))
    log_event(db, AuthEventType.LOGIN_SUCCESS, user.id)
    return AuthResult(user=user, session=session)


def logout(db: Session, session: AuthSession) -> None:
    log_event(db, AuthEventType.LOGOUT, session.user_id)
    session_service.delete_session(db, session.id)


def available_mfa_methods(db: Session, user: User) -> list[str]:
    methods = []
    if user.totp_enabled:
        methods.append("totp")
    if user.email_mfa_enabled:
        methods.append("email")
    if user.passkeys:
        methods.append("passkey")
    return methods


def mfa_status(db: Session, session: AuthSession, user: User) -> dict:
    """
    Second factor step for a freshly logged in session.

    A user without TOTP or email codes has nothing to verify, so their session
    is upgraded here instead of being left stuck half way.
    """
    if not session.mfa_verified and not user.mfa_required:
        session_service.mark_mfa_verified(db, session.id)
        logger.info("Session for %s upgraded: no second factor configured", user.id)
    return {
        "mfa_verified": bool(session.mfa_verified),
        "methods": available_mfa_methods(db, user),
    }
