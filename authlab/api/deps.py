from fastapi import Depends, HTTPException, Request, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from authlab.core.config import Settings
from authlab.core.mfa import TotpAdapter
from authlab.core.passkeys import PasskeyAdapter
from authlab.models import AuthSession, User
from authlab.services import session_service
from authlab.services.session_service import ClientInfo


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_totp(request: Request) -> TotpAdapter:
    return request.app.state.totp


def get_passkeys(request: Request) -> PasskeyAdapter:
    return request.app.state.passkeys


def client_info(request: Request) -> ClientInfo:
    forwarded = request.headers.get("x-forwarded-for") or request.headers.get("x-real-ip")
    ip_address = forwarded.split(",")[0].strip() if forwarded else None
    if not ip_address and request.client:
        ip_address = request.client.host
    return ClientInfo(user_agent=request.headers.get("user-agent"), ip_address=ip_address)


def get_optional_session(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> AuthSession | None:
    return session_service.get_valid_session(db, request.cookies.get(settings.session_cookie_name))


def require_session(session: AuthSession | None = Depends(get_optional_session)) -> AuthSession:
    if session is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return session


def require_verified_session(session: AuthSession = Depends(require_session)) -> AuthSession:
    if not session.mfa_verified:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="MFA verification required")
    return session


def get_current_user(session: AuthSession = Depends(require_session)) -> User:
    if session.user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return session.user


def get_verified_user(session: AuthSession = Depends(require_verified_session)) -> User:
    return get_current_user(session)


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        path="/",
        max_age=settings.session_hours * 60 * 60,
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(key=settings.session_cookie_name, path="/")
