from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from authlab.api.deps import (
    clear_session_cookie,
    client_info,
    get_app_settings,
    get_db,
    get_optional_session,
    require_session,
    set_session_cookie,
)
from authlab.core.config import Settings
from authlab.models import AuthSession
from authlab.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, SessionOut, StatusResponse, StatusUser
from authlab.schemas.mfa import ActionResponse
from authlab.services import auth_service
from authlab.services.session_service import ClientInfo

router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_response(result: auth_service.AuthResult) -> AuthResponse:
    return AuthResponse(
        user_id=result.user.id,
        mfa_required=result.mfa_required,
        next="/mfa/verify" if result.mfa_required else "/dashboard",
    )


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    client: ClientInfo = Depends(client_info),
    settings: Settings = Depends(get_app_settings),
):
    result = auth_service.login(db, body.username, body.password, client)
    set_session_cookie(response, result.session.id, settings)
    return _auth_response(result)


@router.post("/register", response_model=AuthResponse)
def register(
    body: RegisterRequest,
    response: Response,
    db: Session = Depends(get_db),
    client: ClientInfo = Depends(client_info),
    settings: Settings = Depends(get_app_settings),
):
    result = auth_service.register(
        db, body.username, body.password, body.confirm_password, body.email, client
    )
    set_session_cookie(response, result.session.id, settings)
    return _auth_response(result)


@router.post("/logout", response_model=ActionResponse)
def logout(
    response: Response,
    db: Session = Depends(get_db),
    session: AuthSession = Depends(require_session),
    settings: Settings = Depends(get_app_settings),
):
    auth_service.logout(db, session)
    clear_session_cookie(response, settings)
    return ActionResponse(message="Logged out")


@router.get("/status", response_model=StatusResponse)
def auth_status(session: AuthSession | None = Depends(get_optional_session)):
    if session is None or session.user is None:
        return StatusResponse(authenticated=False)
    return StatusResponse(
        authenticated=True,
        user=StatusUser.model_validate(session.user),
        session=SessionOut.model_validate(session),
    )
