from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from authlab.api.deps import (
    client_info,
    get_app_settings,
    get_db,
    get_optional_session,
    get_passkeys,
    get_verified_user,
    set_session_cookie,
)
from authlab.core.config import Settings
from authlab.core.passkeys import PasskeyAdapter
from authlab.models import AuthSession, User
from authlab.schemas.mfa import ActionResponse
from authlab.schemas.passkeys import (
    AuthenticationOptionsRequest,
    AuthenticationVerifyRequest,
    AuthenticationVerifyResponse,
    CeremonyOptionsResponse,
    PasskeyOut,
    RegistrationVerifyRequest,
)
from authlab.services import passkey_service, user_service
from authlab.services.session_service import ClientInfo

router = APIRouter(prefix="/webauthn", tags=["webauthn"])


@router.post("/register/options", response_model=CeremonyOptionsResponse)
def registration_options(
    db: Session = Depends(get_db),
    user: User = Depends(get_verified_user),
    passkeys: PasskeyAdapter = Depends(get_passkeys),
):
    options, request_token = passkey_service.begin_registration(db, user, passkeys)
    return CeremonyOptionsResponse(options=options, request_token=request_token)


@router.post("/register/verify", response_model=PasskeyOut)
def registration_verify(
    body: RegistrationVerifyRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_verified_user),
    passkeys: PasskeyAdapter = Depends(get_passkeys),
):
    return passkey_service.finish_registration(
        db, user, body.response, body.request_token, body.friendly_name, passkeys
    )


@router.post("/auth/options", response_model=CeremonyOptionsResponse)
def authentication_options(
    body: AuthenticationOptionsRequest | None = None,
    db: Session = Depends(get_db),
    session: AuthSession | None = Depends(get_optional_session),
    passkeys: PasskeyAdapter = Depends(get_passkeys),
):
    user_id = session.user_id if session else None
    if user_id is None and body is not None and body.username:
        user = user_service.get_user_by_username(db, body.username)
        # unknown names get a discoverable ceremony, same as no name at all
        user_id = user.id if user else None
    options, request_token = passkey_service.begin_authentication(db, user_id, passkeys)
    return CeremonyOptionsResponse(options=options, request_token=request_token)


@router.post("/auth/verify", response_model=AuthenticationVerifyResponse)
def authentication_verify(
    body: AuthenticationVerifyRequest,
    response: Response,
    db: Session = Depends(get_db),
    session: AuthSession | None = Depends(get_optional_session),
    client: ClientInfo = Depends(client_info),
    passkeys: PasskeyAdapter = Depends(get_passkeys),
    settings: Settings = Depends(get_app_settings),
):
    result = passkey_service.finish_authentication(
        db, body.response, body.request_token, session, client, passkeys
    )
    if result.action == "logged_in":
        set_session_cookie(response, result.session.id, settings)
    return AuthenticationVerifyResponse(action=result.action)


@router.get("/credentials", response_model=List[PasskeyOut])
def list_credentials(db: Session = Depends(get_db), user: User = Depends(get_verified_user)):
    return passkey_service.list_passkeys(db, user.id)


@router.delete("/credential/{credential_id}", response_model=ActionResponse)
def delete_credential(credential_id: str, db: Session = Depends(get_db), user: User = Depends(get_verified_user)):
    if not passkey_service.delete_passkey(db, user.id, credential_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Credential not found")
    return ActionResponse(message="Passkey removed")
