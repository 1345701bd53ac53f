
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from authlab.api.deps import get_app_settings, get_current_user, get_db, get_totp, get_verified_user, require_session
from authlab.core.config import Settings
from authlab.core.mfa import TotpAdapter
from authlab.models import AuthEventType, AuthSession, User
from authlab.schemas.events import EmailCodeSentDetails, MfaFailedDetails
from authlab.schemas.mfa import (
    ActionResponse,
    CodeRequest,
    EmailCodeSentResponse,
    MfaStatusResponse,
    TotpSetupResponse,
)
from authlab.services import auth_service, email_code_service, session_service, totp_service
from authlab.services.auth_event_service import log_event

router = APIRouter(prefix="/mfa", tags=["mfa"])


@router.get("/verify", response_model=MfaStatusResponse)
def mfa_verify_status(
    db: Session = Depends(get_db),
    session: AuthSession = Depends(require_session),
    user: User = Depends(get_current_user),
):
    return auth_service.mfa_status(db, session, user)


@router.post("/totp/setup", response_model=TotpSetupResponse)
def totp_setup(
    db: Session = Depends(get_db),
    user: User = Depends(get_verified_user),
    totp: TotpAdapter = Depends(get_totp),
):
    result = totp_service.setup_totp(db, user.id, totp)
    return TotpSetupResponse(
        secret=result.secret,
        otpauth_url=result.otpauth_url,
        qr_code_data_url=result.qr_code_data_url,
    )


@router.post("/totp/enable", response_model=ActionResponse)
def totp_enable(
    body: CodeRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_verified_user),
    totp: TotpAdapter = Depends(get_totp),
):
    if not totp_service.verify_totp_and_enable(db, user.id, body.code, totp):
        log_event(db, AuthEventType.MFA_TOTP_FAILED, user.id, MfaFailedDetails(action="enable"))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid code")
    log_event(db, AuthEventType.MFA_TOTP_ENABLED, user.id)
    return ActionResponse(message="TOTP enabled")


@router.post("/totp/verify", response_model=ActionResponse)
def totp_verify(
    body: CodeRequest,
    db: Session = Depends(get_db),
    session: AuthSession = Depends(require_session),
    totp: TotpAdapter = Depends(get_totp),
):
    if not totp_service.verify_totp(db, session.user_id, body.code, totp):
        log_event(db, AuthEventType.MFA_TOTP_FAILED, session.user_id, MfaFailedDetails(action="verify"))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid code")
    session_service.mark_mfa_verified(db, session.id)
    log_event(db, AuthEventType.MFA_TOTP_VERIFIED, session.user_id)
    return ActionResponse(message="MFA verified")


@router.post("/totp/disable", response_model=ActionResponse)
def totp_disable(db: Session = Depends(get_db), user: User = Depends(get_verified_user)):
    totp_service.disable_totp(db, user.id)
    log_event(db, AuthEventType.MFA_TOTP_DISABLED, user.id)
    return ActionResponse(message="TOTP disabled")


@router.post("/email/enable", response_model=ActionResponse)
def email_enable(db: Session = Depends(get_db), user: User = Depends(get_verified_user)):
    email_code_service.set_email_mfa(db, user.id, True)
    log_event(db, AuthEventType.MFA_EMAIL_ENABLED, user.id)
    return ActionResponse(message="Email codes enabled")


@router.post("/email/disable", response_model=ActionResponse)
def email_disable(db: Session = Depends(get_db), user: User = Depends(get_verified_user)):
    email_code_service.set_email_mfa(db, user.id, False)
    log_event(db, AuthEventType.MFA_EMAIL_DISABLED, user.id)
    return ActionResponse(message="Email codes disabled")


@router.post("/email/send", response_model=EmailCodeSentResponse)
def email_send(
    db: Session = Depends(get_db),
    session: AuthSession = Depends(require_session),
    settings: Settings = Depends(get_app_settings),
):
    email_code = email_code_service.create_email_code(db, session.user_id)
    log_event(db, AuthEventType.MFA_EMAIL_SENT, session.user_id, EmailCodeSentDetails(code=email_code.code))
    # Nothing is mailed; the code is visible in the admin panel instead
    return EmailCodeSentResponse(
        message="Code sent",
        code=email_code.code if settings.expose_email_codes else None,
    )


@router.post("/email/verify", response_model=ActionResponse)
def email_verify(
    body: CodeRequest,
    db: Session = Depends(get_db),
    session: AuthSession = Depends(require_session),
):
    if not email_code_service.verify_email_code(db, session.user_id, body.code):
        log_event(db, AuthEventType.MFA_EMAIL_FAILED, session.user_id)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired code")
    session_service.mark_mfa_verified(db, session.id)
    log_event(db, AuthEventType.MFA_EMAIL_VERIFIED, session.user_id)
    return ActionResponse(message="MFA verified")
