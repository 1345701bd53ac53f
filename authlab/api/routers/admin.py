from typing import List

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from authlab.api.deps import get_db, get_totp
from authlab.core.mfa import TotpAdapter
from authlab.schemas.admin import (
    AuthEventOut,
    DeletedCount,
    EmailCodeOut,
    PasswordResetRequest,
    SessionAdminOut,
    TotpCodeOut,
    UserCreate,
    UserDetailOut,
    UserOut,
    UserUpdate,
)
from authlab.schemas.mfa import ActionResponse
from authlab.schemas.passkeys import PasskeyOut
from authlab.services import admin_service, auth_event_service, session_service, totp_service

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/users", response_model=List[UserOut])
def list_users(db: Session = Depends(get_db)):
    return admin_service.list_users(db)


@router.post("/users", response_model=UserOut)
def create_user(body: UserCreate, db: Session = Depends(get_db)):
    return admin_service.create_user(db, body)


@router.get("/users/{user_id}", response_model=UserDetailOut)
def get_user(user_id: str, db: Session = Depends(get_db)):
    return admin_service.get_user_detail(db, user_id)


@router.patch("/users/{user_id}", response_model=UserOut)
def update_user(user_id: str, body: UserUpdate, db: Session = Depends(get_db)):
    return admin_service.update_user(db, user_id, body)


@router.delete("/users/{user_id}", response_model=ActionResponse)
def delete_user(user_id: str, db: Session = Depends(get_db)):
    admin_service.delete_user(db, user_id)
    return ActionResponse()


@router.post("/users/{user_id}/reset-password", response_model=ActionResponse)
def reset_password(user_id: str, body: PasswordResetRequest, db: Session = Depends(get_db)):
    admin_service.reset_password(db, user_id, body.password)
    return ActionResponse()


@router.get("/users/{user_id}/totp/current", response_model=TotpCodeOut)
def current_totp(user_id: str, db: Session = Depends(get_db), totp: TotpAdapter = Depends(get_totp)):
    return totp_service.current_totp_code(db, user_id, totp)


@router.delete("/users/{user_id}/totp", response_model=ActionResponse)
def disable_totp(user_id: str, db: Session = Depends(get_db)):
    admin_service.force_disable_totp(db, user_id)
    return ActionResponse()


@router.post("/users/{user_id}/email-codes", response_model=EmailCodeOut)
def generate_email_code(user_id: str, db: Session = Depends(get_db)):
    return admin_service.generate_email_code(db, user_id)


@router.get("/users/{user_id}/email-codes", response_model=List[EmailCodeOut])
def list_email_codes(user_id: str, db: Session = Depends(get_db)):
    return admin_service.list_active_email_codes(db, user_id)


@router.get("/users/{user_id}/passkeys", response_model=List[PasskeyOut])
def list_passkeys(user_id: str, db: Session = Depends(get_db)):
    return admin_service.list_passkeys(db, user_id)


@router.delete("/users/{user_id}/passkeys/{credential_id}", response_model=ActionResponse)
def delete_passkey(user_id: str, credential_id: str, db: Session = Depends(get_db)):
    admin_service.delete_passkey(db, user_id, credential_id)
    return ActionResponse()


@router.delete("/users/{user_id}/sessions", response_model=DeletedCount)
def delete_user_sessions(user_id: str, db: Session = Depends(get_db)):
    return DeletedCount(deleted_count=session_service.delete_sessions_for_user(db, user_id))


@router.get("/sessions", response_model=List[SessionAdminOut])
def list_sessions(db: Session = Depends(get_db)):
    return session_service.list_sessions(db)


@router.delete("/sessions/{token}", response_model=ActionResponse)
def delete_session(token: str, db: Session = Depends(get_db)):
    admin_service.delete_session(db, token)
    return ActionResponse()


@router.delete("/sessions", response_model=DeletedCount)
def delete_all_sessions(db: Session = Depends(get_db)):
    return DeletedCount(deleted_count=session_service.delete_all_sessions(db))


@router.get("/events", response_model=List[AuthEventOut])
def list_events(limit: int = Query(100, ge=1, le=1000), db: Session = Depends(get_db)):
    return auth_event_service.list_events(db, limit=limit)


@router.post("/reset", response_model=ActionResponse)
def reset_database(request: Request):
    admin_service.reset_database(request.app.state.engine)
    return ActionResponse(message="Database reset successfully")
