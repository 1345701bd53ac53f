from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from authlab.api.deps import get_db, require_verified_session
from authlab.models import AuthSession
from authlab.services import passkey_service

router = APIRouter(tags=["account"])


@router.get("/dashboard")
def dashboard(db: Session = Depends(get_db), session: AuthSession = Depends(require_verified_session)):
    """Only reachable once every configured factor has been satisfied."""
    user = session.user
    return {
        "user": {
            "id": user.id,
            "username": user.username,
            "email": user.email,
            "totp_enabled": bool(user.totp_enabled),
            "email_mfa_enabled": bool(user.email_mfa_enabled),
        },
        "session": {
            "mfa_verified": bool(session.mfa_verified),
            "expires_at_utc": session.expires_at_utc,
        },
        "passkeys": [
            {"id": p.id, "friendly_name": p.friendly_name, "created_at_utc": p.created_at_utc}
            for p in passkey_service.list_passkeys(db, user.id)
        ],
    }
