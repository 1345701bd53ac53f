from datetime import timedelta

from sqlalchemy.orm import Session

from authlab.core import security
from authlab.core.config import get_settings
from authlab.core.time import utcnow
from authlab.models import ChallengePurpose, WebAuthnChallenge


def _cleanup_expired_challenges(db: Session) -> None:
    db.query(WebAuthnChallenge).filter(WebAuthnChallenge.expires_at_utc < utcnow()).delete(synchronize_session=False)


def store_challenge(db: Session, challenge: str, purpose: ChallengePurpose, user_id: str | None = None) -> str:
    """Persist a ceremony challenge under a fresh request token and return the token."""
    now = utcnow()
    _cleanup_expired_challenges(db)
    request_token = security.generate_request_token()
    db.add(
        WebAuthnChallenge(
            user_id=user_id,
            request_token=request_token,
            challenge=challenge,
            purpose=purpose,
            expires_at_utc=now + timedelta(minutes=get_settings().challenge_minutes),
            created_at_utc=now,
        )
    )
    db.commit()
    return request_token


def redeem_challenge(db: Session, request_token: str, purpose: ChallengePurpose) -> WebAuthnChallenge | None:
    """
    Fetch and delete a live challenge. Only the caller whose delete actually
    removed the row gets it back; replays and concurrent losers get None.
    """
    if not request_token:
        return None
    row = (
        db.query(WebAuthnChallenge)
        .filter(
            WebAuthnChallenge.request_token == request_token,
            WebAuthnChallenge.purpose == purpose,
            WebAuthnChallenge.expires_at_utc > utcnow(),
        )
        .first()
    )
    if row is None:
        return None
    db.expunge(row)
    deleted = (
        db.query(WebAuthnChallenge)
        .filter(WebAuthnChallenge.id == row.id)
        .delete(synchronize_session=False)
    )
    db.commit()
    if deleted != 1:
        return None
    return row
