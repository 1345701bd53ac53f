"""
Passkey registration and authentication ceremonies.

Both ceremonies are two requests long. The first stores the raw challenge
under an opaque request token; the second redeems that token exactly once and
hands the signed response to the PasskeyAdapter.
"""
import logging
from dataclasses import dataclass
from typing import Any

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from authlab.core.passkeys import CredentialRef, PasskeyAdapter, PasskeyVerificationError
from authlab.core.time import utcnow
from authlab.db.repository import Repository
from authlab.models import AuthEventType, AuthSession, ChallengePurpose, PasskeyCredential, User
from authlab.schemas.events import (
    PasskeyAuthDetails,
    PasskeyDeletedDetails,
    PasskeyFailedDetails,
    PasskeyRegisteredDetails,
)
from authlab.services import challenge_service, session_service
from authlab.services.auth_event_service import log_event
from authlab.services.session_service import ClientInfo

logger = logging.getLogger(__name__)

credentials = Repository(PasskeyCredential)

CHALLENGE_MISSING = "Challenge not found or expired"


@dataclass
class PasskeyLogin:
    action: str  # "mfa_verified" or "logged_in"
    user_id: str
    session: AuthSession


def _refs(rows: list[PasskeyCredential]) -> list[CredentialRef]:
    return [CredentialRef(id=row.id, transports=list(row.transports or [])) for row in rows]


def _fail(db: Session, user_id: str | None, action: str, error: str):
    log_event(db, AuthEventType.PASSKEY_AUTH_FAILED, user_id, PasskeyFailedDetails(action=action, error=error))
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)


def list_passkeys(db: Session, user_id: str) -> list[PasskeyCredential]:
    return credentials.list_by_owner(db, user_id)


def get_passkey(db: Session, credential_id: str) -> PasskeyCredential | None:
    return credentials.get(db, credential_id)


def begin_registration(db: Session, user: User, passkeys: PasskeyAdapter) -> tuple[dict[str, Any], str]:
    ceremony = passkeys.begin_registration(user.id, user.username, _refs(list_passkeys(db, user.id)))
    request_token = challenge_service.store_challenge(
        db, ceremony.challenge, ChallengePurpose.REGISTRATION, user.id
    )
    return ceremony.options, request_token


def finish_registration(
    db: Session,
    user: User,
    response: dict[str, Any],
    request_token: str,
    friendly_name: str | None,
    passkeys: PasskeyAdapter,
) -> PasskeyCredential:
    challenge = challenge_service.redeem_challenge(db, request_token, ChallengePurpose.REGISTRATION)
    if challenge is None:
        _fail(db, user.id, "register", CHALLENGE_MISSING)
    if challenge.user_id != user.id:
        _fail(db, user.id, "register", "Challenge was issued for a different user")

    try:
        registered = passkeys.verify_registration(response, challenge.challenge)
    except PasskeyVerificationError as exc:
        _fail(db, user.id, "register", exc.reason)

    if get_passkey(db, registered.credential_id) is not None:
        _fail(db, user.id, "register", "Credential already registered")

    credential = credentials.create(
        db,
        id=registered.credential_id,
        user_id=user.id,
        public_key=registered.public_key,
        counter=registered.sign_count,
        transports=registered.transports or None,
        device_type=registered.device_type,
        backed_up=registered.backed_up,
        friendly_name=friendly_name or None,
        created_at_utc=utcnow(),
    )
    log_event(
        db,
        AuthEventType.PASSKEY_REGISTERED,
        user.id,
        PasskeyRegisteredDetails(credential_id=credential.id, friendly_name=credential.friendly_name),
    )
    return credential


def begin_authentication(db: Session, user_id: str | None, passkeys: PasskeyAdapter) -> tuple[dict[str, Any], str]:
    """
    Without a user any registered passkey may answer (discoverable login);
    with one the allow list is narrowed to that user's credentials.
    """
    allow = _refs(list_passkeys(db, user_id)) if user_id else []
    ceremony = passkeys.begin_authentication(allow or None)
    request_token = challenge_service.store_challenge(
        db, ceremony.challenge, ChallengePurpose.AUTHENTICATION, user_id
    )
    return ceremony.options, request_token


def _counter_advanced(stored: int, new: int) -> bool:
    # Authenticators without a counter report zero forever
    if stored == 0 and new == 0:
        return True
    return new > stored


def finish_authentication(
    db: Session,
    response: dict[str, Any],
    request_token: str,
    session: AuthSession | None,
    client: ClientInfo | None,
    passkeys: PasskeyAdapter,
) -> PasskeyLogin:
    session_user_id = session.user_id if session else None
    credential_id = response.get("id") if isinstance(response, dict) else None

    # ids are base64url strings; anything else cannot name a stored credential
    credential = get_passkey(db, credential_id) if isinstance(credential_id, str) and credential_id else None
    if credential is None:
        _fail(db, session_user_id, "auth", "Credential not found")
    if session_user_id and credential.user_id != session_user_id:
        _fail(db, session_user_id, "auth", "Credential does not belong to user")

    challenge = challenge_service.redeem_challenge(db, request_token, ChallengePurpose.AUTHENTICATION)
    if challenge is None:
        _fail(db, session_user_id, "auth", CHALLENGE_MISSING)
    if challenge.user_id and challenge.user_id != credential.user_id:
        _fail(db, session_user_id, "auth", "Challenge was issued for a different user")

    stored_counter = credential.counter
    try:
        new_counter = passkeys.verify_authentication(
            response, challenge.challenge, credential.public_key, stored_counter
        )
    except PasskeyVerificationError as exc:
        _fail(db, session_user_id, "auth", exc.reason)

    if not _counter_advanced(stored_counter, new_counter):
        logger.warning("Passkey %s counter went from %s to %s", credential.id, stored_counter, new_counter)
        _fail(db, session_user_id, "auth", "Signature counter did not increase; possible cloned authenticator")

    updated = (
        db.query(PasskeyCredential)
        .filter(PasskeyCredential.id == credential.id, PasskeyCredential.counter == stored_counter)
        .update(
            {PasskeyCredential.counter: new_counter, PasskeyCredential.last_used_at_utc: utcnow()},
            synchronize_session=False,
        )
    )
    db.commit()
    if updated != 1:
        _fail(db, session_user_id, "auth", "Credential was used concurrently")
    db.refresh(credential)

    owner_id = credential.user_id
    if session is not None and session.user_id == owner_id:
        session_service.mark_mfa_verified(db, session.id)
        action = "mfa_verified"
        result_session = session
    else:
        # a completed passkey ceremony is both factors at once
        result_session = session_service.create_session(db, owner_id, client, mfa_verified=True)
        action = "logged_in"

    log_event(
        db,
        AuthEventType.PASSKEY_AUTH_SUCCESS,
        owner_id,
        PasskeyAuthDetails(action=action, credential_id=credential.id),
    )
    return PasskeyLogin(action=action, user_id=owner_id, session=result_session)


def delete_passkey(db: Session, user_id: str, credential_id: str, by: str = "user") -> bool:
    credential = get_passkey(db, credential_id)
    if credential is None or credential.user_id != user_id:
        return False
    credentials.delete(db, credential_id)
    log_event(
        db,
        AuthEventType.PASSKEY_DELETED,
        user_id,
        PasskeyDeletedDetails(credential_id=credential_id, by=by),
    )
    return True
