import pytest
from fastapi import HTTPException

from authlab.models import AuthEvent, AuthEventType, AuthSession, EmailCode, User
from authlab.schemas.admin import UserCreate, UserDetailOut, UserUpdate
from authlab.services import admin_service, auth_service, email_code_service, session_service, totp_service
from authlab.services.auth_event_service import list_events


def test_create_and_list_users(db):
    admin_service.create_user(db, UserCreate(username="carol", password="pw", email="carol@example.com"))
    with pytest.raises(HTTPException) as exc:
        admin_service.create_user(db, UserCreate(username="carol", password="pw"))
    assert exc.value.status_code == 409
    assert [u.username for u in admin_service.list_users(db)] == ["carol"]


def test_user_detail_bundles_related_state(db, alice, totp):
    totp_service.setup_totp(db, alice.id, totp)
    email_code_service.create_email_code(db, alice.id)
    detail = UserDetailOut.model_validate(admin_service.get_user_detail(db, alice.id))
    assert detail.user.username == "alice"
    assert detail.user.totp_secret is not None
    assert len(detail.sessions) == 1
    assert len(detail.email_codes) == 1
    assert detail.recent_events[0].event_type == AuthEventType.REGISTER

    with pytest.raises(HTTPException) as exc:
        admin_service.get_user_detail(db, "missing")
    assert exc.value.status_code == 404


def test_update_user(db, alice):
    updated = admin_service.update_user(db, alice.id, UserUpdate(email="a@example.com", email_mfa_enabled=True))
    assert updated.email == "a@example.com"
    assert updated.email_mfa_enabled is True

    with pytest.raises(HTTPException) as exc:
        admin_service.update_user(db, alice.id, UserUpdate(totp_enabled=True))
    assert exc.value.status_code == 400

    auth_service.register(db, "bob", "secret1", "secret1")
    with pytest.raises(HTTPException) as exc:
        admin_service.update_user(db, alice.id, UserUpdate(username="bob"))
    assert exc.value.status_code == 409


def test_reset_password_logs_event(db, alice):
    admin_service.reset_password(db, alice.id, "brand-new")
    assert auth_service.login(db, "alice", "brand-new").session is not None
    with pytest.raises(HTTPException):
        auth_service.login(db, "alice", "secret1")
    event = db.query(AuthEvent).filter(AuthEvent.event_type == AuthEventType.PASSWORD_RESET).one()
    assert event.details == {"kind": "password_reset", "by": "admin"}


def test_force_disable_totp(db, alice, totp):
    setup = totp_service.setup_totp(db, alice.id, totp)
    totp_service.verify_totp_and_enable(db, alice.id, totp.current_code(setup.secret), totp)
    admin_service.force_disable_totp(db, alice.id)
    db.refresh(alice)
    assert alice.totp_enabled is False
    assert alice.totp_secret is None
    with pytest.raises(HTTPException):
        admin_service.force_disable_totp(db, "missing")


def test_delete_user_cascades(db, alice):
    session_service.create_session(db, alice.id)
    email_code_service.create_email_code(db, alice.id)
    admin_service.delete_user(db, alice.id)
    db.expunge_all()
    assert db.query(User).count() == 0
    assert db.query(AuthSession).count() == 0
    assert db.query(EmailCode).count() == 0
    assert db.query(AuthEvent).filter(AuthEvent.user_id.isnot(None)).count() == 0
    with pytest.raises(HTTPException) as exc:
        admin_service.delete_user(db, alice.id)
    assert exc.value.status_code == 404


def test_delete_session_unknown_token(db):
    with pytest.raises(HTTPException) as exc:
        admin_service.delete_session(db, "nope")
    assert exc.value.status_code == 404


def test_reset_database_empties_every_table(db, engine, alice):
    email_code_service.create_email_code(db, alice.id)
    db.close()
    admin_service.reset_database(engine)
    assert db.query(User).count() == 0
    assert list_events(db) == []
