import secrets

import pytest
from fastapi.testclient import TestClient

from authlab.core.config import Settings
from authlab.core.mfa import TotpAdapter
from authlab.core.passkeys import CredentialRef, PasskeyCeremony, PasskeyVerificationError, RegisteredPasskey
from authlab.db.init_db import init_db
from authlab.db.session import build_engine, build_session_factory
from authlab.main import create_app
from authlab.services import auth_service


class FakePasskeyAdapter:
    """
    Stands in for the WebAuthn crypto. A "signed" response is valid when it
    echoes the challenge it was issued; tests steer the outcome through extra keys.
    """

    def __init__(self):
        self.last_allow: list[CredentialRef] | None = None
        self.last_exclude: list[CredentialRef] | None = None

    def begin_registration(self, user_id, user_name, exclude):
        self.last_exclude = exclude
        challenge = secrets.token_urlsafe(32)
        return PasskeyCeremony(
            challenge=challenge,
            options={
                "challenge": challenge,
                "user": {"name": user_name},
                "excludeCredentials": [{"id": ref.id, "type": "public-key"} for ref in exclude],
            },
        )

    def verify_registration(self, response, expected_challenge):
        if response.get("challenge") != expected_challenge:
            raise PasskeyVerificationError("Unexpected registration response challenge")
        return RegisteredPasskey(
            credential_id=response["id"],
            public_key=f"pk-{response['id']}",
            sign_count=response.get("sign_count", 0),
            device_type="single_device",
            backed_up=False,
            transports=["internal"],
        )

    def begin_authentication(self, allow=None):
        self.last_allow = allow
        challenge = secrets.token_urlsafe(32)
        return PasskeyCeremony(
            challenge=challenge,
            options={
                "challenge": challenge,
                "allowCredentials": [{"id": ref.id, "type": "public-key"} for ref in allow or []],
            },
        )

    def verify_authentication(self, response, expected_challenge, public_key, current_counter):
        if response.get("challenge") != expected_challenge:
            raise PasskeyVerificationError("Unexpected authentication response challenge")
        if public_key != f"pk-{response['id']}":
            raise PasskeyVerificationError("Signature verification failed")
        return response.get("new_counter", current_counter + 1)


@pytest.fixture()
def settings(tmp_path):
    return Settings(database_url="sqlite:///:memory:", log_dir=str(tmp_path / "logs"), _env_file=None)


@pytest.fixture()
def engine(settings):
    engine = build_engine(settings)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db(engine):
    session = build_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def totp():
    return TotpAdapter(issuer="AuthTestApp")


@pytest.fixture()
def passkeys():
    return FakePasskeyAdapter()


@pytest.fixture()
def alice(db):
    return auth_service.register(db, "alice", "secret1", "secret1").user


@pytest.fixture()
def client(settings, totp, passkeys):
    app = create_app(settings, totp=totp, passkeys=passkeys)
    with TestClient(app) as test_client:
        yield test_client
