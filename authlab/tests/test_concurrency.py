import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from fastapi import HTTPException

from authlab.core.config import Settings
from authlab.db.init_db import init_db
from authlab.db.session import build_engine, build_session_factory
from authlab.models import ChallengePurpose, EmailCode
from authlab.services import auth_service, challenge_service, email_code_service, passkey_service
from authlab.services.user_service import get_user

WORKERS = 8


@pytest.fixture()
def file_factory(tmp_path):
    # a file database so every thread gets its own connection
    settings = Settings(database_url=f"sqlite:///{tmp_path / 'race.db'}", log_dir=str(tmp_path / "logs"), _env_file=None)
    engine = build_engine(settings)
    init_db(engine)
    yield build_session_factory(engine)
    engine.dispose()


def race(factory, fn, workers=WORKERS):
    """Run fn(db) in `workers` threads released together; returns their results."""
    barrier = threading.Barrier(workers, timeout=10)

    def run():
        db = factory()
        try:
            barrier.wait()
            return fn(db)
        finally:
            db.close()

    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(run) for _ in range(workers)]
        return [f.result() for f in futures]


@pytest.fixture()
def alice_id(file_factory):
    db = file_factory()
    try:
        return auth_service.register(db, "alice", "secret1", "secret1").user.id
    finally:
        db.close()


def test_email_code_is_consumed_once(file_factory, alice_id):
    db = file_factory()
    code = email_code_service.create_email_code(db, alice_id).code
    db.close()

    results = race(file_factory, lambda s: email_code_service.verify_email_code(s, alice_id, code))
    assert sorted(results) == [False] * (WORKERS - 1) + [True]


def test_concurrent_issue_leaves_one_live_code(file_factory, alice_id):
    race(file_factory, lambda s: email_code_service.create_email_code(s, alice_id).id)

    db = file_factory()
    try:
        assert db.query(EmailCode).count() == WORKERS
        assert len(email_code_service.list_active_email_codes(db, alice_id)) == 1
    finally:
        db.close()


def test_challenge_is_redeemed_once(file_factory, alice_id):
    db = file_factory()
    token = challenge_service.store_challenge(db, "abc", ChallengePurpose.AUTHENTICATION, alice_id)
    db.close()

    results = race(
        file_factory,
        lambda s: challenge_service.redeem_challenge(s, token, ChallengePurpose.AUTHENTICATION) is not None,
    )
    assert sorted(results) == [False] * (WORKERS - 1) + [True]


def test_racing_assertions_advance_counter_once(file_factory, alice_id, passkeys):
    db = file_factory()
    user = get_user(db, alice_id)
    options, token = passkey_service.begin_registration(db, user, passkeys)
    passkey_service.finish_registration(
        db, user, {"id": "cred-1", "challenge": options["challenge"]}, token, None, passkeys
    )
    # two ceremonies in flight, both claiming the same next counter value
    ceremonies = [passkey_service.begin_authentication(db, alice_id, passkeys) for _ in range(2)]
    db.close()

    pending = iter(ceremonies)
    lock = threading.Lock()

    def assert_once(s):
        with lock:
            options, request_token = next(pending)
        response = {"id": "cred-1", "challenge": options["challenge"], "new_counter": 1}
        try:
            passkey_service.finish_authentication(s, response, request_token, None, None, passkeys)
            return "ok"
        except HTTPException as exc:
            return exc.detail

    results = race(file_factory, assert_once, workers=2)
    assert results.count("ok") == 1

    db = file_factory()
    try:
        assert passkey_service.get_passkey(db, "cred-1").counter == 1
    finally:
        db.close()
