import pyotp


def register(client, username="alice", password="secret1"):
    return client.post(
        "/auth/register",
        json={"username": username, "password": password, "confirm_password": password},
    )


def enable_totp(client):
    setup = client.post("/mfa/totp/setup").json()
    code = pyotp.TOTP(setup["secret"]).now()
    assert client.post("/mfa/totp/enable", json={"code": code}).status_code == 200
    return setup["secret"]


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_register_sets_session_cookie(client):
    resp = register(client)
    assert resp.status_code == 200
    body = resp.json()
    assert body["mfa_required"] is False
    assert body["next"] == "/dashboard"
    assert "session_id" in client.cookies
    cookie_header = resp.headers["set-cookie"].lower()
    assert "httponly" in cookie_header
    assert "samesite=lax" in cookie_header

    status = client.get("/auth/status").json()
    assert status["authenticated"] is True
    assert status["user"]["username"] == "alice"
    assert client.get("/dashboard").status_code == 200


def test_status_without_cookie(client):
    assert client.get("/auth/status").json()["authenticated"] is False
    assert client.get("/dashboard").status_code == 401
    assert client.post("/auth/logout").status_code == 401


def test_bad_login_is_generic(client):
    register(client)
    client.cookies.clear()
    unknown = client.post("/auth/login", json={"username": "nobody", "password": "secret1"})
    wrong = client.post("/auth/login", json={"username": "alice", "password": "nope"})
    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json() == wrong.json()


def test_totp_login_flow(client):
    register(client)
    secret = enable_totp(client)
    assert client.post("/auth/logout").status_code == 200
    assert client.get("/auth/status").json()["authenticated"] is False

    login = client.post("/auth/login", json={"username": "alice", "password": "secret1"}).json()
    assert login["mfa_required"] is True
    assert login["next"] == "/mfa/verify"

    assert client.get("/dashboard").status_code == 403
    assert client.post("/mfa/totp/setup").status_code == 403
    assert client.get("/mfa/verify").json() == {"mfa_verified": False, "methods": ["totp"]}

    assert client.post("/mfa/totp/verify", json={"code": "abcdef"}).status_code == 400
    code = pyotp.TOTP(secret).now()
    assert client.post("/mfa/totp/verify", json={"code": code}).status_code == 200
    # verifying an already verified session is a no-op
    assert client.post("/mfa/totp/verify", json={"code": code}).status_code == 200
    assert client.get("/dashboard").status_code == 200

    events = [e["event_type"] for e in client.get("/admin/events").json()]
    assert "mfa_totp_failed" in events
    assert "mfa_totp_verified" in events


def test_email_code_flow(client):
    register(client)
    assert client.post("/mfa/email/enable").status_code == 200
    client.post("/auth/logout")
    client.post("/auth/login", json={"username": "alice", "password": "secret1"})

    first = client.post("/mfa/email/send").json()["code"]
    second = client.post("/mfa/email/send").json()["code"]
    if first != second:
        assert client.post("/mfa/email/verify", json={"code": first}).status_code == 400
    assert client.post("/mfa/email/verify", json={"code": second}).status_code == 200
    assert client.post("/mfa/email/verify", json={"code": second}).status_code == 400
    assert client.get("/dashboard").status_code == 200

    sent = [e for e in client.get("/admin/events").json() if e["event_type"] == "mfa_email_sent"]
    assert {"kind": "email_code_sent", "code": second} in [e["details"] for e in sent]


def test_passkey_step_up_and_passwordless(client):
    register(client)
    options = client.post("/webauthn/register/options").json()
    resp = client.post(
        "/webauthn/register/verify",
        json={
            "response": {"id": "cred-1", "challenge": options["options"]["challenge"]},
            "request_token": options["request_token"],
            "friendly_name": "Laptop",
        },
    )
    assert resp.status_code == 200
    assert resp.json()["friendly_name"] == "Laptop"
    assert [p["id"] for p in client.get("/webauthn/credentials").json()] == ["cred-1"]

    enable_totp(client)
    client.post("/auth/logout")
    client.post("/auth/login", json={"username": "alice", "password": "secret1"})
    assert "passkey" in client.get("/mfa/verify").json()["methods"]

    options = client.post("/webauthn/auth/options").json()
    assert [c["id"] for c in options["options"]["allowCredentials"]] == ["cred-1"]
    resp = client.post(
        "/webauthn/auth/verify",
        json={
            "response": {"id": "cred-1", "challenge": options["options"]["challenge"]},
            "request_token": options["request_token"],
        },
    )
    assert resp.json() == {"success": True, "action": "mfa_verified"}
    assert client.get("/dashboard").status_code == 200

    client.post("/auth/logout")
    options = client.post("/webauthn/auth/options", json={"username": "alice"}).json()
    payload = {
        "response": {"id": "cred-1", "challenge": options["options"]["challenge"]},
        "request_token": options["request_token"],
    }
    resp = client.post("/webauthn/auth/verify", json=payload)
    assert resp.json()["action"] == "logged_in"
    assert client.get("/dashboard").status_code == 200

    replay = client.post("/webauthn/auth/verify", json=payload)
    assert replay.status_code == 400


def test_unknown_username_falls_back_to_discoverable(client):
    resp = client.post("/webauthn/auth/options", json={"username": "ghost"})
    assert resp.status_code == 200
    assert not resp.json()["options"].get("allowCredentials")


def test_delete_own_passkey(client):
    register(client)
    options = client.post("/webauthn/register/options").json()
    client.post(
        "/webauthn/register/verify",
        json={
            "response": {"id": "cred-1", "challenge": options["options"]["challenge"]},
            "request_token": options["request_token"],
        },
    )
    assert client.delete("/webauthn/credential/cred-1").status_code == 200
    assert client.delete("/webauthn/credential/cred-1").status_code == 404


def test_admin_api(client):
    created = client.post("/admin/users", json={"username": "carol", "password": "pw"}).json()
    user_id = created["id"]
    assert [u["username"] for u in client.get("/admin/users").json()] == ["carol"]

    patched = client.patch(f"/admin/users/{user_id}", json={"email_mfa_enabled": True}).json()
    assert patched["email_mfa_enabled"] is True

    code = client.post(f"/admin/users/{user_id}/email-codes").json()
    assert [c["code"] for c in client.get(f"/admin/users/{user_id}/email-codes").json()] == [code["code"]]

    assert client.get(f"/admin/users/{user_id}/totp/current").status_code == 400
    assert client.post(f"/admin/users/{user_id}/reset-password", json={"password": "newpass"}).status_code == 200
    login = client.post("/auth/login", json={"username": "carol", "password": "newpass"})
    assert login.json()["mfa_required"] is True

    sessions = client.get("/admin/sessions").json()
    assert len(sessions) == 1
    assert client.delete(f"/admin/sessions/{sessions[0]['id']}").status_code == 200
    assert client.get("/auth/status").json()["authenticated"] is False

    client.post("/auth/login", json={"username": "carol", "password": "newpass"})
    assert client.delete(f"/admin/users/{user_id}/sessions").json()["deleted_count"] == 1

    detail = client.get(f"/admin/users/{user_id}").json()
    assert detail["user"]["username"] == "carol"
    assert detail["sessions"] == []

    assert client.get("/admin/events", params={"limit": 0}).status_code == 422
    assert len(client.get("/admin/events", params={"limit": 1}).json()) == 1

    assert client.delete(f"/admin/users/{user_id}").status_code == 200
    assert client.get(f"/admin/users/{user_id}").status_code == 404


def test_admin_current_totp_code(client):
    register(client)
    secret = client.post("/mfa/totp/setup").json()["secret"]
    user_id = client.get("/auth/status").json()["user"]["id"]
    current = client.get(f"/admin/users/{user_id}/totp/current").json()
    assert current["totp_enabled"] is False
    assert pyotp.TOTP(secret).verify(current["code"], valid_window=1)


def test_admin_reset(client):
    register(client)
    assert client.post("/admin/reset").json()["message"] == "Database reset successfully"
    assert client.get("/admin/users").json() == []
    assert client.get("/auth/status").json()["authenticated"] is False


def test_malformed_assertion_id_is_a_client_error(client):
    register(client)
    client.post("/auth/logout")
    for bad_id in ({"a": 1}, ["x", "y"]):
        options = client.post("/webauthn/auth/options").json()
        resp = client.post(
            "/webauthn/auth/verify",
            json={
                "response": {"id": bad_id, "challenge": options["options"]["challenge"]},
                "request_token": options["request_token"],
            },
        )
        assert resp.status_code == 400
        assert resp.json() == {"detail": "Credential not found"}

    failed = [e for e in client.get("/admin/events").json() if e["event_type"] == "passkey_auth_failed"]
    assert len(failed) == 2
    assert failed[0]["details"] == {"kind": "passkey_failed", "action": "auth", "error": "Credential not found"}
