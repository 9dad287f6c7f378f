import logging
from datetime import timedelta

from jose import jwt

import auth, models


def _login(client, email="a@x.com", password="p1"):
    return client.post("/login", json={"email": email, "password": password})


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_form_descriptors(client):
    assert client.get("/register").json()["fields"] == ["name", "email", "password", "confirmPassword"]
    assert client.get("/login").json()["action"] == "/login"
    assert "resetToken" not in client.get("/register").json()
    assert "resetToken" not in client.get("/login").json()


def test_register_sets_session_cookie(register, client):
    response = register()
    assert response.status_code == 201
    assert isinstance(response.json()["user"], int)

    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith("jwt=")
    assert "HttpOnly" in set_cookie
    assert "Max-Age=604800" in set_cookie


def test_register_duplicate_email(register):
    assert register().status_code == 201

    response = register(name="Other")
    assert response.status_code == 400
    assert response.json()["errors"]["email"] == "This email is already registered."


def test_register_duplicate_email_is_case_insensitive(register):
    assert register(email="Alice@X.com").status_code == 201

    response = register(email="alice@x.com")
    assert response.status_code == 400
    assert response.json()["errors"]["email"]


def test_register_password_mismatch(register, client):
    response = register(password="p1", confirm="p2")
    assert response.status_code == 400
    body = response.json()["errors"]
    assert body["password"] == "Password doesn't match!"
    assert body["confirmPassword"] == "Password doesn't match!"

    # nothing was stored, so the same email can still register
    assert register().status_code == 201


def test_register_schema_errors_are_keyed_by_field(client):
    response = client.post("/register", json={"name": "Bob", "email": "not-an-email"})
    assert response.status_code == 400
    body = response.json()["errors"]
    assert body["email"] == "Please enter a valid email"
    assert body["password"] == "Please enter a password"
    assert body["confirmPassword"] == "Please confirm your password"


def test_login_unknown_email(client):
    response = _login(client, email="nobody@x.com")
    assert response.status_code == 400
    assert response.json()["errors"] == {"email": "This email is not registered", "password": ""}


def test_login_wrong_password(register, client):
    register()
    response = _login(client, password="wrong")
    assert response.status_code == 400
    assert response.json()["errors"] == {"email": "", "password": "This password is incorrect"}


def test_end_to_end_session(register, client):
    user_id = register("Alice", "a@x.com", "p1").json()["user"]
    client.cookies.clear()

    response = _login(client)
    assert response.status_code == 201
    assert response.json() == {"user": user_id, "role": "user"}

    me = client.get("/me")
    assert me.status_code == 200
    assert me.json()["user"] == user_id

    response = client.get("/logout")
    assert response.status_code == 200
    assert response.history[0].status_code == 302
    assert "Max-Age=0" in response.history[0].headers["set-cookie"]
    assert not client.cookies.get("jwt")

    assert client.get("/me").status_code == 401


def test_me_rejects_reset_token(register, client):
    user_id = register().json()["user"]
    client.cookies.clear()
    client.cookies.set("jwt", auth.create_reset_token(user_id))

    assert client.get("/me").status_code == 401


def test_password_reset_unknown_email_sends_nothing(client, mailer):
    response = client.post("/password-reset-request", json={"email": "ghost@x.com"})
    assert response.status_code == 400
    assert response.json()["errors"]["email"] == "Email not found"
    assert mailer.sent == []


def test_password_reset_flow(register, client, mailer):
    user_id = register().json()["user"]

    response = client.post("/password-reset-request", json={"email": "a@x.com"})
    assert response.status_code == 200
    assert response.json() == {"message": "Password reset email sent"}

    assert len(mailer.sent) == 1
    to_email, link = mailer.sent[0]
    assert to_email == "a@x.com"
    assert link.startswith("http://testserver/reset-password/")
    token = link.rsplit("/", 1)[1]

    form = client.get(f"/reset-password/{token}").json()
    assert form["resetToken"] == token

    client.cookies.clear()
    response = client.post("/reset-password", json={"resetToken": token, "newPassword": "p2"})
    assert response.status_code == 200
    assert response.json() == {"message": "Password successfully reset"}
    assert client.get("/me").json()["user"] == user_id

    assert _login(client, password="p1").status_code == 400
    assert _login(client, password="p2").json()["user"] == user_id


def test_password_reset_rejects_bad_tokens(register, client):
    user_id = register().json()["user"]
    expired = auth._create_token({"id": user_id, "type": auth.RESET_TOKEN}, timedelta(seconds=-1))
    forged = jwt.encode({"id": user_id, "type": auth.RESET_TOKEN}, "not-the-secret", algorithm="HS256")

    for token in (expired, forged, "garbage", auth.create_session_token(user_id)):
        response = client.post("/reset-password", json={"resetToken": token, "newPassword": "p2"})
        assert response.status_code == 400
        assert response.json()["errors"]["token"] == "Invalid or expired token"

    assert _login(client, password="p1").status_code == 201


def test_malformed_json_is_keyed_under_body(client):
    response = client.post(
        "/login",
        content=b'{"email": "a@x.com",',
        headers={"content-type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["errors"] == {
        "email": "",
        "password": "",
        "body": "Request body is not valid JSON",
    }


def test_passwords_and_hashes_stay_out_of_responses_and_logs(client, db_session, mailer, caplog):
    caplog.set_level(logging.DEBUG)
    old_password, new_password = "correct-horse-42", "battery-staple-7"
    bodies = []

    response = client.post(
        "/register",
        json={"name": "Alice", "email": "a@x.com", "password": old_password, "confirmPassword": old_password},
    )
    bodies.append(response.text)
    user = db_session.query(models.User).filter(models.User.email == "a@x.com").one()
    hashes = [user.password]

    bodies.append(client.post("/login", json={"email": "a@x.com", "password": old_password}).text)
    bodies.append(client.get("/me").text)
    bodies.append(client.post("/password-reset-request", json={"email": "a@x.com"}).text)
    token = mailer.sent[0][1].rsplit("/", 1)[1]
    bodies.append(client.post("/reset-password", json={"resetToken": token, "newPassword": new_password}).text)
    bodies.append(client.post("/login", json={"email": "a@x.com", "password": new_password}).text)

    db_session.refresh(user)
    hashes.append(user.password)

    for secret in [old_password, new_password, *hashes]:
        assert secret not in caplog.text
        for body in bodies:
            assert secret not in body
