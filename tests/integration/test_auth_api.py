"""
API tests for registration, login and the authentication middleware.
"""
from datetime import timedelta

from app.api.deps import create_access_token
from app.core.config import Settings, settings
from app.main import app


def register(client, email="carol@example.com", password="s3cret-pass", full_name="Carol"):
    return client.post("/auth/register", json={"email": email, "password": password, "full_name": full_name})


def test_register_and_login(client):
    response = register(client)
    assert response.status_code == 201
    user = response.json()
    assert user["email"] == "carol@example.com"
    assert user["role"] == "user"
    assert "hashed_password" not in user

    response = client.post("/auth/token", data={"username": "carol@example.com", "password": "s3cret-pass"})
    assert response.status_code == 200
    token = response.json()["access_token"]

    response = client.get("/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["id"] == user["id"]


def test_register_duplicate_email(client):
    register(client)

    response = register(client)

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_register_short_password(client):
    response = register(client, password="short")

    assert response.status_code == 422


def test_login_with_wrong_password(client):
    register(client)

    response = client.post("/auth/token", data={"username": "carol@example.com", "password": "wrong-pass"})

    assert response.status_code == 401


def test_health_is_public(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_protected_route_without_token(client):
    response = client.get("/documents")

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_protected_route_with_invalid_token(client):
    response = client.get("/documents", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


def test_expired_token_is_rejected(client, test_user):
    token = create_access_token(test_user.id, expires_delta=timedelta(minutes=-5))

    response = client.get("/users/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_token_for_deleted_user_is_rejected(client, db, test_user):
    token = create_access_token(test_user.id)
    db.delete(test_user)
    db.commit()

    response = client.get("/users/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_list_users_requires_admin(client, auth_headers):
    response = client.get("/users", headers=auth_headers)

    assert response.status_code == 403


def test_admin_can_list_users(client, admin_user, test_user):
    headers = {"Authorization": f"Bearer {create_access_token(admin_user.id)}"}

    response = client.get("/users", headers=headers)

    assert response.status_code == 200
    assert {u["email"] for u in response.json()} == {"admin@example.com", "alice@example.com"}


def test_debug_mode_follows_settings():
    assert Settings.model_fields["DEBUG"].default is False
    assert app.debug is settings.DEBUG
