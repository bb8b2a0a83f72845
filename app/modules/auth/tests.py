"""
Tests for operator registration, login and bearer-token protection.
"""

import pytest
from datetime import timedelta
from sqlalchemy.orm import Session

from app.common.exceptions import AuthenticationError, ConflictError
from app.modules.auth.schemas import UserCreate
from app.modules.auth.service import AuthService
from app.modules.auth.utils import create_access_token, verify_token, hash_password, verify_password


@pytest.fixture
def user_data():
    return UserCreate(email="gerant@garage-dupont.fr", username="gerant", password="motdepasse")


class TestAuthService:

    def test_register_returns_token_for_new_user(self, db_session: Session, user_data):
        token = AuthService(db_session).create_user(user_data)
        payload = verify_token(token.token)
        assert payload["email"] == user_data.email
        assert payload["type"] == "access"

    def test_duplicate_email(self, db_session: Session, user_data):
        service = AuthService(db_session)
        service.create_user(user_data)
        with pytest.raises(ConflictError):
            service.create_user(user_data)

    def test_login(self, db_session: Session, user_data):
        service = AuthService(db_session)
        service.create_user(user_data)
        assert service.login(user_data.email, "motdepasse").token

        with pytest.raises(AuthenticationError):
            service.login(user_data.email, "wrong-password")
        with pytest.raises(AuthenticationError):
            service.login("nobody@garage-dupont.fr", "motdepasse")

    def test_password_hashing(self):
        hashed = hash_password("secret123")
        assert hashed != "secret123"
        assert verify_password("secret123", hashed)
        assert not verify_password("other", hashed)

    def test_expired_token(self):
        token = create_access_token({"sub": "1"}, expires_delta=timedelta(seconds=-1))
        with pytest.raises(AuthenticationError):
            verify_token(token)


class TestAuthAPI:

    def test_register_login_me(self, client):
        response = client.post("/api/user/register", json={
            "email": "vendeur@garage-dupont.fr", "username": "vendeur", "password": "secret123"
        })
        assert response.status_code == 201

        response = client.post("/api/user/login", json={
            "email": "vendeur@garage-dupont.fr", "password": "secret123"
        })
        assert response.status_code == 200
        token = response.json()["token"]

        me = client.get("/api/user/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["username"] == "vendeur"

    def test_bad_login_is_401(self, client):
        response = client.post("/api/user/login", json={
            "email": "nobody@garage-dupont.fr", "password": "secret123"
        })
        assert response.status_code == 401

    def test_protected_route_rejects_bad_token(self, client):
        response = client.get("/api/clients/", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401

    def test_public_routes(self, client):
        assert client.get("/health").json()["status"] == "healthy"
        assert client.get("/").status_code == 200
