from datetime import timedelta

import pytest

from clinic.core.exceptions import AuthError, AuthorizationError, ValidationError
from clinic.core.security import UserRole, create_access_token
from clinic.repositories import UserRepository
from clinic.schemas.auth import UserRegister
from clinic.services.auth_service import AuthService
from tests.conftest import login_headers, register

# Test data
test_user_data = {
    "name": "Test User",
    "email": "test@example.com",
    "mobile_number": "0712345678",
    "password": "TestPassword123",
    "role": "patient",
}

test_login_data = {
    "email": "test@example.com",
    "password": "TestPassword123"
}


class TestAuthService:

    @pytest.fixture
    def auth(self, db):
        return AuthService(UserRepository(db))

    def test_register_stores_hash_not_plaintext(self, auth):
        user = auth.register(UserRegister(**test_user_data))

        assert user.id is not None
        assert user.password_hash != test_user_data["password"]
        assert user.password_hash.startswith("$2")

    def test_register_duplicate_email_adds_nothing(self, auth, users):
        auth.register(UserRegister(**test_user_data))

        with pytest.raises(ValidationError):
            auth.register(UserRegister(**{**test_user_data, "name": "Someone Else"}))

        assert len(users.list_all()) == 1

    def test_register_duplicate_email_race(self, auth, users, monkeypatch):
        auth.register(UserRegister(**test_user_data))
        # both registrations pass the lookup before either commits
        monkeypatch.setattr(auth.users, "find_by_email", lambda email: None)

        with pytest.raises(ValidationError, match="already registered"):
            auth.register(UserRegister(**{**test_user_data, "name": "Someone Else"}))

        assert len(users.list_all()) == 1

    @pytest.mark.parametrize("extra", [
        {"specialization": "heart"},
        {"available_days": ["Mon", "Tue"]},
    ])
    def test_doctor_fields_rejected_for_patient(self, auth, users, extra):
        with pytest.raises(ValidationError):
            auth.register(UserRegister(**{**test_user_data, **extra}))

        assert users.list_all() == []

    def test_doctor_keeps_specialization_and_days(self, auth):
        user = auth.register(UserRegister(**{
            **test_user_data,
            "role": "doctor",
            "specialization": "lungs",
            "available_days": ["Sun", "Wed"],
        }))

        assert user.specialization.value == "lungs"
        assert user.available_days == ["Sun", "Wed"]

    def test_login_token_verifies_to_same_identity(self, auth):
        registered = auth.register(UserRegister(**test_user_data))

        user, token = auth.login(test_login_data["email"], test_login_data["password"])
        identity = auth.verify(token.access_token)

        assert user.id == registered.id
        assert identity.user_id == registered.id
        assert identity.role == UserRole.PATIENT
        assert token.expires_in == 3600

    def test_login_wrong_password(self, auth):
        auth.register(UserRegister(**test_user_data))

        with pytest.raises(AuthError, match="Invalid credentials"):
            auth.login(test_login_data["email"], "wrongpassword")

    def test_login_unknown_email(self, auth):
        with pytest.raises(AuthError, match="Invalid credentials"):
            auth.login("nobody@example.com", "whatever123")

    def test_verify_expired_token(self, auth):
        token = create_access_token(1, UserRole.PATIENT, expires_delta=timedelta(seconds=-1))

        with pytest.raises(AuthError, match="expired"):
            auth.verify(token.access_token)

    def test_verify_tampered_token(self, auth):
        token = create_access_token(1, UserRole.ADMIN)

        with pytest.raises(AuthError):
            auth.verify(token.access_token + "x")


class TestAuthentication:

    def test_register_user(self, client):
        """Test user registration."""
        response = client.post("/api/v1/auth/register", json=test_user_data)
        assert response.status_code == 201

        data = response.json()
        assert data["email"] == test_user_data["email"]
        assert data["role"] == test_user_data["role"]
        assert "password" not in data
        assert "password_hash" not in data

    def test_register_duplicate_email(self, client):
        """Test registration with duplicate email."""
        client.post("/api/v1/auth/register", json=test_user_data)

        response = client.post("/api/v1/auth/register", json=test_user_data)
        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"
        assert "already registered" in response.json()["detail"]

    def test_register_invalid_password(self, client):
        """Test registration with invalid password."""
        invalid_data = test_user_data.copy()
        invalid_data["password"] = "weak"

        response = client.post("/api/v1/auth/register", json=invalid_data)
        assert response.status_code == 422

    def test_register_missing_fields(self, client):
        invalid_data = test_user_data.copy()
        del invalid_data["mobile_number"]

        response = client.post("/api/v1/auth/register", json=invalid_data)
        assert response.status_code == 422

    def test_register_unknown_specialization(self, client):
        response = register(client, role="doctor", specialization="bones")
        assert response.status_code == 422

    def test_login_success(self, client):
        """Test successful login."""
        client.post("/api/v1/auth/register", json=test_user_data)

        response = client.post("/api/v1/auth/login", json=test_login_data)
        assert response.status_code == 200

        data = response.json()
        assert "access_token" in data
        assert data["token_type"] == "bearer"
        assert data["expires_in"] == 3600
        assert data["user"]["email"] == test_user_data["email"]

    def test_login_invalid_credentials(self, client):
        """Test login with invalid credentials."""
        invalid_login = {
            "email": "nonexistent@example.com",
            "password": "wrongpassword"
        }

        response = client.post("/api/v1/auth/login", json=invalid_login)
        assert response.status_code == 401

    def test_login_wrong_password(self, client):
        """Test login with wrong password."""
        client.post("/api/v1/auth/register", json=test_user_data)

        wrong_login = test_login_data.copy()
        wrong_login["password"] = "wrongpassword"

        response = client.post("/api/v1/auth/login", json=wrong_login)
        assert response.status_code == 401
        assert response.json()["error"] == "AuthError"

    def test_get_current_user(self, client):
        """Test getting current user info."""
        client.post("/api/v1/auth/register", json=test_user_data)
        headers = login_headers(client, test_login_data["email"])

        response = client.get("/api/v1/auth/me", headers=headers)
        assert response.status_code == 200
        assert response.json()["email"] == test_user_data["email"]

    def test_get_current_user_invalid_token(self, client):
        """Test get current user with invalid token."""
        headers = {"Authorization": "Bearer invalid_token"}

        response = client.get("/api/v1/auth/me", headers=headers)
        assert response.status_code == 401

    def test_get_current_user_without_token(self, client):
        response = client.get("/api/v1/auth/me")
        assert response.status_code == 401

    def test_change_password(self, client):
        """Test password change."""
        client.post("/api/v1/auth/register", json=test_user_data)
        headers = login_headers(client, test_login_data["email"])

        password_data = {
            "current_password": "TestPassword123",
            "new_password": "NewPassword123"
        }

        response = client.post(
            "/api/v1/auth/change-password",
            json=password_data,
            headers=headers
        )
        assert response.status_code == 200

        old_login = client.post("/api/v1/auth/login", json=test_login_data)
        assert old_login.status_code == 401
        login_headers(client, test_login_data["email"], "NewPassword123")

    def test_change_password_wrong_current(self, client):
        """Test password change with wrong current password."""
        client.post("/api/v1/auth/register", json=test_user_data)
        headers = login_headers(client, test_login_data["email"])

        password_data = {
            "current_password": "WrongPassword",
            "new_password": "NewPassword123"
        }

        response = client.post(
            "/api/v1/auth/change-password",
            json=password_data,
            headers=headers
        )
        assert response.status_code == 400

    def test_verify_token(self, client):
        """Test token verification."""
        user = client.post("/api/v1/auth/register", json=test_user_data).json()
        headers = login_headers(client, test_login_data["email"])

        response = client.post("/api/v1/auth/verify-token", headers=headers)
        assert response.status_code == 200

        data = response.json()
        assert data["valid"] is True
        assert data["user_id"] == user["id"]
        assert data["role"] == "patient"


def test_auth_error_headers():
    assert AuthError().headers == {"WWW-Authenticate": "Bearer"}
    assert AuthError("expired", headers={"X-Reason": "expired"}).headers == {"X-Reason": "expired"}
    assert AuthorizationError().headers is None
    assert ValidationError("bad").headers is None
