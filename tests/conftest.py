"""Shared test fixtures."""
import fnmatch
import os
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

os.environ["TESTING"] = "1"

from clinic.core.database import Base, create_session_factory, init_db
from clinic.core.security import Identity, UserRole, Specialization
from clinic.main import create_app
from clinic.models.user import User
from clinic.repositories import AppointmentRepository, DeletionRequestLedger, UserRepository
from clinic.services.admin_service import AdminService
from clinic.services.appointment_service import AppointmentService

NOW = datetime(2026, 3, 2, 9, 0, 0)


class InMemoryRedis:
    """Covers the subset of the redis-py client the ledger calls."""

    def __init__(self):
        self.data = {}
        self.ttls = {}

    def setex(self, key, time, value):
        self.data[key] = value
        self.ttls[key] = time
        return True

    def get(self, key):
        return self.data.get(key)

    def delete(self, *keys):
        removed = 0
        for key in keys:
            if key in self.data:
                del self.data[key]
                self.ttls.pop(key, None)
                removed += 1
        return removed

    def scan_iter(self, match=None):
        for key in list(self.data):
            if match is None or fnmatch.fnmatch(key, match):
                yield key


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def redis_client():
    return InMemoryRedis()


@pytest.fixture
def client(session_factory, redis_client):
    app = create_app(session_factory=session_factory, redis_client=redis_client)
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client


# Service-level fixtures

@pytest.fixture
def users(db):
    return UserRepository(db)


@pytest.fixture
def appointments(db):
    return AppointmentRepository(db)


@pytest.fixture
def ledger(redis_client):
    return DeletionRequestLedger(redis_client, ttl=timedelta(hours=168))


@pytest.fixture
def clock():
    """Mutable clock; tests move it with ``clock.now = ...``."""
    class Clock:
        now = NOW

        def __call__(self):
            return self.now

    return Clock()


@pytest.fixture
def service(users, appointments, ledger, clock):
    return AppointmentService(users, appointments, ledger, clock=clock)


@pytest.fixture
def admin_service(users, appointments):
    return AdminService(users, appointments)


@pytest.fixture
def make_user(users):
    """Insert a user directly, skipping password hashing."""
    counter = {"n": 0}

    def _make(role: UserRole, name: str = None, **extra) -> Identity:
        counter["n"] += 1
        user = users.insert(User(
            name=name or f"{role.value}-{counter['n']}",
            email=f"{role.value}{counter['n']}@example.com",
            mobile_number="0700000000",
            password_hash="not-a-real-hash",
            role=role,
            **extra
        ))
        return Identity(user_id=user.id, role=user.role)

    return _make


@pytest.fixture
def patient(make_user):
    return make_user(UserRole.PATIENT, "Alice")


@pytest.fixture
def doctor(make_user):
    return make_user(UserRole.DOCTOR, "Bob", specialization=Specialization.HEART)


@pytest.fixture
def admin(make_user):
    return make_user(UserRole.ADMIN, "Root")


# API helpers

def register(client, role="patient", email=None, password="TestPassword123", **extra):
    payload = {
        "name": extra.pop("name", f"Test {role}"),
        "email": email or f"{role}@example.com",
        "mobile_number": "0712345678",
        "password": password,
        "role": role,
    }
    payload.update(extra)
    return client.post("/api/v1/auth/register", json=payload)


def login_headers(client, email, password="TestPassword123"):
    response = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def register_and_login(client):
    """Register a user over the API and return (user_json, auth headers)."""
    def _do(role="patient", email=None, **extra):
        response = register(client, role=role, email=email, **extra)
        assert response.status_code == 201, response.text
        user = response.json()
        return user, login_headers(client, user["email"])

    return _do
