import os
import tempfile
from datetime import datetime, timedelta
from decimal import Decimal
from pathlib import Path

import pytest

# Configure the app before any isp_billing module is imported
_DB_DIR = Path(tempfile.mkdtemp(prefix="isp_billing_tests_"))
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR / 'test.db'}"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ.pop("ALLOW_LEGACY_PLAINTEXT_PASSWORDS", None)

from fastapi.testclient import TestClient  # noqa: E402

from isp_billing.data.base import Base, SessionLocal, create_tables, engine  # noqa: E402
from isp_billing.main import app  # noqa: E402


@pytest.fixture(autouse=True)
def reset_database():
    create_tables()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


def login(client: TestClient, username: str, password: str) -> dict:
    res = client.post("/api/auth/login", json={"username": username, "password": password})
    assert res.status_code == 200, res.text
    return {"Authorization": f"Bearer {res.json()['token']}"}


@pytest.fixture
def admin_headers(client):
    res = client.post("/api/users/seed-admin")
    assert res.status_code == 201, res.text
    return login(client, "admin", "admin123")


def create_client_user(client, admin_headers, username="alice", email=None, **extra):
    payload = {
        "username": username,
        "password": "secret123",
        "email": email or f"{username}@example.com",
    }
    payload.update(extra)
    res = client.post("/api/users", json=payload, headers=admin_headers)
    assert res.status_code == 201, res.text
    return res.json()


@pytest.fixture
def alice(client, admin_headers):
    user = create_client_user(client, admin_headers, "alice", first_name="Alice", last_name="Smith")
    user["headers"] = login(client, "alice", "secret123")
    return user


@pytest.fixture
def bob(client, admin_headers):
    user = create_client_user(client, admin_headers, "bob")
    user["headers"] = login(client, "bob", "secret123")
    return user


def create_fee(client, admin_headers, user_id, amount="50.00", days_until_due=30, description=None):
    payload = {
        "user_id": user_id,
        "amount": amount,
        "due_date": (datetime.utcnow() + timedelta(days=days_until_due)).isoformat(),
    }
    if description is not None:
        payload["description"] = description
    res = client.post("/api/fees", json=payload, headers=admin_headers)
    assert res.status_code == 201, res.text
    return res.json()


def money(value) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"))
