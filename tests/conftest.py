import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app
from app.models.verification_code import VerificationCode

TEST_EMAIL = "a@gmail.com"
TEST_PASSWORD = "Passw0rd!"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        jwt_secret_key="test-secret",
        app_env="test",
        database_url="sqlite://",
        scheduler_enabled=False,
        mailgun_api_key="",
        mailgun_domain="",
        static_dir=str(tmp_path),
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(app, client):
    # client first: startup creates the tables
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


def latest_code(db, email: str) -> str:
    db.expire_all()
    row = db.query(VerificationCode).filter(VerificationCode.email == email).order_by(VerificationCode.id.desc()).first()
    assert row is not None, f"no verification code for {email}"
    return row.code


def signup(client, email=TEST_EMAIL, password=TEST_PASSWORD, full_name="Jane Doe", username="janed"):
    return client.post(
        "/api/auth/signup",
        json={"email": email, "password": password, "fullName": full_name, "username": username},
    )


@pytest.fixture
def verified_user(client, db):
    """Signed-up, verified user; the client holds the session cookie."""
    assert signup(client).status_code == 201
    r = client.post("/api/auth/verify-email", json={"email": TEST_EMAIL, "code": latest_code(db, TEST_EMAIL)})
    assert r.status_code == 200
    return r.json()["user"]
