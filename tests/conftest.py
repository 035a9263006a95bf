"""
Shared test fixtures.

Every test gets a fresh in-memory SQLite store (one shared connection via
StaticPool) and an app built around it. Outbound email is captured by
FakeMailer instead of being posted to Resend.
"""

import pytest
from fastapi import BackgroundTasks
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from jobportal.core.auth import hash_password
from jobportal.core.config import Settings, get_settings
from jobportal.db.postgres import Database
from jobportal.main import create_app
from jobportal.services.email_service import EmailService, get_email_service


class FakeMailer(EmailService):
    """Renders the real templates, records (to, subject) instead of sending."""

    def __init__(self):
        super().__init__(Settings(resend_api_key="test-key"))
        self.outbox = []

    def send(self, to, subject, html):
        self.outbox.append((to, subject))
        return True


# ============================================================
# Store + app
# ============================================================


@pytest.fixture
def database():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    db = Database(engine)
    db.init_schema()
    yield db
    db.dispose()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def client(database, mailer):
    app = create_app(database)
    app.dependency_overrides[get_email_service] = lambda: mailer
    return TestClient(app)


@pytest.fixture
def scheduled_tasks(monkeypatch):
    """Names of callables handed to BackgroundTasks; they still run."""
    names = []
    original = BackgroundTasks.add_task

    def record(tasks, func, *args, **kwargs):
        names.append(func.__name__)
        return original(tasks, func, *args, **kwargs)

    monkeypatch.setattr(BackgroundTasks, "add_task", record)
    return names


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    """Stored uploads land in a per-test directory."""
    monkeypatch.setattr(get_settings(), "upload_dir", str(tmp_path))
    return tmp_path


# ============================================================
# Accounts
# ============================================================


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


def login(client, email, password="secret123"):
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    body = response.json()
    return {"id": body["user"]["id"], "email": email, "headers": auth_headers(body["token"])}


@pytest.fixture
def make_user(client):
    """Register + login. Returns {"id", "email", "headers"}."""
    counter = {"n": 0}

    def _make(role="job_seeker", name=None):
        counter["n"] += 1
        email = f"{role}{counter['n']}@jobportal.io"
        response = client.post("/api/auth/register", json={
            "name": name or f"{role.title()} {counter['n']}",
            "email": email,
            "password": "secret123",
            "role": role,
        })
        assert response.status_code == 201, response.text
        return login(client, email)

    return _make


@pytest.fixture
def admin(client, database):
    """Admins cannot self-register, so the row is written directly."""
    with database.session() as s:
        s.execute(
            text("""
                INSERT INTO users (name, email, password, role)
                VALUES ('Site Admin', 'admin@jobportal.io', :password, 'admin')
            """),
            {"password": hash_password("secret123")}
        )
    return login(client, "admin@jobportal.io")


@pytest.fixture
def poster(make_user):
    return make_user("job_poster")


@pytest.fixture
def seeker(make_user):
    return make_user("job_seeker")


@pytest.fixture
def job(client, poster):
    """An active job owned by `poster`. Returns its id."""
    response = client.post("/api/jobs", headers=poster["headers"], json={
        "title": "Backend Engineer",
        "company": "Acme",
        "description": "Build and run APIs",
        "location": "Berlin",
        "job_type": "full_time",
    })
    assert response.status_code == 201, response.text
    return response.json()["jobId"]
