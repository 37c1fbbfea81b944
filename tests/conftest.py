"""Shared test fixtures and configuration."""
import os

# Settings are read once at import time
os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["APP_PASSWORD"] = "setup-secret"
os.environ["SITE_URL"] = "https://church.example"
for _var in ("VIMEO_ACCESS_TOKEN", "VIMEO_VIDEO_ID", "TWILIO_ACCOUNT_SID", "MAILERSEND_API_KEY"):
    os.environ.pop(_var, None)

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from church_attendance.api.deps import get_db, get_email_sender, get_sms_sender, get_vimeo_client
from church_attendance.core.constants import STAFF_COOKIE_NAME
from church_attendance.core.rate_limit import limiter
from church_attendance.core.security import create_access_token
from church_attendance.db import Base, Database
from church_attendance.integrations import EmailSender, SmsSender, VimeoClient
from church_attendance.main import app


@pytest.fixture(autouse=True)
def disable_rate_limiting_for_tests(request):
    """Disable rate limiting for all tests except rate limiting tests."""
    if "rate_limit" in request.keywords:
        limiter.reset()
        yield
        limiter.reset()
    else:
        limiter.enabled = False
        yield
        limiter.enabled = True


@pytest.fixture(scope="function")
def database():
    """A fresh in-memory database for each test."""
    database = Database(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=database.engine)
    yield database
    Base.metadata.drop_all(bind=database.engine)
    database.dispose()


@pytest.fixture(scope="function")
def db_session(database):
    """Create a new database session for a test."""
    session = database.session()
    try:
        yield session
    finally:
        session.close()


class ProviderLog:
    """Records outbound provider calls made through httpx.MockTransport."""

    def __init__(self):
        self.requests = []
        self.failing_hosts = set()

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host in self.failing_hosts:
            return httpx.Response(500, text="provider unavailable")
        if request.url.host == "api.twilio.com":
            return httpx.Response(201, json={"sid": f"SM{len(self.requests):04d}"})
        if request.url.host == "api.mailersend.com":
            return httpx.Response(202)
        return httpx.Response(200, json={})

    def to(self, host: str):
        return [r for r in self.requests if r.url.host == host]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def provider_log():
    return ProviderLog()


@pytest.fixture
def sms(provider_log):
    return SmsSender("AC123", "twilio-token", "+15550001111", transport=provider_log.transport)


@pytest.fixture
def email(provider_log):
    return EmailSender(
        "mailersend-key",
        "church@nlpc.net",
        "New Life Pentecostal Church",
        allowed_domain="nlpc.net",
        transport=provider_log.transport,
    )


@pytest.fixture
def vimeo(provider_log):
    return VimeoClient("vimeo-token", transport=provider_log.transport)


@pytest.fixture
def unconfigured_sms():
    return SmsSender(None, None, None)


@pytest.fixture
def unconfigured_email():
    return EmailSender(None, "church@nlpc.net", "New Life Pentecostal Church")


@pytest.fixture
def unconfigured_vimeo():
    return VimeoClient(None)


@pytest.fixture(scope="function")
def client(db_session, sms, email, vimeo):
    """Create a test client with a test database and recorded providers."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_sms_sender] = lambda: sms
    app.dependency_overrides[get_email_sender] = lambda: email
    app.dependency_overrides[get_vimeo_client] = lambda: vimeo
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def staff_token():
    """Generate a valid staff JWT token."""
    return create_access_token({"sub": "usher", "user_id": 1, "is_admin": True})


@pytest.fixture
def staff_client(client, staff_token):
    """Create a test client with the staff cookie already set."""
    client.cookies.set(STAFF_COOKIE_NAME, staff_token)
    return client
