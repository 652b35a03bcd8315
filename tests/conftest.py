import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("OTP_BACKEND", "memory")

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from storefront.core.errors import NotificationError, UpstreamError
from storefront.db.session import create_tables, make_engine
from storefront.gateways.persistence import PersistenceGateway
from storefront.notifications.sender import NotificationSender
from storefront.services.accounts import AccountService
from storefront.services.orders import OrderWorkflow
from storefront.services.password_reset import InMemoryCodeStore, PasswordResetService
from storefront.workers.background import BackgroundDispatcher

OWNER_EMAIL = "owner@example.com"


class FakeMailer:
    def __init__(self):
        self.sent = []
        self.fail = False

    def send_html(self, to, subject, html):
        if self.fail:
            raise NotificationError(f"Failed to send email to {to}")
        self.sent.append({"to": to, "subject": subject, "html": html})


class FakeAnalytics:
    def __init__(self):
        self.records = []
        self.fail = False

    def append(self, record):
        if self.fail:
            raise UpstreamError("Sheets integration error: boom")
        self.records.append(record)


class InlineDispatcher(BackgroundDispatcher):
    """Runs submitted tasks immediately, with the same error isolation."""

    def submit(self, fn, *args, description=""):
        self._run(fn, args, description or fn.__name__)
        return None


class FrozenClock:
    def __init__(self, now=None):
        self.now = now or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def engine():
    eng = make_engine("sqlite://")
    create_tables(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def gateway(engine):
    return PersistenceGateway(sessionmaker(bind=engine, expire_on_commit=False))


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def notifier(mailer):
    return NotificationSender(mailer)


@pytest.fixture
def analytics():
    return FakeAnalytics()


@pytest.fixture
def dispatcher():
    return InlineDispatcher()


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def user(gateway):
    return gateway.insert("users", [{
        "name": "Test User",
        "email": "testuser@example.com",
        "password": "testpassword",
    }])[0]


@pytest.fixture
def workflow(gateway, notifier, analytics, dispatcher, clock):
    return OrderWorkflow(gateway, notifier, analytics, dispatcher, OWNER_EMAIL, clock=clock)


@pytest.fixture
def code_store():
    return InMemoryCodeStore()


@pytest.fixture
def reset_service(gateway, notifier, code_store, clock):
    return PasswordResetService(gateway, notifier, code_store, ttl_seconds=600, clock=clock)


@pytest.fixture
def accounts(gateway, analytics, dispatcher, clock):
    return AccountService(gateway, analytics, dispatcher, clock=clock)


@pytest.fixture
def client(gateway, workflow, reset_service, accounts):
    from storefront.api import deps
    from storefront.main import app

    app.dependency_overrides[deps.get_gateway] = lambda: gateway
    app.dependency_overrides[deps.get_order_workflow] = lambda: workflow
    app.dependency_overrides[deps.get_password_reset_service] = lambda: reset_service
    app.dependency_overrides[deps.get_account_service] = lambda: accounts
    yield TestClient(app)
    app.dependency_overrides.clear()
