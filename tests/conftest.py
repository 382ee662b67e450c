"""
Shared fixtures: an in-memory stand-in for the Supabase query builder,
a scripted email sender, and a TestClient wired to both.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

from dedcore_landing.core.deps import get_email_sender, get_session_guard, get_subscriber_store
from dedcore_landing.core.exceptions import EmailDeliveryError
from dedcore_landing.models.newsletter import EmailConfigStatus
from dedcore_landing.models.subscriber import Subscriber, SubscriberStatus
from dedcore_landing.services.session_guard import AdminSessionGuard
from dedcore_landing.services.subscriber_store import SupabaseSubscriberStore

ADMIN_PASSWORD = "correct-horse-battery"
TABLE = "newsletter_subscribers"


class FakeResponse:
    def __init__(self, data: List[Dict[str, Any]], count: Optional[int] = None):
        self.data = data
        self.count = count


class FakeQuery:
    """Records filters and applies them on execute(), like postgrest's builder."""

    def __init__(self, table: "FakeTable", op: str, payload: Any = None, count: Optional[str] = None):
        self.table = table
        self.op = op
        self.payload = payload
        self.count_mode = count
        self.filters = []
        self.order_column = None
        self.order_desc = False

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self.order_column = column
        self.order_desc = desc
        return self

    def execute(self):
        if self.table.fail is not None:
            raise self.table.fail

        if self.op == "insert":
            if any(r["email"] == self.payload["email"] for r in self.table.rows):
                raise APIError({
                    "code": "23505",
                    "message": "duplicate key value violates unique constraint",
                    "details": "Key (email) already exists.",
                    "hint": None,
                })
            self.table.rows.append(dict(self.payload))
            return FakeResponse([dict(self.payload)])

        rows = [r for r in self.table.rows if all(r.get(c) == v for c, v in self.filters)]

        if self.op == "update":
            for r in rows:
                r.update(self.payload)
            return FakeResponse([dict(r) for r in rows])

        if self.order_column:
            rows = sorted(rows, key=lambda r: r[self.order_column], reverse=self.order_desc)
        count = len(rows) if self.count_mode == "exact" else None
        return FakeResponse([dict(r) for r in rows], count=count)


class FakeTable:
    def __init__(self):
        self.rows: List[Dict[str, Any]] = []
        self.fail: Optional[Exception] = None

    def select(self, *columns, count=None):
        return FakeQuery(self, "select", count=count)

    def insert(self, row):
        return FakeQuery(self, "insert", payload=row)

    def update(self, values):
        return FakeQuery(self, "update", payload=values)


class FakeRPC:
    def __init__(self, client, fn, params):
        self.client = client
        self.fn = fn
        self.params = params

    def execute(self):
        if self.client.rpc_fail is not None and self.client.rpc_fail in self.params["sql"]:
            raise RuntimeError("permission denied")
        self.client.rpc_calls.append((self.fn, self.params))
        return FakeResponse([])


class FakeSupabaseClient:
    def __init__(self):
        self.tables: Dict[str, FakeTable] = {}
        self.rpc_calls = []
        self.rpc_fail: Optional[str] = None

    def table(self, name):
        return self.tables.setdefault(name, FakeTable())

    def rpc(self, fn, params):
        return FakeRPC(self, fn, params)


class FakeEmailSender:
    """Email gateway double: scripted verify result and failing addresses."""

    configured = True
    service = "fake"

    def __init__(self, working: bool = True, failing=()):
        self.working = working
        self.failing = set(failing)
        self.verify_calls = 0
        self.attempts: List[str] = []
        self.delivered: List[Dict[str, str]] = []

    async def verify_configuration(self) -> bool:
        self.verify_calls += 1
        return self.working

    async def send_email(self, to_email: str, subject: str, html_content: str):
        self.attempts.append(to_email)
        if to_email in self.failing:
            raise EmailDeliveryError(to_email, "550 mailbox unavailable")
        self.delivered.append({"to": to_email, "subject": subject, "html": html_content})
        return {"message_id": f"<{len(self.delivered)}@fake>", "to_email": to_email}

    def get_config_status(self) -> EmailConfigStatus:
        return EmailConfigStatus(
            configured=True,
            service=self.service,
            user="news@dedcore.dev",
            sender="DedCore <news@dedcore.dev>"
        )


def make_subscriber(email: str, created_at: datetime, source: str = "website",
                    status: SubscriberStatus = SubscriberStatus.ACTIVE) -> Subscriber:
    return Subscriber(id=email, email=email, created_at=created_at, source=source, status=status)


def seed_row(client: FakeSupabaseClient, email: str, created_at: datetime,
             source: str = "website", status: str = "active") -> None:
    client.table(TABLE).rows.append({
        "id": email,
        "email": email,
        "source": source,
        "status": status,
        "created_at": created_at.astimezone(timezone.utc).isoformat(),
    })


@pytest.fixture
def supabase_client() -> FakeSupabaseClient:
    return FakeSupabaseClient()


@pytest.fixture
def store(supabase_client) -> SupabaseSubscriberStore:
    return SupabaseSubscriberStore(supabase_client, TABLE)


@pytest.fixture
def sender() -> FakeEmailSender:
    return FakeEmailSender()


@pytest.fixture
def guard() -> AdminSessionGuard:
    return AdminSessionGuard(admin_password=ADMIN_PASSWORD, secret_key="test-secret")


@pytest.fixture
def client(store, sender, guard):
    """TestClient with the gateways replaced by the fakes above."""
    from main import app

    app.dependency_overrides[get_subscriber_store] = lambda: store
    app.dependency_overrides[get_email_sender] = lambda: sender
    app.dependency_overrides[get_session_guard] = lambda: guard

    with TestClient(app) as test_client:
        app.state.subscriber_store = store
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def admin_client(client):
    """Client already holding a valid admin-session cookie."""
    response = client.post("/api/admin/login", json={"password": ADMIN_PASSWORD})
    assert response.status_code == 200
    return client
