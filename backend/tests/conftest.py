"""Shared test fixtures for all test modules."""

import contextlib
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core import database as db_module
from app.core.config import settings
from app.core.database import Base, get_db
from app.core.session import create_session_token
from app.main import app
from app.models.payment_dialog import PaymentDialog
from app.schemas.user import SessionUser
from app.services.backend_client import BackendClient, get_backend_client

# Create an in-memory SQLite engine with StaticPool so all connections
# share the same database state and there are no file-locking issues.
_test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
_TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_test_engine)

BACKEND_URL = "http://backend.test"
ACCESS_TOKEN = "backend-access-token"
USER_EMAIL = "ana.garcia@textilesnorte.com"
COMPANY = "Textiles del Norte S.A. de C.V."

BACKEND_USER = {
    "id": "u-1",
    "email": USER_EMAIL,
    "company": COMPANY,
    "role": "admin",
    "permissions": ["invoices:read", "payments:write"],
    "status": "active",
}


def make_invoice(uuid: str, total: str, status: str = "pending", **overrides: Any) -> dict[str, Any]:
    """A raw invoice as the backend serialises it."""
    invoice = {
        "uuid": uuid,
        "folio": f"A-{uuid}",
        "company": COMPANY,
        "nombre_emisor": f"Proveedor {uuid}",
        "invoice_date": "2024-01-15T00:00:00Z",
        "entry_date": "2024-01-16",
        "total": total,
        "subtotal": total,
        "moneda": "MXN",
        "status": status,
        "condiciones_pago": "30 días",
        "metodo_pago": "PPD",
        "uso_cfdi": "G03",
        "saldo": total,
        "complementos": [],
    }
    invoice.update(overrides)
    return invoice


def dialogs_of(db, owner: str) -> list[PaymentDialog]:
    return db.query(PaymentDialog).filter(PaymentDialog.owner == owner).all()


class FakeBackend:
    """Scripted stand-in for the remote REST backend, served through httpx.MockTransport.

    Routes are keyed by ``(method, path)``; a registered exception is raised
    instead of answering, which surfaces as a transport failure.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], tuple[int, Any]] = {}
        self.requests: list[httpx.Request] = []
        self.set("GET", "/api/auth/me", BACKEND_USER)

    def set(self, method: str, path: str, body: Any = None, status: int = 200) -> None:
        self.routes[(method, path)] = (status, body)

    def fail(self, method: str, path: str, exc: Exception) -> None:
        self.routes[(method, path)] = (0, exc)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": "not found"})
        status, body = route
        if isinstance(body, Exception):
            raise body
        if status == 204:
            return httpx.Response(204)
        return httpx.Response(status, json=body)

    def client(self) -> BackendClient:
        return BackendClient(base_url=BACKEND_URL, transport=httpx.MockTransport(self.handler))


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test and truncate all data after.

    Patches the module-level engine and SessionLocal so all application code
    uses the in-memory test database.
    """
    original_engine = db_module.engine
    original_session = db_module.SessionLocal
    db_module.engine = _test_engine
    db_module.SessionLocal = _TestSessionLocal

    Base.metadata.create_all(bind=_test_engine)

    yield
    with _test_engine.connect() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            with contextlib.suppress(OperationalError):
                conn.execute(table.delete())
        conn.commit()

    db_module.engine = original_engine
    db_module.SessionLocal = original_session


@pytest.fixture
def db_session():
    gen = get_db()
    db = next(gen)
    try:
        yield db
    finally:
        for _ in gen:
            pass


@pytest.fixture
def backend():
    """Route every backend call made by the app to a FakeBackend."""
    fake = FakeBackend()
    app.dependency_overrides[get_backend_client] = fake.client
    yield fake
    app.dependency_overrides.pop(get_backend_client, None)


@pytest.fixture
def session_user():
    return SessionUser(user=USER_EMAIL, role="admin", company=COMPANY)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def auth_client(client, backend, session_user):
    """A TestClient carrying a valid session cookie."""
    client.cookies.set(
        settings.SESSION_COOKIE_NAME, create_session_token(session_user, ACCESS_TOKEN)
    )
    return client
