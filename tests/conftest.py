"""
Pytest fixtures for the invoice desk test suite.

Provides:
- a throwaway SQLite file database per test (BEGIN IMMEDIATE locking, as
  configured by database.build_engine)
- seeded users and clients
- a TestClient whose session dependency uses the per-test database
- token helpers for the access gate
"""
import os
import tempfile

# Point the application at SQLite before any application module is imported
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(tempfile.gettempdir(), "invoicedesk-test.db")
os.environ.setdefault("JWT_SECRET", "test-secret")

from datetime import date, timedelta
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from database import build_engine, build_session_factory, get_session, init_db
from models import Client, Project, User, UserRole
from schemas.invoice import InvoiceCreate
from security import create_access_token, hash_password
from services.invoice_service import InvoiceService

ADMIN_PASSWORD = "admin-pass"
EMPLOYEE_PASSWORD = "employee-pass"


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'ledger.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def seed(session_factory):
    """Users, clients and a project, committed and detached from any open transaction."""
    session = session_factory()
    try:
        admin = User(
            username="admin",
            email="admin@example.com",
            password=hash_password(ADMIN_PASSWORD),
            full_name="Ada Admin",
            role=UserRole.ADMIN,
        )
        employee = User(
            username="clerk",
            email="clerk@example.com",
            password=hash_password(EMPLOYEE_PASSWORD),
            full_name="Cal Clerk",
            role=UserRole.EMPLOYEE,
        )
        disabled = User(
            username="former",
            email="former@example.com",
            password=hash_password(EMPLOYEE_PASSWORD),
            full_name="Former Staff",
            role=UserRole.EMPLOYEE,
            is_active=False,
        )
        client = Client(company_name="Acme Trading", contact_person="Ann Acme", city="Manila")
        other_client = Client(company_name="Globex", city="Cebu")
        inactive_client = Client(company_name="Defunct Ltd", is_active=False)
        session.add_all([admin, employee, disabled, client, other_client, inactive_client])
        session.flush()

        project = Project(client_id=client.id, project_name="Website redesign")
        session.add(project)
        session.commit()

        return SimpleNamespace(
            admin_id=admin.id,
            employee_id=employee.id,
            disabled_id=disabled.id,
            client_id=client.id,
            other_client_id=other_client.id,
            inactive_client_id=inactive_client.id,
            project_id=project.id,
        )
    finally:
        session.close()


@pytest.fixture
def db(session_factory, seed):
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


def _create_invoice(session, client_id, actor_id, total="1000.00", due_in_days=20,
                    status="sent", invoice_date=None):
    today = date.today()
    data = InvoiceCreate(
        client_id=client_id,
        invoice_date=invoice_date or today - timedelta(days=10),
        due_date=today + timedelta(days=due_in_days),
        status=status,
        items=[{"description": "Consulting", "quantity": "1", "unit_price": total}],
    )
    invoice = InvoiceService.create_invoice(session, data, actor_id=actor_id)
    session.commit()
    return invoice


@pytest.fixture
def make_invoice(db, seed):
    """Create and commit an invoice. ``session`` defaults to the test's ``db``."""

    def _make(total="1000.00", due_in_days=20, status="sent", client_id=None, session=None):
        return _create_invoice(
            session or db,
            client_id or seed.client_id,
            seed.admin_id,
            total=total,
            due_in_days=due_in_days,
            status=status,
        )

    return _make


@pytest.fixture
def committed_invoice(session_factory, seed):
    """Create an invoice in its own short-lived session; returns its id."""

    def _make(total="1000.00", due_in_days=20, status="sent"):
        session = session_factory()
        try:
            invoice = _create_invoice(
                session, seed.client_id, seed.admin_id,
                total=total, due_in_days=due_in_days, status=status,
            )
            return invoice.id
        finally:
            session.close()

    return _make


def token_for(user_id, username, role):
    return create_access_token(SimpleNamespace(id=user_id, username=username, role=role))


@pytest.fixture
def admin_headers(seed):
    return {"Authorization": f"Bearer {token_for(seed.admin_id, 'admin', 'admin')}"}


@pytest.fixture
def employee_headers(seed):
    return {"Authorization": f"Bearer {token_for(seed.employee_id, 'clerk', 'employee')}"}


@pytest.fixture
def api(session_factory, seed):
    """TestClient bound to the per-test database."""
    from main import app

    def _session_override():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_session] = _session_override
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
