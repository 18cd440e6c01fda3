import os

# Must be set before closerdesk.core.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["AUTO_ASSIGN_INTERVAL_MINUTES"] = "0"

from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from closerdesk.core.database import Base, get_db
from closerdesk.core.security import create_access_token
from closerdesk.main import app
from closerdesk.models import Appointment, Closer

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

BASE_TIME = datetime(2026, 3, 2, 9, 0, 0)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---------------------------------------------------------
# AUTH
# ---------------------------------------------------------
@pytest.fixture
def admin_headers():
    token = create_access_token({"isAdmin": True})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def closer_headers():
    def _headers(closer):
        token = create_access_token({"role": "closer", "closerId": closer.id})
        return {"Authorization": f"Bearer {token}"}
    return _headers


# ---------------------------------------------------------
# FACTORIES
# ---------------------------------------------------------
@pytest.fixture
def make_closer(db):
    counter = {"n": 0}

    def _make(name, active=True, approved=True, commission_rate="0.10", email=None):
        counter["n"] += 1
        closer = Closer(
            name=name,
            email=email or f"{name.lower().replace(' ', '.')}@example.com",
            is_active=active,
            is_approved=approved,
            commission_rate=Decimal(commission_rate),
            created_at=BASE_TIME + timedelta(minutes=counter["n"]),
        )
        db.add(closer)
        db.commit()
        db.refresh(closer)
        return closer
    return _make


@pytest.fixture
def make_appointment(db):
    counter = {"n": 0}

    def _make(name=None, closer=None, type="appointment", outcome=None, sale_value=None,
              status="scheduled", email=None, **extra):
        counter["n"] += 1
        n = counter["n"]
        appointment = Appointment(
            customer_name=name or f"Lead {n}",
            customer_email=email or f"lead{n}@example.com",
            scheduled_at=BASE_TIME + timedelta(hours=n),
            created_at=BASE_TIME + timedelta(minutes=n),
            duration=30,
            status=status,
            type=type,
            outcome=outcome,
            sale_value=Decimal(str(sale_value)) if sale_value is not None else None,
            closer_id=closer.id if closer else None,
            **extra,
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment
    return _make


@pytest.fixture
def session_factory():
    return TestingSessionLocal
