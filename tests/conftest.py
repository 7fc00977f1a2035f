"""
Shared fixtures: an in-memory SQLite database per test, a TestClient wired
to it, and a recording notifier in place of SMTP.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import eventhire.db.models  # noqa: F401  registers every table on Base.metadata
from eventhire.core.security import create_access_token
from eventhire.db.base import Base, get_db
from eventhire.db.models.reference import Category, EventType, Expertise
from eventhire.main import app
from eventhire.schemas.booking import JobCreate, OrderCreate
from eventhire.services import booking, identity
from eventhire.services.notifications import get_notifier


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def notify(self, kind, recipient, payload):
        self.sent.append((kind, recipient, payload))
        return True

    def kinds(self):
        return [kind for kind, _, _ in self.sent]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(db, notifier):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()


# --------------------------
# Identity factories
# --------------------------

@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role="user", approved=True, **fields):
        counter["n"] += 1
        user = identity.create_identity(
            db,
            first_name=fields.pop("first_name", role.capitalize()),
            last_name=fields.pop("last_name", str(counter["n"])),
            email=fields.pop("email", f"{role}{counter['n']}@example.com"),
            password=fields.pop("password", "secret123"),
            role=role,
        )
        if approved and not user.is_approved:
            identity.approve_user(db, user.id)
        for field, value in fields.items():
            setattr(user.profile, field, value)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def customer(make_user):
    return make_user("user")


@pytest.fixture
def vendor_user(make_user):
    return make_user("vendor", business_name="Golden Plate Catering")


@pytest.fixture
def waiter_user(make_user):
    return make_user("waiter", hourly_rate=2500)


@pytest.fixture
def admin(make_user):
    return make_user("admin")


@pytest.fixture
def auth_headers():
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}

    return _headers


# --------------------------
# Catalog and transactions
# --------------------------

@pytest.fixture
def event_type(db):
    entry = EventType(name="Wedding", description="Weddings and receptions")
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


@pytest.fixture
def category(db):
    entry = Category(name="Catering")
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


@pytest.fixture
def expertise(db):
    entry = Expertise(name="Silver service")
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


@pytest.fixture
def order_details(event_type):
    def _details(**overrides):
        fields = dict(
            event_type_id=event_type.id,
            event_title="Ada & Tunde wedding",
            event_date=date(2026, 12, 5),
            start_time="14:00",
            end_time="20:00",
            guest_count=150,
            quoted_price=450000,
        )
        fields.update(overrides)
        return OrderCreate(**fields)

    return _details


@pytest.fixture
def job_details():
    def _details(**overrides):
        fields = dict(
            position="Head waiter",
            responsibilities=["Serve main course", "Coordinate team"],
            work_date=date(2026, 12, 5),
            start_time="13:00",
            end_time="21:30",
            hourly_rate=2000,
        )
        fields.update(overrides)
        return JobCreate(**fields)

    return _details


@pytest.fixture
def completed_order(db, customer, vendor_user, order_details):
    order = booking.create_order(db, customer, vendor_user.vendor_profile.id, order_details())
    for status in ("confirmed", "in-progress", "completed"):
        order = booking.transition_order(db, order.id, vendor_user, status)
    return order


@pytest.fixture
def completed_job(db, vendor_user, waiter_user, job_details):
    job = booking.create_job(db, vendor_user, waiter_user.waiter_profile.id, job_details())
    for status in ("accepted", "in-progress", "completed"):
        job = booking.transition_job(db, job.id, waiter_user, status)
    return job
