"""
Shared fixtures: in-memory SQLite, a mongomock log store, an inline audit
sink, a recording email sender and a seeded department with its people and
halls.
"""

from datetime import datetime, timedelta
from typing import List

import mongomock
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hallbook.config.settings import Settings
from hallbook.db.init_db import drop_db, init_db
from hallbook.main import create_app
from hallbook.models.booking import Booking
from hallbook.models.department import Department, Profile, UserRoleAssignment
from hallbook.models.enums import BookingStatus, UserRole
from hallbook.models.hall import HallTechStaff, SeminarHall
from hallbook.services.audit.audit_log_sink import AuditLogSink
from hallbook.services.audit.log_store import MongoLogStore
from hallbook.services.notification.email_notifier import EmailNotifier

CRON_SECRET = "test-cron-secret"

NOW = datetime(2025, 3, 10, 10, 0, 0)


class RecordingSender:
    """Stands in for SMTP delivery and remembers every message."""

    def __init__(self):
        self.messages: List = []
        self.fail_with = None

    def __call__(self, message, config):
        if self.fail_with is not None:
            raise self.fail_with
        self.messages.append(message)


@pytest.fixture
def now():
    """A fixed instant so time based assertions stay stable."""
    return NOW


@pytest.fixture
def settings():
    return Settings(
        ENVIRONMENT="test",
        MONGODB_URI="mongodb://localhost:27017",
        MONGODB_DB="hallbook_test",
        SCHEDULER_ENABLED=False,
        CRON_SECRET=CRON_SECRET,
        SMTP_HOST="smtp.test.local",
        FROM_EMAIL="no-reply@hallbook.test",
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    drop_db(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def mongo_client():
    return mongomock.MongoClient()


@pytest.fixture
def log_store(settings, mongo_client):
    store = MongoLogStore.from_settings(settings, client_factory=lambda uri: mongo_client)
    store.start()
    return store


@pytest.fixture
def log_db(log_store):
    """The mongomock database the sink writes to."""
    return log_store.client[log_store.database]


@pytest.fixture
def sink(log_store):
    # no executor: writes happen inline so tests can assert on them directly
    return AuditLogSink(log_store, max_retries=2)


@pytest.fixture
def email_sender():
    return RecordingSender()


@pytest.fixture
def notifier(settings, sink, email_sender):
    return EmailNotifier(settings, sink, sender=email_sender)


# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------

def make_profile(db, name, email, roles, department=None):
    profile = Profile(
        name=name,
        email=email,
        department_id=department.id if department else None,
        role_assignments=[UserRoleAssignment(role=role) for role in roles],
    )
    db.add(profile)
    db.flush()
    return profile


@pytest.fixture
def new_profile(db):
    """Factory for extra profiles: new_profile(name, email, roles, department)."""

    def _make(name, email, roles, department=None):
        profile = make_profile(db, name, email, roles, department)
        db.commit()
        return profile

    return _make


@pytest.fixture
def department(db):
    dept = Department(name="Computer Science", description="CS department")
    db.add(dept)
    db.commit()
    return dept


@pytest.fixture
def hod(db, department):
    profile = make_profile(db, "Dr. Rao", "hod@college.edu", [UserRole.HOD], department)
    department.hod_id = profile.id
    db.commit()
    return profile


@pytest.fixture
def teacher(db, department):
    profile = make_profile(db, "Ms. Iyer", "teacher@college.edu", [UserRole.TEACHER], department)
    db.commit()
    return profile


@pytest.fixture
def tech_staff(db, department):
    profile = make_profile(db, "Mr. Das", "tech@college.edu", [UserRole.TECH_STAFF], department)
    db.commit()
    return profile


@pytest.fixture
def hall(db, department, tech_staff):
    hall = SeminarHall(
        name="Auditorium Hall",
        location="Block A",
        seating_capacity=250,
        department_id=department.id,
    )
    db.add(hall)
    db.flush()
    db.add(HallTechStaff(hall_id=hall.id, tech_staff_id=tech_staff.id))
    db.commit()
    return hall


@pytest.fixture
def second_hall(db, department):
    hall = SeminarHall(name="Seminar Room 2", location="Block B", seating_capacity=60, department_id=department.id)
    db.add(hall)
    db.commit()
    return hall


@pytest.fixture
def make_booking(db, hall, teacher):
    """Insert a booking directly, bypassing the workflow."""

    def _make(start, hours=2, status=BookingStatus.PENDING, hall_id=None, teacher_id=None, **extra):
        booking = Booking(
            hall_id=hall_id or hall.id,
            teacher_id=teacher_id or teacher.id,
            booking_date=start.date(),
            start_time=start,
            end_time=start + timedelta(hours=hours),
            purpose=extra.pop("purpose", "Guest lecture"),
            status=status,
            **extra,
        )
        db.add(booking)
        db.commit()
        return booking

    return _make


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

@pytest.fixture
def app(settings, engine, session_factory, log_store, sink, notifier):
    return create_app(
        settings=settings,
        engine=engine,
        session_factory=session_factory,
        log_store=log_store,
        sink=sink,
        notifier=notifier,
    )


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
