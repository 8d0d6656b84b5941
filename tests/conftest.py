# tests/conftest.py
"""
Pytest configuration for the lab booking core.

Every test gets its own in-memory SQLite database, a recording email sender
instead of Resend, and a memory-backed cache.
"""

import os

# Set test configuration BEFORE any labbook imports
os.environ["ENVIRONMENT"] = "test"
os.environ["IS_TESTING"] = "true"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["TIMEZONE"] = "UTC"
os.environ["EMAIL_ENABLED"] = "true"
os.environ.pop("REDIS_URL", None)
os.environ.pop("RESEND_API_KEY", None)

from datetime import date

from fastapi.testclient import TestClient
import pytest
from sqlalchemy.orm import Session, sessionmaker

from labbook.api.dependencies import get_cache_service_dep, get_db, get_email_sender
from labbook.core.enums import InstrumentStatus, RoleName
from labbook.database import build_engine, init_db
from labbook.main import app
from labbook.models.instrument import Instrument
from labbook.models.user import User
from labbook.schemas.user import CurrentUser
from labbook.services.booking_service import BookingService
from labbook.services.cache_service import CacheService
from labbook.services.delay_service import DelayService
from labbook.services.notification_service import NotificationService
from tests.helpers.booking_helpers import RecordingEmailSender


@pytest.fixture
def engine():
    test_engine = build_engine("sqlite:///:memory:")
    init_db(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def db(engine) -> Session:
    TestSession = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = TestSession()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


def _create_user(db: Session, name: str, email: str, role: RoleName) -> CurrentUser:
    user = User(name=name, email=email, role=role)
    db.add(user)
    db.commit()
    return CurrentUser(id=user.id, name=user.name, email=user.email, role=user.role)


@pytest.fixture
def admin_user(db) -> CurrentUser:
    return _create_user(db, "Ada Admin", "ada.admin@lab.example", RoleName.ADMIN)


@pytest.fixture
def regular_user(db) -> CurrentUser:
    return _create_user(db, "Rosalind Researcher", "rosalind@lab.example", RoleName.USER)


@pytest.fixture
def other_user(db) -> CurrentUser:
    return _create_user(db, "Otto Other", "otto@lab.example", RoleName.USER)


@pytest.fixture
def instrument(db) -> Instrument:
    microscope = Instrument(
        name="Confocal Microscope",
        type="Microscope",
        model="LSM 980",
        location="Room 2.14",
        status=InstrumentStatus.AVAILABLE,
        calibration_due=date(2099, 1, 1),
    )
    db.add(microscope)
    db.commit()
    return microscope


@pytest.fixture
def second_instrument(db) -> Instrument:
    sequencer = Instrument(
        name="DNA Sequencer",
        type="Sequencer",
        location="Room 3.02",
        status=InstrumentStatus.AVAILABLE,
    )
    db.add(sequencer)
    db.commit()
    return sequencer


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def cache() -> CacheService:
    return CacheService()


@pytest.fixture
def notification_service(db, email_sender) -> NotificationService:
    return NotificationService(db, email_sender=email_sender)


@pytest.fixture
def booking_service(db, notification_service, cache) -> BookingService:
    return BookingService(
        db,
        notification_service=notification_service,
        cache=cache,
        strict_versioning=False,
        auto_complete_enabled=False,
    )


@pytest.fixture
def delay_service(db, notification_service, cache) -> DelayService:
    return DelayService(db, notification_service=notification_service, cache=cache)


@pytest.fixture
def client(db, email_sender, cache):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    app.dependency_overrides[get_cache_service_dep] = lambda: cache
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
