"""
Pytest fixtures and test configuration for the marketplace tests.

Every test gets a fresh in-memory SQLite database; the services are the
same classes the API and the scheduler use.
"""

import os

# Configure the environment before gigmarket.config builds its settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["CREATE_TABLES_ON_STARTUP"] = "false"
os.environ["ENABLE_REMOTE_PROFILE_INSPECTION"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["LOG_FORMAT"] = "console"
os.environ["PLATFORM_USER_ID"] = ""
os.environ["PAYMENT_GATEWAY_KEY_SECRET"] = "gateway-test-secret"
os.environ["NOTIFICATION_WEBHOOK_URL"] = ""

import uuid
from datetime import timedelta
from decimal import Decimal

import pytest

from gigmarket.core.security import Principal
from gigmarket.db.base import Base
from gigmarket.db.session import build_engine, build_session_factory
from gigmarket.models import User, Wallet
from gigmarket.services.job_service import JobService
from gigmarket.services.score_service import ScoreService
from gigmarket.services.shortlist_scheduler import ShortlistScheduler
from gigmarket.services.wallet_service import WalletService
from gigmarket.utils.constants import ROLE_ADMIN, ROLE_EMPLOYER, ROLE_STUDENT
from gigmarket.utils.helpers import round2, utc_now

STUDENT_PROFILE = {
    "skills": ["python", "figma"],
    "education": {"institution": "IIT Bombay", "degree": "B.Tech", "year": 2025},
    "location": {"city": "Pune", "state": "Maharashtra", "country": "India"},
}

EMPLOYER_PROFILE = {
    "business_name": "Chai Point",
    "business_type": "Cafe",
    "business_address": {"street": "FC Road", "city": "Pune", "state": "Maharashtra"},
}


def default_profile(role: str) -> dict:
    if role == ROLE_STUDENT:
        return dict(STUDENT_PROFILE)
    if role == ROLE_EMPLOYER:
        return dict(EMPLOYER_PROFILE)
    return {}


def principal_for(user: User) -> Principal:
    return Principal(id=str(user.id), role=user.role)


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def wallet_service(session_factory):
    return WalletService(session_factory)


@pytest.fixture
def score_service(session_factory):
    return ScoreService(session_factory)


@pytest.fixture
def job_service(session_factory, wallet_service, score_service):
    return JobService(session_factory, wallet_service=wallet_service, score_service=score_service)


@pytest.fixture
def shortlist_scheduler(session_factory):
    return ShortlistScheduler(session_factory)


@pytest.fixture
def make_user(session_factory):
    """Factory creating a user (complete profile, verified phone) with an optional wallet."""

    def _make(role=ROLE_STUDENT, balance=None, verified=True, profile=None, name=None):
        with session_factory.begin() as db:
            user = User(
                email=f"{role}-{uuid.uuid4().hex[:10]}@example.com",
                name=name or role.title(),
                role=role,
                phone="+919876543210",
                is_phone_verified=verified,
                profile=default_profile(role) if profile is None else profile,
            )
            db.add(user)
            db.flush()
            if balance is not None:
                db.add(Wallet(user_id=user.id, balance=round2(balance)))
        return user

    return _make


@pytest.fixture
def employer(make_user):
    return make_user(ROLE_EMPLOYER, balance=Decimal("1000.00"), name="Employer")


@pytest.fixture
def student(make_user):
    return make_user(ROLE_STUDENT, balance=Decimal("0.00"), name="Student")


@pytest.fixture
def admin(make_user):
    return make_user(ROLE_ADMIN, name="Admin")


@pytest.fixture
def make_job(job_service):
    """Factory posting a job for an employer."""

    def _make(employer, **overrides):
        data = {
            "title": "Barista for weekend event",
            "description": "Serve coffee at a two-day event",
            "category": "hospitality",
            "budget": Decimal("500.00"),
            "duration": "7 days",
            "job_type": "offline",
            "location": {"city": "Pune", "address": "FC Road"},
            "positions_required": 1,
        }
        data.update(overrides)
        return job_service.create_job(principal_for(employer), data)

    return _make


@pytest.fixture
def later():
    """Clock helper: utc_now() shifted by the given amount."""

    def _later(**kwargs):
        return utc_now() + timedelta(**kwargs)

    return _later
