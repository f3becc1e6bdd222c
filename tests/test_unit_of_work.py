"""Tests for the retried unit-of-work decorator."""

from decimal import Decimal

import pytest
from sqlalchemy import select, update

from gigmarket.config import settings
from gigmarket.core.exceptions import ConcurrencyConflictError, InsufficientBalanceError
from gigmarket.db.unit_of_work import unit_of_work
from gigmarket.models import Wallet


def bump_version_behind_session(db, wallet_id):
    """Simulate another writer committing between our read and our write."""
    db.execute(
        update(Wallet)
        .where(Wallet.id == wallet_id)
        .values(version_id=Wallet.version_id + 1)
        .execution_options(synchronize_session=False)
    )


class CreditService:
    def __init__(self, session_factory, conflicts: int = 0):
        self.session_factory = session_factory
        self.conflicts = conflicts
        self.calls = 0

    @unit_of_work
    def credit(self, db, user_id, amount):
        self.calls += 1
        wallet = db.execute(select(Wallet).where(Wallet.user_id == user_id)).scalar_one()
        if self.calls <= self.conflicts:
            bump_version_behind_session(db, wallet.id)
        wallet.balance = wallet.balance + amount
        db.flush()
        return wallet

    @unit_of_work
    def fail(self, db, user_id):
        self.calls += 1
        raise InsufficientBalanceError()


@pytest.fixture(autouse=True)
def no_backoff(monkeypatch):
    monkeypatch.setattr(settings, "CONFLICT_RETRY_BACKOFF_SECONDS", 0)


def balance_of(session_factory, user_id):
    with session_factory() as db:
        return db.execute(select(Wallet.balance).where(Wallet.user_id == user_id)).scalar_one()


class TestUnitOfWork:
    def test_commits_on_success(self, employer, session_factory):
        service = CreditService(session_factory)
        service.credit(employer.id, Decimal("10.00"))

        assert service.calls == 1
        assert balance_of(session_factory, employer.id) == Decimal("1010.00")

    def test_retries_stale_version(self, employer, session_factory):
        service = CreditService(session_factory, conflicts=1)

        wallet = service.credit(employer.id, Decimal("10.00"))

        assert service.calls == 2
        assert wallet.balance == Decimal("1010.00")
        assert balance_of(session_factory, employer.id) == Decimal("1010.00")

    def test_gives_up_with_concurrency_error(self, monkeypatch, employer, session_factory):
        monkeypatch.setattr(settings, "CONFLICT_RETRY_ATTEMPTS", 3)
        service = CreditService(session_factory, conflicts=10)

        with pytest.raises(ConcurrencyConflictError) as exc_info:
            service.credit(employer.id, Decimal("10.00"))

        assert service.calls == 3
        assert exc_info.value.status_code == 503
        assert balance_of(session_factory, employer.id) == Decimal("1000.00")

    def test_business_errors_are_not_retried(self, employer, session_factory):
        service = CreditService(session_factory)

        with pytest.raises(InsufficientBalanceError):
            service.fail(employer.id)

        assert service.calls == 1

    def test_joins_callers_transaction(self, employer, session_factory):
        service = CreditService(session_factory)

        with pytest.raises(RuntimeError):
            with session_factory.begin() as db:
                service.credit(employer.id, Decimal("10.00"), session=db)
                service.credit(employer.id, Decimal("5.00"), session=db)
                raise RuntimeError("caller failed after both credits")

        assert service.calls == 2
        assert balance_of(session_factory, employer.id) == Decimal("1000.00")

        with session_factory.begin() as db:
            service.credit(employer.id, Decimal("10.00"), session=db)
            service.credit(employer.id, Decimal("5.00"), session=db)

        assert balance_of(session_factory, employer.id) == Decimal("1015.00")
