"""Tests for the background scheduler wiring."""

import pytest

from gigmarket.config import settings
from gigmarket.core.scheduler import MarketplaceScheduler
from gigmarket.services.profile_inspector import ProfileInspector
from gigmarket.services.inspection_queue import InspectionQueue
from gigmarket.services.notification_service import LoggingNotifier, NotificationDispatcher
from gigmarket.utils.constants import ROLE_STUDENT
from tests.conftest import principal_for


@pytest.fixture
def marketplace_scheduler(session_factory):
    scheduler = MarketplaceScheduler(
        session_factory,
        inspection_queue=InspectionQueue(session_factory, inspector=ProfileInspector(enabled=False)),
        dispatcher=NotificationDispatcher(session_factory, notifier=LoggingNotifier()),
    )
    yield scheduler
    if scheduler.running:
        scheduler.shutdown(wait=False)


class TestMarketplaceScheduler:
    def test_start_registers_jobs(self, marketplace_scheduler):
        marketplace_scheduler.start()

        status = marketplace_scheduler.get_status()
        assert status["running"] is True
        assert {job["id"] for job in status["jobs"]} == {"shortlist_tick", "notification_outbox"}

        marketplace_scheduler.shutdown(wait=False)
        assert marketplace_scheduler.running is False

    def test_inspection_job_only_when_enabled(self, monkeypatch, marketplace_scheduler):
        monkeypatch.setattr(settings, "ENABLE_REMOTE_PROFILE_INSPECTION", True)

        marketplace_scheduler.start()

        ids = {job["id"] for job in marketplace_scheduler.get_status()["jobs"]}
        assert "inspection_queue" in ids

    def test_ticks_delegate_to_services(self, marketplace_scheduler, employer, make_user, make_job, job_service):
        job = make_job(employer, positions_required=1)
        for _ in range(3):
            job_service.apply_for_job(principal_for(make_user(ROLE_STUDENT)), job.id, {})

        assert marketplace_scheduler.run_shortlist_tick()["closed"] == 1
        assert marketplace_scheduler.run_inspection_batch() == {"done": 0, "failed": 0}
        # application_received x3 and applications_closed
        assert marketplace_scheduler.run_outbox_dispatch()["sent"] == 4
