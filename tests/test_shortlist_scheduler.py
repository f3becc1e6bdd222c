"""Tests for offline auto-close and online shortlisting."""

from datetime import timedelta

import pytest
from sqlalchemy import select

from gigmarket.core.exceptions import JobNotFoundError, NotShortlistedError
from gigmarket.models import Job, JobApplication, NotificationOutbox
from gigmarket.services.shortlist_scheduler import rank_applications
from gigmarket.utils.constants import JOB_STATUS_CLOSED, JOB_STATUS_OPEN, ROLE_STUDENT
from gigmarket.utils.helpers import utc_now
from tests.conftest import principal_for

# evaluation scores produced by the URL heuristics
PROFILE_URLS = [
    "https://github.com/dev1",  # 25
    "https://www.linkedin.com/in/priya-patel-dev",  # 50
    "https://example.com",  # 0
    "https://jane.portfolio.dev/case-studies/app",  # 40
    "https://www.linkedin.com/in/rahul",  # 40
    "https://github.com/someone/awesome-project",  # 35
]


def events_for(session_factory, event):
    with session_factory() as db:
        return list(
            db.execute(select(NotificationOutbox.recipient_id).where(NotificationOutbox.event == event)).scalars()
        )


@pytest.fixture
def online_job(employer, make_job):
    return make_job(employer, job_type="online", location={}, positions_required=1, shortlist_window_hours=3)


def apply_online(job_service, make_user, job, urls, start, step=timedelta(minutes=1)):
    applications = []
    for i, url in enumerate(urls):
        student = make_user(ROLE_STUDENT)
        result = job_service.apply_for_job(
            principal_for(student), job.id, {"profile_url": url}, now=start + step * i
        )
        applications.append(result["application"])
    return applications


class TestRanking:
    def test_score_desc_then_earliest(self):
        t0 = utc_now()
        a = JobApplication(evaluation_score=40, created_at=t0 + timedelta(minutes=2))
        b = JobApplication(evaluation_score=40, created_at=t0)
        c = JobApplication(evaluation_score=90, created_at=t0 + timedelta(minutes=5))
        late = JobApplication(evaluation_score=100, created_at=t0 + timedelta(hours=4))

        ranked = rank_applications([a, b, c, late], cutoff=t0 + timedelta(hours=3))

        assert ranked == [c, b, a]


class TestOfflineAutoClose:
    def test_job_at_cap_is_closed_once(self, employer, make_user, make_job, job_service, shortlist_scheduler, session_factory):
        job = make_job(employer, positions_required=1)
        for _ in range(3):
            job_service.apply_for_job(principal_for(make_user(ROLE_STUDENT)), job.id, {})

        assert job_service.get_job(job.id).status == JOB_STATUS_OPEN

        stats = shortlist_scheduler.run_once()
        assert stats["closed"] == 1
        assert job_service.get_job(job.id).status == JOB_STATUS_CLOSED
        assert events_for(session_factory, "applications_closed") == [employer.id]

        again = shortlist_scheduler.run_once()
        assert again["closed"] == 0
        assert len(events_for(session_factory, "applications_closed")) == 1

    def test_job_below_cap_stays_open(self, employer, make_user, make_job, job_service, shortlist_scheduler):
        job = make_job(employer, positions_required=2)
        for _ in range(5):
            job_service.apply_for_job(principal_for(make_user(ROLE_STUDENT)), job.id, {})

        assert shortlist_scheduler.run_once()["closed"] == 0
        assert job_service.get_job(job.id).status == JOB_STATUS_OPEN

    def test_close_offline_job_is_conditional(self, employer, make_job, shortlist_scheduler):
        job = make_job(employer)
        assert shortlist_scheduler.close_offline_job(job.id) is True
        assert shortlist_scheduler.close_offline_job(job.id) is False


class TestOnlineShortlisting:
    def test_not_due_before_window_ends(self, online_job, make_user, job_service, shortlist_scheduler):
        start = utc_now()
        apply_online(job_service, make_user, online_job, PROFILE_URLS[:2], start)

        stats = shortlist_scheduler.run_once(now=start + timedelta(hours=2))

        assert stats["shortlisted"] == 0
        assert job_service.get_job(online_job.id).shortlist_computed is False

    def test_top_candidates_shortlisted_after_window(
        self, online_job, make_user, job_service, shortlist_scheduler, session_factory
    ):
        start = utc_now()
        applications = apply_online(job_service, make_user, online_job, PROFILE_URLS, start)

        stats = shortlist_scheduler.run_once(now=start + timedelta(hours=3, seconds=1))
        assert stats["shortlisted"] == 1

        job = job_service.get_job(online_job.id)
        assert job.shortlist_computed is True
        assert job.shortlisted_at is not None

        shortlisted = {a.id for a in job.applications if a.shortlisted}
        # positions 1 x multiplier 3: scores 50, 40 (earlier), 40
        expected = {applications[1].id, applications[3].id, applications[4].id}
        assert shortlisted == expected

        assert len(events_for(session_factory, "job_shortlisted")) == 3
        assert len(events_for(session_factory, "job_not_shortlisted")) == 3

    def test_two_positions_times_three_shortlists_six(
        self, employer, make_user, make_job, job_service, shortlist_scheduler
    ):
        job = make_job(employer, job_type="online", location={}, positions_required=2, shortlist_multiplier=3)
        urls = PROFILE_URLS + [
            "https://dribbble.com/shots/123456",
            "https://www.behance.net/gallery/1",
            "http://blog.example.org/about?me=1",
            "https://gitlab.com/someone",
        ]
        start = utc_now()
        applications = apply_online(job_service, make_user, job, urls, start)

        shortlist_scheduler.run_once(now=start + timedelta(hours=job.shortlist_window_hours, seconds=1))

        job = job_service.get_job(job.id)
        assert sum(1 for a in job.applications if a.shortlisted) == 6

        outsider = next(a for a in job.applications if not a.shortlisted)
        with pytest.raises(NotShortlistedError):
            job_service.accept_application(principal_for(employer), job.id, outsider.id)
        assert len(applications) == 10

    def test_applications_after_cutoff_are_ignored(self, online_job, make_user, job_service, shortlist_scheduler):
        start = utc_now()
        early = apply_online(job_service, make_user, online_job, PROFILE_URLS[2:3], start)
        late = apply_online(
            job_service, make_user, online_job, PROFILE_URLS[1:2], start + timedelta(hours=3, minutes=5)
        )

        shortlist_scheduler.run_once(now=start + timedelta(hours=4))

        job = job_service.get_job(online_job.id)
        flags = {a.id: a.shortlisted for a in job.applications}
        assert flags[early[0].id] is True
        assert flags[late[0].id] is False

    def test_shortlist_computed_exactly_once(self, online_job, make_user, job_service, shortlist_scheduler):
        start = utc_now()
        apply_online(job_service, make_user, online_job, PROFILE_URLS[:3], start)
        due = start + timedelta(hours=3, seconds=1)

        first = shortlist_scheduler.shortlist_job(online_job.id, due)
        second = shortlist_scheduler.shortlist_job(online_job.id, due)

        assert len(first) == 3
        assert second is None
        assert shortlist_scheduler.run_once(now=due)["shortlisted"] == 0

    def test_shortlisted_candidate_can_be_accepted(
        self, employer, online_job, make_user, job_service, shortlist_scheduler
    ):
        start = utc_now()
        applications = apply_online(job_service, make_user, online_job, PROFILE_URLS[:2], start)
        shortlist_scheduler.run_once(now=start + timedelta(hours=3, seconds=1))

        candidates = job_service.get_shortlisted_candidates(principal_for(employer), online_job.id)
        assert [c.id for c in candidates] == [applications[1].id, applications[0].id]

        result = job_service.accept_application(principal_for(employer), online_job.id, candidates[0].id)
        assert result["job"].status == JOB_STATUS_CLOSED

    def test_force_shortlist_ends_window_now(self, online_job, make_user, job_service, shortlist_scheduler, session_factory):
        start = utc_now()
        apply_online(job_service, make_user, online_job, PROFILE_URLS[:2], start)

        winners = shortlist_scheduler.force_shortlist(online_job.id, now=start + timedelta(minutes=30))

        assert len(winners) == 2
        with session_factory() as db:
            job = db.get(Job, online_job.id)
            assert job.shortlist_window_ends_at == start + timedelta(minutes=30)
        assert shortlist_scheduler.force_shortlist(online_job.id) is None

    def test_force_shortlist_unknown_job(self, shortlist_scheduler):
        with pytest.raises(JobNotFoundError):
            shortlist_scheduler.force_shortlist("6c1f0b52-1e1e-4a8b-9a51-000000000000")

    def test_cancelled_job_is_not_shortlisted(self, employer, online_job, make_user, job_service, shortlist_scheduler):
        start = utc_now()
        apply_online(job_service, make_user, online_job, PROFILE_URLS[:2], start)
        job_service.cancel_job(principal_for(employer), online_job.id)

        stats = shortlist_scheduler.run_once(now=start + timedelta(hours=4))

        assert stats["shortlisted"] == 0
        assert job_service.get_job(online_job.id).shortlist_computed is False
