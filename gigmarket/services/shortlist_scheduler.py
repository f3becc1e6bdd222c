"""
Shortlist Scheduler - Periodic Job Maintenance

Two passes, run every SHORTLIST_INTERVAL_SECONDS by the background
scheduler (see gigmarket.core.scheduler):

1. Offline auto-close: open offline jobs whose application count reached
   positions_required x 3 are closed (first come, first served).
2. Online shortlisting: online jobs whose shortlist window has ended are
   ranked once. In-window applications are sorted by evaluation score
   (desc) then application time (asc); the top positions_required x
   shortlist_multiplier are shortlisted.

Both passes claim a job with a conditional UPDATE, so a job is processed
exactly once even when several scheduler instances run in different
processes. This module is the only writer of `shortlisted` and
`shortlist_computed`.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, sessionmaker

from gigmarket.config import settings
from gigmarket.core.exceptions import JobNotFoundError
from gigmarket.db.unit_of_work import unit_of_work
from gigmarket.models.job import Job
from gigmarket.models.job_application import JobApplication
from gigmarket.services.notification_service import enqueue_notification
from gigmarket.utils.constants import (
    APPLICATION_STATUS_APPLIED,
    JOB_STATUS_CANCELLED,
    JOB_STATUS_CLOSED,
    JOB_STATUS_OPEN,
    JOB_TYPE_OFFLINE,
    JOB_TYPE_ONLINE,
    NOTIFICATION_TYPES,
)
from gigmarket.utils.helpers import to_uuid, utc_now

logger = logging.getLogger(__name__)


def rank_applications(applications: List[JobApplication], cutoff: Optional[datetime]) -> List[JobApplication]:
    """In-window applications, best evaluation score first, earlier application wins ties."""
    in_window = [a for a in applications if cutoff is None or a.created_at <= cutoff]
    return sorted(in_window, key=lambda a: (-(a.evaluation_score or 0), a.created_at))


class ShortlistScheduler:
    """Offline FCFS auto-close and online shortlisting."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def run_once(self, now: Optional[datetime] = None) -> Dict:
        """
        Run both passes once.

        Returns:
            Dict with closed / shortlisted / skipped / failed counters
        """
        now = now or utc_now()
        stats = {"closed": 0, "shortlisted": 0, "skipped": 0, "failed": 0}

        for job_id in self._offline_jobs_at_cap():
            try:
                if self.close_offline_job(job_id, now):
                    stats["closed"] += 1
                else:
                    stats["skipped"] += 1
            except Exception as e:
                stats["failed"] += 1
                logger.error(f"❌ Auto-close failed for job {job_id}: {e}", exc_info=True)

        for job_id in self._online_jobs_due(now):
            try:
                if self.shortlist_job(job_id, now) is not None:
                    stats["shortlisted"] += 1
                else:
                    stats["skipped"] += 1
            except Exception as e:
                stats["failed"] += 1
                logger.error(f"❌ Shortlisting failed for job {job_id}: {e}", exc_info=True)

        if stats["closed"] or stats["shortlisted"] or stats["failed"]:
            logger.info(
                f"⏱️  Shortlist tick: {stats['closed']} closed, {stats['shortlisted']} shortlisted, "
                f"{stats['skipped']} skipped, {stats['failed']} failed"
            )
        return stats

    # ------------------------------------------------------------------
    # Offline auto-close
    # ------------------------------------------------------------------

    @unit_of_work
    def _offline_jobs_at_cap(self, db: Session) -> List:
        query = (
            select(Job.id)
            .join(JobApplication, JobApplication.job_id == Job.id)
            .where(Job.job_type == JOB_TYPE_OFFLINE, Job.status == JOB_STATUS_OPEN)
            .group_by(Job.id, Job.positions_required)
            .having(
                func.count(JobApplication.id)
                >= Job.positions_required * settings.OFFLINE_APPLICATION_MULTIPLIER
            )
        )
        return list(db.execute(query).scalars())

    @unit_of_work
    def close_offline_job(self, db: Session, job_id, now: Optional[datetime] = None) -> bool:
        """Close an open offline job; False when it was no longer open."""
        now = now or utc_now()
        result = db.execute(
            update(Job)
            .where(Job.id == to_uuid(job_id), Job.status == JOB_STATUS_OPEN)
            .values(status=JOB_STATUS_CLOSED, closed_at=now, version_id=Job.version_id + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return False

        job = db.execute(
            select(Job).where(Job.id == to_uuid(job_id)).execution_options(populate_existing=True)
        ).scalar_one()
        enqueue_notification(
            db,
            NOTIFICATION_TYPES["APPLICATIONS_CLOSED"],
            job.employer_id,
            job=job,
            payload={"application_count": len(job.applications)},
        )
        logger.info(f"🚪 Offline job {job.id} auto-closed with {len(job.applications)} applications")
        return True

    # ------------------------------------------------------------------
    # Online shortlisting
    # ------------------------------------------------------------------

    @unit_of_work
    def _online_jobs_due(self, db: Session, now: datetime) -> List:
        query = select(Job.id).where(
            Job.job_type == JOB_TYPE_ONLINE,
            Job.shortlist_computed.is_(False),
            Job.shortlist_window_ends_at.is_not(None),
            Job.shortlist_window_ends_at <= now,
            Job.status != JOB_STATUS_CANCELLED,
        )
        return list(db.execute(query).scalars())

    @unit_of_work
    def shortlist_job(self, db: Session, job_id, now: Optional[datetime] = None) -> Optional[List[JobApplication]]:
        """
        Compute the shortlist for one job.

        Returns:
            The shortlisted applications, or None when the job was already
            computed (by this or another scheduler instance)
        """
        now = now or utc_now()
        claimed = db.execute(
            update(Job)
            .where(Job.id == to_uuid(job_id), Job.shortlist_computed.is_(False))
            .values(shortlist_computed=True, shortlisted_at=now, version_id=Job.version_id + 1)
            .execution_options(synchronize_session=False)
        )
        if claimed.rowcount != 1:
            return None

        job = db.execute(
            select(Job).where(Job.id == to_uuid(job_id)).execution_options(populate_existing=True)
        ).scalar_one()

        limit = max(1, job.positions_required) * max(1, job.shortlist_multiplier or 1)
        ranked = rank_applications(job.applications, job.shortlist_window_ends_at)
        winners = ranked[:limit]
        winner_ids = {a.id for a in winners}
        in_window_ids = {a.id for a in ranked}

        for application in job.applications:
            application.shortlisted = application.id in winner_ids

        for application in job.applications:
            if application.id in winner_ids:
                enqueue_notification(
                    db,
                    NOTIFICATION_TYPES["JOB_SHORTLISTED"],
                    application.student_id,
                    job=job,
                    payload={"application_id": str(application.id)},
                )
            elif application.id in in_window_ids and application.status == APPLICATION_STATUS_APPLIED:
                enqueue_notification(
                    db,
                    NOTIFICATION_TYPES["JOB_NOT_SHORTLISTED"],
                    application.student_id,
                    job=job,
                    payload={"application_id": str(application.id)},
                )

        logger.info(
            f"✅ Shortlisted {len(winners)}/{len(ranked)} in-window applications for job {job.id} "
            f"(limit {limit}, {len(job.applications) - len(ranked)} after cutoff)"
        )
        return winners

    def force_shortlist(self, job_id, now: Optional[datetime] = None) -> Optional[List[JobApplication]]:
        """Close the shortlist window now and compute the shortlist immediately."""
        now = now or utc_now()
        self._end_window(job_id, now)
        return self.shortlist_job(job_id, now)

    @unit_of_work
    def _end_window(self, db: Session, job_id, now: datetime) -> None:
        job = db.execute(select(Job).where(Job.id == to_uuid(job_id)).with_for_update()).scalar_one_or_none()
        if job is None:
            raise JobNotFoundError()
        if job.shortlist_computed:
            return
        if job.shortlist_window_ends_at is None or job.shortlist_window_ends_at > now:
            job.shortlist_window_ends_at = now
