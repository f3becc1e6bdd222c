"""
Inspection Queue - Asynchronous Profile Inspection

Applications flagged `inspection_status='queued'` at apply time are picked up
by the background scheduler. The queue lives in the database, so it survives
restarts and is shared by every worker process: rows are claimed with
SKIP LOCKED and moved to 'inspecting' before the (slow) network call.
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session, sessionmaker

from gigmarket.config import settings
from gigmarket.core.exceptions import ApplicationNotFoundError
from gigmarket.db.unit_of_work import unit_of_work
from gigmarket.models.job import Job
from gigmarket.models.job_application import JobApplication
from gigmarket.services.profile_inspector import InspectionResult, ProfileInspector
from gigmarket.utils.constants import (
    INSPECTION_DONE,
    INSPECTION_FAILED,
    INSPECTION_INSPECTING,
    INSPECTION_QUEUED,
)
from gigmarket.utils.helpers import to_uuid, utc_now

logger = logging.getLogger(__name__)


def job_context(job: Job) -> Dict:
    return {
        "skills": list(job.skills_required or []),
        "category": job.category,
        "title": job.title,
    }


class InspectionQueue:
    """Database-backed queue of pending profile inspections."""

    def __init__(self, session_factory: sessionmaker, inspector: Optional[ProfileInspector] = None):
        self.session_factory = session_factory
        self.inspector = inspector or ProfileInspector()

    @unit_of_work
    def _claim(self, db: Session, limit: int, now: Optional[datetime] = None) -> List[Dict]:
        """
        Move up to `limit` rows to 'inspecting' and return their work items.

        Rows left in 'inspecting' past the lease (a worker died mid-call) are
        taken again while they have attempts left, otherwise marked failed.
        """
        now = now or utc_now()
        lease_expired = now - timedelta(seconds=settings.INSPECTION_LEASE_SECONDS)
        rows = db.execute(
            select(JobApplication)
            .where(
                or_(
                    JobApplication.inspection_status == INSPECTION_QUEUED,
                    and_(
                        JobApplication.inspection_status == INSPECTION_INSPECTING,
                        JobApplication.updated_at < lease_expired,
                    ),
                )
            )
            .order_by(JobApplication.created_at)
            .limit(limit)
            .with_for_update(skip_locked=True)
        ).scalars().all()

        tasks = []
        for application in rows:
            attempts = application.inspection_attempts or 0
            if application.inspection_status == INSPECTION_INSPECTING and attempts >= settings.INSPECTION_MAX_ATTEMPTS:
                application.inspection_status = INSPECTION_FAILED
                application.inspection_error = "inspection lease expired"
                application.inspected_at = now
                application.updated_at = now
                logger.warning(f"⚠️  Giving up on inspection of application {application.id} after {attempts} attempts")
                continue

            application.inspection_status = INSPECTION_INSPECTING
            application.inspection_attempts = attempts + 1
            application.updated_at = now
            tasks.append(
                {
                    "application_id": application.id,
                    "profile_url": application.profile_url,
                    "job_context": job_context(application.job),
                }
            )
        return tasks

    @unit_of_work
    def apply_result(self, db: Session, application_id, result: InspectionResult) -> JobApplication:
        """Store an inspection outcome and fold the extra score into evaluation_score."""
        application = db.execute(
            select(JobApplication).where(JobApplication.id == to_uuid(application_id)).with_for_update()
        ).scalar_one_or_none()
        if application is None:
            raise ApplicationNotFoundError()

        application.inspected_at = utc_now()
        if result.success:
            base = application.evaluation_score or 0
            application.evaluation_score = min(100, base + int(result.extra_score or 0))
            application.inspection_status = INSPECTION_DONE
            application.inspection_result = result.details or {}
            application.inspection_error = None
        else:
            application.inspection_status = INSPECTION_FAILED
            application.inspection_error = result.reason or "inspection_failed"
        return application

    def process_pending(self, limit: int = None, now: Optional[datetime] = None) -> Dict:
        """
        Inspect up to `limit` queued applications.

        Returns:
            Dict with done / failed counters
        """
        stats = {"done": 0, "failed": 0}
        tasks = self._claim(limit or settings.INSPECTION_BATCH_SIZE, now=now)

        for task in tasks:
            try:
                result = self.inspector.inspect_profile_url(task["profile_url"], task["job_context"])
            except Exception as e:
                logger.error(f"❌ Inspection crashed for application {task['application_id']}: {e}", exc_info=True)
                result = InspectionResult(success=False, reason=str(e))

            try:
                self.apply_result(task["application_id"], result)
            except Exception as e:
                logger.error(f"❌ Failed to store inspection for application {task['application_id']}: {e}")
                stats["failed"] += 1
                continue

            stats["done" if result.success else "failed"] += 1

        if tasks:
            logger.info(f"🔍 Inspection batch: {stats['done']} done, {stats['failed']} failed")
        return stats
