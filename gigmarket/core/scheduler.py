"""
Application Scheduler - APScheduler Integration

Owns the background jobs of the marketplace:
- shortlist tick (offline auto-close + online shortlisting)
- remote profile inspection queue
- notification outbox dispatch

The scheduler is an explicit object created and started in the FastAPI
lifespan and shut down with it. Correctness does not depend on running a
single instance: every job claims its work in the database.
"""

import logging
from typing import Dict, Optional

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import sessionmaker

from gigmarket.config import settings
from gigmarket.services.inspection_queue import InspectionQueue
from gigmarket.services.notification_service import NotificationDispatcher
from gigmarket.services.shortlist_scheduler import ShortlistScheduler

logger = logging.getLogger(__name__)


def scheduler_listener(event):
    """
    Listener for scheduler events (executed jobs, errors).

    Args:
        event: APScheduler event object
    """
    if event.exception:
        logger.error(f"❌ Job '{event.job_id}' failed with exception: {event.exception}")
    else:
        logger.debug(f"✅ Job '{event.job_id}' executed successfully")


class MarketplaceScheduler:
    """Background scheduler with explicit start/shutdown hooks."""

    def __init__(
        self,
        session_factory: sessionmaker,
        shortlist_scheduler: Optional[ShortlistScheduler] = None,
        inspection_queue: Optional[InspectionQueue] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
    ):
        self.shortlist_scheduler = shortlist_scheduler or ShortlistScheduler(session_factory)
        self.inspection_queue = inspection_queue or InspectionQueue(session_factory)
        self.dispatcher = dispatcher or NotificationDispatcher(session_factory)
        self.scheduler = BackgroundScheduler(
            timezone="UTC",
            job_defaults={
                "coalesce": True,  # Combine multiple missed executions into one
                "max_instances": 1,  # Only one instance of each job at a time
                "misfire_grace_time": 60,
            },
        )
        self.scheduler.add_listener(scheduler_listener, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def run_shortlist_tick(self) -> Dict:
        return self.shortlist_scheduler.run_once()

    def run_inspection_batch(self) -> Dict:
        return self.inspection_queue.process_pending()

    def run_outbox_dispatch(self) -> Dict:
        return self.dispatcher.dispatch_pending()

    def setup_jobs(self) -> None:
        """Register periodic jobs."""
        logger.info("⏰ Setting up scheduled jobs...")

        self.scheduler.add_job(
            self.run_shortlist_tick,
            IntervalTrigger(seconds=settings.SHORTLIST_INTERVAL_SECONDS),
            id="shortlist_tick",
            name="Shortlist scheduler (auto-close + shortlisting)",
            replace_existing=True,
        )
        logger.info(f"   ✅ Added: shortlist_tick (every {settings.SHORTLIST_INTERVAL_SECONDS}s)")

        if settings.ENABLE_REMOTE_PROFILE_INSPECTION:
            self.scheduler.add_job(
                self.run_inspection_batch,
                IntervalTrigger(seconds=settings.INSPECTION_INTERVAL_SECONDS),
                id="inspection_queue",
                name="Remote profile inspection queue",
                replace_existing=True,
            )
            logger.info(f"   ✅ Added: inspection_queue (every {settings.INSPECTION_INTERVAL_SECONDS}s)")

        self.scheduler.add_job(
            self.run_outbox_dispatch,
            IntervalTrigger(seconds=settings.NOTIFICATION_DISPATCH_INTERVAL_SECONDS),
            id="notification_outbox",
            name="Notification outbox dispatch",
            replace_existing=True,
        )
        logger.info(f"   ✅ Added: notification_outbox (every {settings.NOTIFICATION_DISPATCH_INTERVAL_SECONDS}s)")

    def start(self) -> None:
        """Start the scheduler (called from the application lifespan)."""
        if self.scheduler.running:
            logger.warning("⚠️  Scheduler already running")
            return
        self.setup_jobs()
        self.scheduler.start()
        logger.info(f"🚀 Scheduler started with {len(self.scheduler.get_jobs())} jobs")

    def shutdown(self, wait: bool = True) -> None:
        """Stop the scheduler (called on application shutdown)."""
        if not self.scheduler.running:
            logger.warning("⚠️  Scheduler not running")
            return
        self.scheduler.shutdown(wait=wait)
        self.inspection_queue.inspector.close()
        logger.info("🛑 Scheduler stopped")

    def get_status(self) -> Dict:
        """Scheduler status and job information."""
        jobs = self.scheduler.get_jobs()
        return {
            "running": self.scheduler.running,
            "total_jobs": len(jobs),
            "jobs": [
                {
                    "id": job.id,
                    "name": job.name,
                    "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
                    "trigger": str(job.trigger),
                }
                for job in jobs
            ],
        }
