"""
Notification Service - Transactional Outbox

Core operations never call a delivery provider directly. They append a
NotificationOutbox row inside their own transaction (so a notification
exists if and only if the state change committed), and the
NotificationDispatcher delivers pending rows in the background.

Delivery failures are recorded on the row and logged, never propagated.
"""

from datetime import datetime, timedelta
from typing import Dict, List, Optional, Protocol

import httpx
import structlog
from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session, sessionmaker
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from gigmarket.config import settings
from gigmarket.db.unit_of_work import unit_of_work
from gigmarket.models.notification_outbox import NotificationOutbox
from gigmarket.utils.constants import (
    NOTIFICATION_TYPES,
    OUTBOX_DISPATCHING,
    OUTBOX_FAILED,
    OUTBOX_PENDING,
    OUTBOX_SENT,
)
from gigmarket.utils.helpers import to_uuid, utc_now

logger = structlog.get_logger(__name__)

# event -> (title, message template); templates receive job_title and payload keys
TEMPLATES: Dict[str, tuple] = {
    NOTIFICATION_TYPES["JOB_ACCEPTED"]: (
        "Job Application Accepted!",
        'Your application for "{job_title}" has been accepted. You can start working now!',
    ),
    NOTIFICATION_TYPES["APPLICATION_RECEIVED"]: (
        "New Application",
        'A student applied for your job "{job_title}".',
    ),
    NOTIFICATION_TYPES["APPLICATIONS_CLOSED"]: (
        "Applications Closed",
        'Your job "{job_title}" has reached its application limit and is now closed to new applicants.',
    ),
    NOTIFICATION_TYPES["ASSIGNMENT_ACCEPTED"]: (
        "Assignment Accepted",
        'The assigned student accepted the job "{job_title}".',
    ),
    NOTIFICATION_TYPES["JOB_COMPLETED"]: (
        "Job Completed!",
        'Work for "{job_title}" has been submitted. Please review and release payment.',
    ),
    NOTIFICATION_TYPES["JOB_APPROVED"]: (
        "Work Approved",
        'The employer approved your work on "{job_title}".',
    ),
    NOTIFICATION_TYPES["JOB_SHORTLISTED"]: (
        "You're Shortlisted!",
        'You have been shortlisted for "{job_title}". The employer will review shortlisted candidates soon.',
    ),
    NOTIFICATION_TYPES["JOB_NOT_SHORTLISTED"]: (
        "Application Update",
        'Thank you for applying to "{job_title}". You were not shortlisted this time.',
    ),
    NOTIFICATION_TYPES["PAYMENT_RECEIVED"]: (
        "Payment Received!",
        'You received {amount} for "{job_title}".',
    ),
    NOTIFICATION_TYPES["PAYMENT_RELEASED"]: (
        "Payment Released",
        'Payment of {amount} for "{job_title}" has been released.',
    ),
    NOTIFICATION_TYPES["JOB_CANCELLED"]: (
        "Job Cancelled",
        'The job "{job_title}" has been cancelled by the employer.',
    ),
    NOTIFICATION_TYPES["REVIEW_RECEIVED"]: (
        "New Review",
        'You received a {rating}-star review for "{job_title}".',
    ),
}


class _SafeDict(dict):
    def __missing__(self, key):
        return ""


def render(event: str, job_title: str = "", payload: Optional[dict] = None) -> tuple:
    """Return (title, message) for an event."""
    title, template = TEMPLATES.get(event, ("Notification", "{message}"))
    context = _SafeDict(payload or {})
    context["job_title"] = job_title or ""
    return title, template.format_map(context)


def enqueue_notification(
    session: Session,
    event: str,
    recipient_id,
    job=None,
    sender_id=None,
    payload: Optional[dict] = None,
) -> NotificationOutbox:
    """
    Append a notification to the outbox within the caller's transaction.

    Args:
        session: Open session of the unit of work producing the event
        event: One of NOTIFICATION_TYPES
        recipient_id: User id to notify
        job: Related Job (optional)
        sender_id: Acting user (optional)
        payload: Extra data forwarded to the notifier
    """
    payload = dict(payload or {})
    job_title = job.title if job is not None else payload.get("job_title", "")
    title, message = render(event, job_title, payload)

    row = NotificationOutbox(
        event=event,
        recipient_id=to_uuid(recipient_id),
        sender_id=to_uuid(sender_id),
        job_id=job.id if job is not None else None,
        title=title,
        message=message,
        payload=payload,
        status=OUTBOX_PENDING,
        attempts=0,
    )
    session.add(row)
    return row


class Notifier(Protocol):
    """Delivery provider used by the dispatcher."""

    def notify(self, event: str, recipient_id: str, job_id: Optional[str], payload: dict) -> None:
        ...


class LoggingNotifier:
    """Default notifier: writes each delivery to the structured log."""

    def notify(self, event: str, recipient_id: str, job_id: Optional[str], payload: dict) -> None:
        logger.info(
            "notification_delivered",
            notification_event=event,
            recipient_id=recipient_id,
            job_id=job_id,
            title=payload.get("title"),
        )


class WebhookNotifier:
    """POST notifications to an HTTP endpoint (push/SMS gateway bridge)."""

    def __init__(self, url: str, timeout: float = None):
        self.url = url
        self.timeout = timeout or settings.NOTIFICATION_WEBHOOK_TIMEOUT_SECONDS

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    def notify(self, event: str, recipient_id: str, job_id: Optional[str], payload: dict) -> None:
        with httpx.Client(timeout=self.timeout) as client:
            response = client.post(
                self.url,
                json={
                    "event": event,
                    "recipient_id": recipient_id,
                    "job_id": job_id,
                    "payload": payload,
                },
            )
            response.raise_for_status()


def build_notifier() -> Notifier:
    """Pick the notifier from configuration."""
    if settings.NOTIFICATION_WEBHOOK_URL:
        return WebhookNotifier(settings.NOTIFICATION_WEBHOOK_URL)
    return LoggingNotifier()


class NotificationDispatcher:
    """
    Deliver pending outbox rows; runs from the background scheduler.

    A batch is claimed in one short transaction (pending -> dispatching,
    stamped with claimed_at), delivered with no transaction open, and each
    outcome is recorded in its own unit of work. Rows stuck in 'dispatching'
    past NOTIFICATION_LEASE_SECONDS belong to a dead dispatcher and are
    claimed again.
    """

    def __init__(self, session_factory: sessionmaker, notifier: Optional[Notifier] = None):
        self.session_factory = session_factory
        self.notifier = notifier or build_notifier()
        self.max_attempts = settings.NOTIFICATION_MAX_ATTEMPTS

    @unit_of_work
    def _claim(self, db: Session, limit: int, now: datetime) -> List[Dict]:
        lease_expired = now - timedelta(seconds=settings.NOTIFICATION_LEASE_SECONDS)
        rows = db.execute(
            select(NotificationOutbox)
            .where(
                or_(
                    NotificationOutbox.status == OUTBOX_PENDING,
                    and_(
                        NotificationOutbox.status == OUTBOX_DISPATCHING,
                        NotificationOutbox.claimed_at < lease_expired,
                    ),
                )
            )
            .order_by(NotificationOutbox.created_at)
            .limit(limit)
            .with_for_update(skip_locked=True)
        ).scalars().all()

        deliveries = []
        for row in rows:
            if row.status == OUTBOX_DISPATCHING and (row.attempts or 0) >= self.max_attempts:
                row.status = OUTBOX_FAILED
                row.claimed_at = None
                row.last_error = row.last_error or "delivery lease expired"
                logger.error(
                    "notification_failed",
                    notification_id=str(row.id),
                    notification_event=row.event,
                    attempts=row.attempts,
                    error="delivery lease expired",
                )
                continue

            row.status = OUTBOX_DISPATCHING
            row.claimed_at = now
            row.attempts = (row.attempts or 0) + 1

            payload = dict(row.payload or {})
            payload.setdefault("title", row.title)
            payload.setdefault("message", row.message)
            deliveries.append(
                {
                    "id": row.id,
                    "event": row.event,
                    "recipient_id": str(row.recipient_id),
                    "job_id": str(row.job_id) if row.job_id else None,
                    "payload": payload,
                }
            )
        return deliveries

    @unit_of_work
    def _record(self, db: Session, notification_id, error: Optional[Exception] = None) -> Optional[str]:
        """Store a delivery outcome; returns 'sent', 'retried', 'failed' or None if the claim was lost."""
        row = db.execute(
            select(NotificationOutbox).where(NotificationOutbox.id == notification_id).with_for_update()
        ).scalar_one_or_none()
        if row is None or row.status != OUTBOX_DISPATCHING:
            logger.warning("notification_claim_lost", notification_id=str(notification_id))
            return None

        row.claimed_at = None
        if error is None:
            row.status = OUTBOX_SENT
            row.dispatched_at = utc_now()
            return "sent"

        row.last_error = str(error)[:1000]
        if row.attempts >= self.max_attempts:
            row.status = OUTBOX_FAILED
            logger.error(
                "notification_failed",
                notification_id=str(row.id),
                notification_event=row.event,
                attempts=row.attempts,
                error=str(error),
            )
            return "failed"

        row.status = OUTBOX_PENDING
        logger.warning(
            "notification_retry_scheduled",
            notification_id=str(row.id),
            notification_event=row.event,
            attempts=row.attempts,
            error=str(error),
        )
        return "retried"

    def dispatch_pending(self, limit: int = None, now: Optional[datetime] = None) -> Dict:
        """
        Deliver up to `limit` pending notifications.

        Returns:
            Dict with sent / retried / failed counters
        """
        stats = {"sent": 0, "retried": 0, "failed": 0}
        deliveries = self._claim(limit or settings.NOTIFICATION_BATCH_SIZE, now or utc_now())

        for delivery in deliveries:
            error = None
            try:
                self.notifier.notify(
                    delivery["event"], delivery["recipient_id"], delivery["job_id"], delivery["payload"]
                )
            except Exception as e:
                error = e

            outcome = self._record(delivery["id"], error)
            if outcome:
                stats[outcome] += 1

        if any(stats.values()):
            logger.info("outbox_dispatch_completed", **stats)
        return stats
