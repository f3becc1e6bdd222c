"""
Notification inbox.

The outbox rows double as the recipient's inbox: a row is listed as soon as
the state change that produced it commits, whatever its delivery status.
Every operation is scoped to the recipient; another user's notification is
reported as not found.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.orm import Session, sessionmaker

from gigmarket.config import settings
from gigmarket.core.exceptions import NotificationNotFoundError
from gigmarket.db.unit_of_work import unit_of_work
from gigmarket.models.notification_outbox import NotificationOutbox
from gigmarket.utils.helpers import paginate, to_uuid, utc_now

logger = logging.getLogger(__name__)


class InboxService:
    """Read side of the notification outbox."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    @staticmethod
    def _unread_count(db: Session, user_id) -> int:
        return db.execute(
            select(func.count(NotificationOutbox.id)).where(
                NotificationOutbox.recipient_id == user_id,
                NotificationOutbox.is_read.is_(False),
            )
        ).scalar_one()

    def _owned(self, db: Session, user_id, notification_id) -> NotificationOutbox:
        row = db.execute(
            select(NotificationOutbox).where(
                NotificationOutbox.id == to_uuid(notification_id),
                NotificationOutbox.recipient_id == to_uuid(user_id),
            )
        ).scalar_one_or_none()
        if row is None:
            raise NotificationNotFoundError()
        return row

    @unit_of_work
    def list_notifications(
        self,
        db: Session,
        user_id,
        is_read: Optional[bool] = None,
        event: Optional[str] = None,
        page: int = 1,
        limit: int = None,
    ) -> Dict:
        """Newest first, with the overall unread count."""
        user_id = to_uuid(user_id)
        offset, limit = paginate(page, limit or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)

        filters = [NotificationOutbox.recipient_id == user_id]
        if is_read is not None:
            filters.append(NotificationOutbox.is_read.is_(is_read))
        if event:
            filters.append(NotificationOutbox.event == event)

        total = db.execute(select(func.count(NotificationOutbox.id)).where(*filters)).scalar_one()
        rows = db.execute(
            select(NotificationOutbox)
            .where(*filters)
            .order_by(NotificationOutbox.created_at.desc())
            .offset(offset)
            .limit(limit)
        ).scalars().all()

        return {
            "notifications": list(rows),
            "unread_count": self._unread_count(db, user_id),
            "total": total,
            "page": offset // limit + 1,
            "limit": limit,
            "pages": (total + limit - 1) // limit,
        }

    @unit_of_work
    def get_stats(self, db: Session, user_id) -> Dict:
        """Totals and per-event counts."""
        unread = case((NotificationOutbox.is_read.is_(False), 1), else_=0)
        rows = db.execute(
            select(NotificationOutbox.event, func.count(NotificationOutbox.id), func.sum(unread))
            .where(NotificationOutbox.recipient_id == to_uuid(user_id))
            .group_by(NotificationOutbox.event)
        ).all()

        by_event = {event: {"total": total, "unread": int(unread_count or 0)} for event, total, unread_count in rows}
        return {
            "total": sum(v["total"] for v in by_event.values()),
            "unread": sum(v["unread"] for v in by_event.values()),
            "by_event": by_event,
        }

    @unit_of_work
    def mark_read(self, db: Session, user_id, notification_id) -> NotificationOutbox:
        row = self._owned(db, user_id, notification_id)
        if not row.is_read:
            row.is_read = True
            row.read_at = utc_now()
        return row

    @unit_of_work
    def mark_many_read(self, db: Session, user_id, notification_ids: List) -> int:
        """Mark the caller's notifications among `notification_ids` read; returns the unread count left."""
        user_id = to_uuid(user_id)
        ids = [i for i in map(to_uuid, notification_ids) if i is not None]
        if ids:
            db.execute(
                update(NotificationOutbox)
                .where(
                    NotificationOutbox.id.in_(ids),
                    NotificationOutbox.recipient_id == user_id,
                    NotificationOutbox.is_read.is_(False),
                )
                .values(is_read=True, read_at=utc_now())
                .execution_options(synchronize_session=False)
            )
        return self._unread_count(db, user_id)

    @unit_of_work
    def mark_all_read(self, db: Session, user_id) -> int:
        """Returns how many notifications changed."""
        result = db.execute(
            update(NotificationOutbox)
            .where(NotificationOutbox.recipient_id == to_uuid(user_id), NotificationOutbox.is_read.is_(False))
            .values(is_read=True, read_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        logger.info(f"📭 Marked {result.rowcount} notifications read for user {user_id}")
        return result.rowcount

    @unit_of_work
    def delete_notification(self, db: Session, user_id, notification_id) -> None:
        result = db.execute(
            delete(NotificationOutbox).where(
                NotificationOutbox.id == to_uuid(notification_id),
                NotificationOutbox.recipient_id == to_uuid(user_id),
            ).execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotificationNotFoundError()
