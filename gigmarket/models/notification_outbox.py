"""Notification outbox model."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text, Uuid

from gigmarket.db.base import Base, JSONType
from gigmarket.utils.constants import OUTBOX_PENDING


class NotificationOutbox(Base):
    """
    Notification written in the same transaction as the state change that
    caused it. A background dispatcher delivers and marks it; the recipient
    reads it from their inbox.
    """

    __tablename__ = "notification_outbox"
    __table_args__ = (Index("ix_notification_outbox_recipient_read", "recipient_id", "is_read"),)

    event = Column(String(50), nullable=False, index=True)
    recipient_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    sender_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)
    job_id = Column(Uuid(as_uuid=True), ForeignKey("jobs.id"), nullable=True)

    title = Column(String(255))
    message = Column(Text)
    payload = Column(JSONType, default=dict)

    # Delivery
    status = Column(String(20), nullable=False, default=OUTBOX_PENDING, index=True)  # pending, dispatching, sent, failed
    attempts = Column(Integer, nullable=False, default=0)
    last_error = Column(Text)
    claimed_at = Column(DateTime)
    dispatched_at = Column(DateTime)

    # Inbox
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "event": self.event,
            "title": self.title,
            "message": self.message,
            "payload": self.payload or {},
            "sender_id": str(self.sender_id) if self.sender_id else None,
            "job_id": str(self.job_id) if self.job_id else None,
            "is_read": bool(self.is_read),
            "read_at": self.read_at.isoformat() if self.read_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<NotificationOutbox {self.event} -> {self.recipient_id} ({self.status})>"
