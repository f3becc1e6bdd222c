"""Ledger transaction model."""

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Numeric, String, Text, Uuid

from gigmarket.db.base import Base, JSONType
from gigmarket.utils.constants import PAYMENT_PENDING
from gigmarket.utils.helpers import utc_now


class Transaction(Base):
    """Immutable audit record; one row per wallet mutation."""

    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transaction_amount_positive"),
    )

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    transaction_type = Column("type", String(20), nullable=False, index=True)  # deposit, withdrawal, payment, refund, commission, earning
    amount = Column(Numeric(12, 2), nullable=False)
    status = Column(String(20), nullable=False, default=PAYMENT_PENDING, index=True)  # pending, completed, failed, refunded
    description = Column(String(500))

    # Weak references for reporting (no cascades, financial rows are never deleted)
    job_id = Column(Uuid(as_uuid=True), ForeignKey("jobs.id"), nullable=True, index=True)
    related_user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)

    # Payment gateway correlation
    gateway = Column(String(50))
    gateway_order_id = Column(String(255), index=True)
    gateway_payment_id = Column(String(255))
    gateway_signature = Column(String(255))

    # Commission split (payment rows only)
    commission_rate = Column(Numeric(5, 4))
    commission_amount = Column(Numeric(12, 2))

    extra_data = Column(JSONType, default=dict)  # renamed from 'metadata' to avoid SQLAlchemy conflict
    failure_reason = Column(Text)

    initiated_at = Column(DateTime, default=utc_now, nullable=False)
    completed_at = Column(DateTime)
    failed_at = Column(DateTime)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "type": self.transaction_type,
            "amount": str(self.amount),
            "status": self.status,
            "description": self.description,
            "job_id": str(self.job_id) if self.job_id else None,
            "related_user_id": str(self.related_user_id) if self.related_user_id else None,
            "gateway_order_id": self.gateway_order_id,
            "gateway_payment_id": self.gateway_payment_id,
            "commission_rate": str(self.commission_rate) if self.commission_rate is not None else None,
            "commission_amount": str(self.commission_amount) if self.commission_amount is not None else None,
            "metadata": self.extra_data or {},
            "failure_reason": self.failure_reason,
            "initiated_at": self.initiated_at.isoformat() if self.initiated_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "failed_at": self.failed_at.isoformat() if self.failed_at else None,
        }

    def __repr__(self):
        return f"<Transaction {self.transaction_type} {self.amount} ({self.status})>"
