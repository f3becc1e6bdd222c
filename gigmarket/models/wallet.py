"""Wallet model."""

from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, Integer, Numeric, String, Uuid
from sqlalchemy.orm import relationship

from gigmarket.db.base import Base


class Wallet(Base):
    """Per-user wallet with spendable and escrowed balances."""

    __tablename__ = "wallets"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_wallet_balance_non_negative"),
        CheckConstraint("escrow_balance >= 0", name="ck_wallet_escrow_non_negative"),
    )

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, unique=True, index=True)

    balance = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    escrow_balance = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    total_earnings = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    total_spent = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    currency = Column(String(3), nullable=False, default="INR")
    is_active = Column(Boolean, default=True, nullable=False)

    version_id = Column(Integer, nullable=False, default=1)

    # Relationships
    user = relationship("User", back_populates="wallet")

    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "balance": str(self.balance),
            "escrow_balance": str(self.escrow_balance),
            "total_earnings": str(self.total_earnings),
            "total_spent": str(self.total_spent),
            "currency": self.currency,
            "is_active": self.is_active,
        }

    def __repr__(self):
        return f"<Wallet {self.user_id} balance={self.balance} escrow={self.escrow_balance}>"
