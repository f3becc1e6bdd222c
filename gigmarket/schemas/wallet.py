"""Wallet and transaction schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class AmountRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    description: Optional[str] = Field(None, max_length=500)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class PendingDepositRequest(BaseModel):
    """Deposit intent for an order already created with the payment gateway."""

    amount: Decimal = Field(..., gt=0, decimal_places=2)
    order_id: str = Field(..., min_length=1, max_length=255)


class VerifyDepositRequest(BaseModel):
    transaction_id: UUID
    payment_id: str = Field(..., min_length=1)
    signature: str = Field(..., min_length=1)


class FailTransactionRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class WalletResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    balance: Decimal
    escrow_balance: Decimal
    total_earnings: Decimal
    total_spent: Decimal
    currency: str
    is_active: bool


class TransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    type: str = Field(validation_alias="transaction_type")
    amount: Decimal
    status: str
    description: Optional[str] = None
    job_id: Optional[UUID] = None
    related_user_id: Optional[UUID] = None
    gateway_order_id: Optional[str] = None
    gateway_payment_id: Optional[str] = None
    commission_rate: Optional[Decimal] = None
    commission_amount: Optional[Decimal] = None
    failure_reason: Optional[str] = None
    initiated_at: datetime
    completed_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None


class TransactionListResponse(BaseModel):
    success: bool = True
    transactions: List[TransactionResponse]
    total: int
    page: int
    limit: int
    pages: int


class ScoreLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    event: str
    delta: int
    reason: Optional[str] = None
    meta: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
