"""Wallet endpoints - balance, history, deposits and withdrawals."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from gigmarket.api.deps import get_current_admin, get_current_principal, get_wallet_service
from gigmarket.core.security import Principal
from gigmarket.schemas.wallet import (
    AmountRequest,
    FailTransactionRequest,
    PendingDepositRequest,
    TransactionListResponse,
    TransactionResponse,
    VerifyDepositRequest,
    WalletResponse,
)
from gigmarket.services.wallet_service import WalletService

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
def create_wallet(
    principal: Principal = Depends(get_current_principal),
    service: WalletService = Depends(get_wallet_service),
):
    """Create the caller's wallet. Requires a verified phone number."""
    wallet = service.create_wallet(principal.id)
    return {"success": True, "wallet": WalletResponse.model_validate(wallet)}


@router.get("")
def get_wallet(
    principal: Principal = Depends(get_current_principal),
    service: WalletService = Depends(get_wallet_service),
):
    wallet = service.get_wallet(principal.id)
    return {"success": True, "wallet": WalletResponse.model_validate(wallet)}


@router.get("/transactions", response_model=TransactionListResponse)
def list_transactions(
    type_filter: Optional[str] = Query(None, alias="type", description="deposit, withdrawal, payment, refund, commission, earning"),
    status_filter: Optional[str] = Query(None, alias="status", description="pending, completed, failed, refunded"),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    principal: Principal = Depends(get_current_principal),
    service: WalletService = Depends(get_wallet_service),
):
    result = service.list_transactions(
        principal.id, transaction_type=type_filter, status=status_filter, page=page, limit=limit
    )
    return TransactionListResponse(
        transactions=[TransactionResponse.model_validate(tx) for tx in result["transactions"]],
        total=result["total"],
        page=result["page"],
        limit=result["limit"],
        pages=result["pages"],
    )


@router.post("/deposits", status_code=status.HTTP_201_CREATED)
def record_pending_deposit(
    payload: PendingDepositRequest,
    principal: Principal = Depends(get_current_principal),
    service: WalletService = Depends(get_wallet_service),
):
    """Record a deposit for a gateway order; the balance changes on verification."""
    tx = service.record_pending_deposit(principal.id, payload.amount, payload.order_id)
    return {"success": True, "transaction": TransactionResponse.model_validate(tx)}


@router.post("/deposits/verify")
def verify_deposit(
    payload: VerifyDepositRequest,
    principal: Principal = Depends(get_current_principal),
    service: WalletService = Depends(get_wallet_service),
):
    """Verify the gateway signature and credit the pending deposit."""
    tx = service.complete_deposit(principal.id, payload.transaction_id, payload.payment_id, payload.signature)
    verified = tx.status == "completed"
    return {
        "success": verified,
        "message": "Payment verified and wallet credited" if verified else "Payment verification failed",
        "transaction": TransactionResponse.model_validate(tx),
    }


@router.post("/withdraw", status_code=status.HTTP_201_CREATED)
def request_withdrawal(
    payload: AmountRequest,
    principal: Principal = Depends(get_current_principal),
    service: WalletService = Depends(get_wallet_service),
):
    tx = service.request_withdrawal(
        principal.id,
        payload.amount,
        description=payload.description or "Withdrawal to bank",
        metadata=payload.metadata,
    )
    return {"success": True, "transaction": TransactionResponse.model_validate(tx)}


@router.post("/users/{user_id}/credit", status_code=status.HTTP_201_CREATED)
def credit_wallet(
    user_id: str,
    payload: AmountRequest,
    admin: Principal = Depends(get_current_admin),
    service: WalletService = Depends(get_wallet_service),
):
    """Credit an externally verified deposit (admin only)."""
    tx = service.add_funds(
        user_id,
        payload.amount,
        description=payload.description or "Deposit",
        metadata={**payload.metadata, "credited_by": admin.id},
        gateway="manual",
    )
    return {"success": True, "transaction": TransactionResponse.model_validate(tx)}


@router.post("/transactions/{transaction_id}/complete")
def complete_transaction(
    transaction_id: str,
    admin: Principal = Depends(get_current_admin),
    service: WalletService = Depends(get_wallet_service),
):
    """Mark a pending transaction (e.g. a bank withdrawal) as settled."""
    tx = service.mark_transaction_completed(transaction_id)
    return {"success": True, "transaction": TransactionResponse.model_validate(tx)}


@router.post("/transactions/{transaction_id}/fail")
def fail_transaction(
    transaction_id: str,
    payload: FailTransactionRequest,
    admin: Principal = Depends(get_current_admin),
    service: WalletService = Depends(get_wallet_service),
):
    tx = service.mark_transaction_failed(transaction_id, reason=payload.reason)
    return {"success": True, "transaction": TransactionResponse.model_validate(tx)}
