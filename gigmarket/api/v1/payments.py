"""Payment endpoints - job escrow funding and release."""

from fastapi import APIRouter, Depends

from gigmarket.api.deps import get_current_principal, get_job_service
from gigmarket.core.security import Principal
from gigmarket.schemas.job import JobResponse
from gigmarket.schemas.wallet import TransactionResponse
from gigmarket.services.job_service import JobService

router = APIRouter()


@router.post("/jobs/{job_id}/fund")
def fund_job_escrow(
    job_id: str,
    principal: Principal = Depends(get_current_principal),
    service: JobService = Depends(get_job_service),
):
    """
    Move the job budget from the employer's balance into escrow.

    The job must have an assigned student and be in progress (offline jobs
    may also be funded once closed with a student assigned).
    """
    result = service.fund_escrow(principal, job_id)
    return {
        "success": True,
        "message": "Payment held in escrow",
        "transaction": TransactionResponse.model_validate(result["transaction"]),
        "job": JobResponse.model_validate(result["job"]),
    }


@router.post("/jobs/{job_id}/release")
def release_job_payment(
    job_id: str,
    principal: Principal = Depends(get_current_principal),
    service: JobService = Depends(get_job_service),
):
    """
    Release escrow to the assigned student after both approvals.

    The platform commission is deducted from the payout.
    """
    result = service.release_payment(principal, job_id)
    commission = result["commission"]
    return {
        "success": True,
        "message": "Payment released to student",
        "payout": str(result["payout"]),
        "commission_amount": str(result["commission_amount"]),
        "payment": TransactionResponse.model_validate(result["payment"]),
        "earning": TransactionResponse.model_validate(result["earning"]),
        "commission": TransactionResponse.model_validate(commission) if commission is not None else None,
        "job": JobResponse.model_validate(result["job"]),
    }
