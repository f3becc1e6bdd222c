"""Job endpoints - posting, applications, assignment and completion."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from gigmarket.api.deps import get_current_principal, get_job_service
from gigmarket.core.security import Principal
from gigmarket.schemas.job import (
    ApplicationResponse,
    ApplyRequest,
    CancelJobRequest,
    JobCreate,
    JobDetailResponse,
    JobResponse,
    PenalizeRequest,
    SubmitWorkRequest,
)
from gigmarket.services.job_service import JobService

router = APIRouter()


def job_detail(job, principal: Principal) -> JobDetailResponse:
    """Owners and admins see every application; students only their own."""
    detail = JobDetailResponse.model_validate(job)
    if str(job.employer_id) == str(principal.id) or principal.is_admin:
        applications = job.applications
    else:
        applications = [a for a in job.applications if str(a.student_id) == str(principal.id)]
    detail.applications = [ApplicationResponse.model_validate(a) for a in applications]
    return detail


@router.post("", status_code=status.HTTP_201_CREATED)
def create_job(
    payload: JobCreate,
    principal: Principal = Depends(get_current_principal),
    service: JobService = Depends(get_job_service),
):
    """
    Post a new job (employers only).

    The employer's profile must be complete. Offline jobs require a location.
    """
    job = service.create_job(principal, payload.model_dump())
    return {"success": True, "message": "Job created successfully", "job": JobResponse.model_validate(job)}


@router.get("")
def list_jobs(
    mine: bool = Query(False, description="Only jobs I posted (employer) or applied to (student)"),
    status_filter: Optional[str] = Query(None, alias="status", description="Filter by job status"),
    job_type: Optional[str] = Query(None, description="Filter by job type (offline, online)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    offset: int = Query(0, ge=0),
    principal: Principal = Depends(get_current_principal),
    service: JobService = Depends(get_job_service),
):
    jobs = service.list_jobs(principal, mine=mine, status=status_filter, job_type=job_type, limit=limit, offset=offset)
    return {"success": True, "jobs": [JobResponse.model_validate(j) for j in jobs]}


@router.get("/applications/me")
def my_applications(
    principal: Principal = Depends(get_current_principal),
    service: JobService = Depends(get_job_service),
):
    applications = service.get_my_applications(principal)
    return {"success": True, "applications": [ApplicationResponse.model_validate(a) for a in applications]}


@router.get("/{job_id}")
def get_job(
    job_id: str,
    principal: Principal = Depends(get_current_principal),
    service: JobService = Depends(get_job_service),
):
    job = service.get_job(job_id)
    return {"success": True, "job": job_detail(job, principal)}


@router.post("/{job_id}/apply", status_code=status.HTTP_201_CREATED)
def apply_for_job(
    job_id: str,
    payload: ApplyRequest,
    response: Response,
    principal: Principal = Depends(get_current_principal),
    service: JobService = Depends(get_job_service),
):
    """
    Apply for a job (students only).

    Returns 201 for a new application and 200 when the student had already
    applied. Online jobs require `profile_url`.
    """
    result = service.apply_for_job(principal, job_id, payload.model_dump())
    if not result["created"]:
        response.status_code = status.HTTP_200_OK
        message = "You have already applied for this job"
    else:
        message = "Application submitted successfully"
    return {
        "success": True,
        "message": message,
        "application": ApplicationResponse.model_validate(result["application"]),
    }


@router.post("/{job_id}/applications/{application_id}/accept")
def accept_application(
    job_id: str,
    application_id: str,
    principal: Principal = Depends(get_current_principal),
    service: JobService = Depends(get_job_service),
):
    result = service.accept_application(principal, job_id, application_id)
    message = "Application already accepted" if result["already_accepted"] else "Application accepted"
    return {
        "success": True,
        "message": message,
        "application": ApplicationResponse.model_validate(result["application"]),
        "job": JobResponse.model_validate(result["job"]),
    }


@router.post("/{job_id}/applications/{application_id}/reject")
def reject_application(
    job_id: str,
    application_id: str,
    principal: Principal = Depends(get_current_principal),
    service: JobService = Depends(get_job_service),
):
    application = service.reject_application(principal, job_id, application_id)
    return {"success": True, "message": "Application rejected", "application": ApplicationResponse.model_validate(application)}


@router.post("/{job_id}/applications/{application_id}/inspect")
def force_inspect_application(
    job_id: str,
    application_id: str,
    principal: Principal = Depends(get_current_principal),
    service: JobService = Depends(get_job_service),
):
    """Run remote profile inspection for one application now."""
    application = service.force_inspect_application(principal, job_id, application_id)
    return {"success": True, "application": ApplicationResponse.model_validate(application)}


@router.post("/{job_id}/students/{student_id}/penalize")
def penalize_no_show(
    job_id: str,
    student_id: str,
    payload: PenalizeRequest,
    principal: Principal = Depends(get_current_principal),
    service: JobService = Depends(get_job_service),
):
    result = service.penalize_no_show(principal, job_id, student_id, reason=payload.reason)
    return {"success": True, "score": result["score"], "log": result["log"].to_dict()}


@router.get("/{job_id}/shortlisted")
def shortlisted_candidates(
    job_id: str,
    principal: Principal = Depends(get_current_principal),
    service: JobService = Depends(get_job_service),
):
    applications = service.get_shortlisted_candidates(principal, job_id)
    return {"success": True, "candidates": [ApplicationResponse.model_validate(a) for a in applications]}


@router.post("/{job_id}/accept-assignment")
def accept_assignment(
    job_id: str,
    principal: Principal = Depends(get_current_principal),
    service: JobService = Depends(get_job_service),
):
    job = service.accept_assignment(principal, job_id)
    return {"success": True, "message": "Assignment accepted", "job": JobResponse.model_validate(job)}


@router.post("/{job_id}/submit")
def submit_work(
    job_id: str,
    payload: SubmitWorkRequest,
    principal: Principal = Depends(get_current_principal),
    service: JobService = Depends(get_job_service),
):
    result = service.submit_work(principal, job_id, payload.description, payload.attachments)
    return {
        "success": True,
        "message": "Work submitted",
        "on_time_awarded": result["on_time_awarded"],
        "job": JobResponse.model_validate(result["job"]),
    }


@router.get("/{job_id}/submission")
def get_submission(
    job_id: str,
    principal: Principal = Depends(get_current_principal),
    service: JobService = Depends(get_job_service),
):
    return {"success": True, **service.get_submission(principal, job_id)}


@router.post("/{job_id}/approve")
def approve_completion(
    job_id: str,
    principal: Principal = Depends(get_current_principal),
    service: JobService = Depends(get_job_service),
):
    result = service.approve_completion(principal, job_id)
    return {
        "success": True,
        "message": "Work approved",
        "completion_awarded": result["completion_awarded"],
        "job": JobResponse.model_validate(result["job"]),
    }


@router.post("/{job_id}/cancel")
def cancel_job(
    job_id: str,
    payload: CancelJobRequest,
    principal: Principal = Depends(get_current_principal),
    service: JobService = Depends(get_job_service),
):
    result = service.cancel_job(principal, job_id, reason=payload.reason)
    refund = result["refund"]
    return {
        "success": True,
        "message": "Job cancelled",
        "refund": refund.to_dict() if refund is not None else None,
        "job": JobResponse.model_validate(result["job"]),
    }
