"""Job and application schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator


class JobCreate(BaseModel):
    """Payload for creating a job."""

    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None
    category: Optional[str] = None
    budget: Decimal = Field(..., gt=0)
    duration: Optional[str] = Field(None, description="Days to complete, e.g. '7' or '7 days'")
    skills_required: List[str] = Field(default_factory=list)
    job_type: str = Field("offline", pattern="^(offline|online)$")
    location: Dict[str, Any] = Field(default_factory=dict)
    positions_required: int = Field(1, ge=1)
    submission_requires_files: bool = False
    shortlist_multiplier: Optional[int] = Field(None, ge=1)
    shortlist_window_hours: Optional[int] = Field(None, ge=1)


class ApplyRequest(BaseModel):
    cover_letter: Optional[str] = Field(None, max_length=2000)
    proposed_budget: Optional[Decimal] = Field(None, gt=0)
    profile_url: Optional[str] = Field(None, max_length=1000)


class SubmitWorkRequest(BaseModel):
    description: Optional[str] = None
    attachments: List[str] = Field(default_factory=list)


class CancelJobRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class PenalizeRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class ApplicationResponse(BaseModel):
    """Application as seen by the employer and the applying student."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    job_id: UUID
    student_id: UUID
    cover_letter: Optional[str] = None
    proposed_budget: Optional[Decimal] = None
    profile_url: Optional[str] = None
    evaluation_score: int = 0
    shortlisted: bool = False
    status: str
    created_at: datetime
    inspection: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def collect_inspection(cls, data: Any) -> Any:
        """Fold the inspection_* columns into one sub-record."""
        if hasattr(data, "inspection_dict"):
            return {
                "id": data.id,
                "job_id": data.job_id,
                "student_id": data.student_id,
                "cover_letter": data.cover_letter,
                "proposed_budget": data.proposed_budget,
                "profile_url": data.profile_url,
                "evaluation_score": data.evaluation_score or 0,
                "shortlisted": bool(data.shortlisted),
                "status": data.status,
                "created_at": data.created_at,
                "inspection": data.inspection_dict(),
            }
        return data


class JobResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    budget: Decimal
    duration: Optional[str] = None
    skills_required: List[str] = Field(default_factory=list)
    employer_id: UUID
    job_type: str
    location: Optional[Dict[str, Any]] = None
    positions_required: int
    accepted_count: int
    assigned_student_id: Optional[UUID] = None
    assigned_students: List[str] = Field(default_factory=list)
    status: str
    escrow_amount: Decimal
    payment_released: bool
    student_accepted: bool
    student_approved: bool
    employer_approved: bool
    submission_requires_files: bool
    submission: Optional[Dict[str, Any]] = None
    shortlist_multiplier: int
    shortlist_window_hours: int
    shortlist_window_ends_at: Optional[datetime] = None
    shortlist_computed: bool
    shortlisted_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime


class JobDetailResponse(JobResponse):
    applications: List[ApplicationResponse] = Field(default_factory=list)
